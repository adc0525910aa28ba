"""
뉴스 도메인 패키지 (모델 + 심볼 해석 + 기사 조회)
"""
from news_radar.news.models import (
    Article,
    ClassifiedArticle,
    ImpactLabel,
    PipelineResult,
    PipelineStatus,
    SentimentUpdate,
    SentimentVerdict,
    SortMode,
    WatchUpdate,
)
from news_radar.news.news_fetcher import NewsFetcher, news_window
from news_radar.news.symbol_resolver import SymbolResolver

__all__ = [
    "Article",
    "ClassifiedArticle",
    "ImpactLabel",
    "NewsFetcher",
    "PipelineResult",
    "PipelineStatus",
    "SentimentUpdate",
    "SentimentVerdict",
    "SortMode",
    "SymbolResolver",
    "WatchUpdate",
    "news_window",
]
