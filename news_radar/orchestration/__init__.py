"""
오케스트레이션 패키지.

단일 쿼리 파이프라인, watchlist fan-out, 검색 결과 표시 정책을 제공한다.
"""
from news_radar.orchestration.news_pipeline import NewsPipeline
from news_radar.orchestration.presentation import ArticleBatch, sort_articles
from news_radar.orchestration.watchlist_orchestrator import (
    WatchlistOrchestrator,
    select_high_impact,
)

__all__ = [
    "ArticleBatch",
    "NewsPipeline",
    "WatchlistOrchestrator",
    "select_high_impact",
    "sort_articles",
]
