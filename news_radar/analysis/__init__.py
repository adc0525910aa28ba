"""
분석 모듈 (영향도 분류 규칙 + 감성 보강)
"""
from news_radar.analysis.classifier import IMPACT_RULES, ImpactRule, classify
from news_radar.analysis.sentiment_enricher import SentimentEnricher, normalize_verdict

__all__ = [
    "IMPACT_RULES",
    "ImpactRule",
    "SentimentEnricher",
    "classify",
    "normalize_verdict",
]
