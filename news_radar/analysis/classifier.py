"""
헤드라인 영향도 분류기.

키워드 규칙 테이블을 위에서부터 순서대로 평가하여 처음 일치하는 라벨을 반환한다.
고영향 규칙이 중립 규칙보다 먼저 평가되므로 두 집합에 모두 걸리는 헤드라인은
High Impact가 된다. 어떤 규칙에도 걸리지 않으면 FYI이다.

분류 기준:
    - High Impact: 실적, 인수합병, 소송, 파산, 가이던스 등 금융 이벤트
    - Neutral: 리포트, 분석, 전망, 목표주가, 커버리지
    - FYI: 그 외
"""

from __future__ import annotations

from dataclasses import dataclass

from news_radar.news.models import ImpactLabel

# ---------------------------------------------------------------------------
# 키워드 상수 (소문자, 부분 문자열 비교)
# ---------------------------------------------------------------------------

_HIGH_IMPACT_KEYWORDS: frozenset[str] = frozenset(
    {
        # 실적
        "earnings",
        "profit",
        "loss",
        "guidance",
        "dividend",
        # 기업 이벤트
        "merger",
        "acquisition",
        "bankruptcy",
        "recall",
        # 법적 리스크
        "lawsuit",
        "investigation",
        # 가격/등급 변동
        "plunge",
        "surge",
        "downgrade",
        "upgrade",
    }
)

_NEUTRAL_KEYWORDS: frozenset[str] = frozenset(
    {
        "report",
        "analysis",
        "forecast",
        "outlook",
        "price target",
        "coverage",
    }
)


@dataclass(frozen=True)
class ImpactRule:
    """키워드 집합 하나와 일치 시 부여할 라벨."""

    label: ImpactLabel
    keywords: frozenset[str]

    def matches(self, text: str) -> bool:
        """소문자 텍스트에 키워드가 하나라도 포함되면 True."""
        return any(keyword in text for keyword in self.keywords)


# 평가 순서가 곧 우선순위이다.
IMPACT_RULES: tuple[ImpactRule, ...] = (
    ImpactRule(ImpactLabel.HIGH_IMPACT, _HIGH_IMPACT_KEYWORDS),
    ImpactRule(ImpactLabel.NEUTRAL, _NEUTRAL_KEYWORDS),
)

DEFAULT_LABEL: ImpactLabel = ImpactLabel.FYI


def classify(
    headline: str | None,
    rules: tuple[ImpactRule, ...] = IMPACT_RULES,
) -> ImpactLabel:
    """헤드라인의 영향도 라벨을 반환한다.

    Args:
        headline: 기사 제목. None 또는 빈 문자열이면 FYI.
        rules: 평가할 규칙 테이블. 기본값은 IMPACT_RULES.

    Returns:
        처음 일치한 규칙의 라벨, 없으면 FYI.
    """
    if not headline:
        return DEFAULT_LABEL
    text = headline.lower()
    for rule in rules:
        if rule.matches(text):
            return rule.label
    return DEFAULT_LABEL
