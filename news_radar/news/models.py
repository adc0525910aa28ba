"""
뉴스 도메인 모델.

Finnhub에서 받은 기사, 영향도 라벨, 감성 판정, 파이프라인 결과를 정의한다.
기사는 생성 후 변경되지 않으며 저장되지 않는다. 라벨과 판정은 표시 단계에서만
일시적으로 붙는다.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ImpactLabel(str, Enum):
    """헤드라인의 시장 영향도 라벨.

    HIGH_IMPACT: 실적/인수합병/소송 등 금융 이벤트
    NEUTRAL: 리포트/분석/전망 기사
    FYI: 그 외 참고용 기사 (감성 보강 대상)
    """

    HIGH_IMPACT = "High Impact"
    NEUTRAL = "Neutral"
    FYI = "FYI"

    @property
    def rank(self) -> int:
        """영향도 정렬 순위. 낮을수록 먼저 노출된다."""
        return _IMPACT_RANK[self]


_IMPACT_RANK: dict[ImpactLabel, int] = {
    ImpactLabel.HIGH_IMPACT: 0,
    ImpactLabel.NEUTRAL: 1,
    ImpactLabel.FYI: 2,
}


class SentimentVerdict(str, Enum):
    """FYI 기사에 대한 감성 판정."""

    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class SortMode(str, Enum):
    """검색 결과 정렬 기준. 이미 조회된 기사 묶음의 표시 순서만 바꾼다."""

    BY_DATE = "date"
    BY_IMPACT = "impact"


class PipelineStatus(str, Enum):
    """단일 쿼리 파이프라인의 종료 상태."""

    ARTICLES = "articles"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class Article:
    """Finnhub company-news 응답 한 건.

    Attributes:
        headline: 기사 제목. 누락 시 빈 문자열.
        url: 원문 링크. 누락 시 빈 문자열.
        published_at: 게시 시각 (UTC). 누락/파싱 실패 시 None.
        source: 출처명 (선택).
        summary: 요약 (선택). 분류에는 사용하지 않는다.
    """

    headline: str
    url: str
    published_at: datetime | None
    source: str = ""
    summary: str = ""


@dataclass(frozen=True)
class ClassifiedArticle:
    """영향도 라벨이 붙은 기사.

    correlation_id는 감성 보강이 예약된 FYI 기사에만 존재한다.
    """

    article: Article
    label: ImpactLabel
    correlation_id: str | None = None


@dataclass(frozen=True)
class SentimentUpdate:
    """correlation id로 라우팅되는 감성 보강 결과."""

    correlation_id: str
    verdict: SentimentVerdict


@dataclass(frozen=True)
class WatchUpdate:
    """Watchlist 슬롯 갱신. article이 None이면 "고영향 뉴스 없음"이다."""

    symbol: str
    article: Article | None


@dataclass
class PipelineResult:
    """단일 쿼리 파이프라인 실행 결과이다.

    Attributes:
        status: ARTICLES / EMPTY / ERROR.
        query: 원본 사용자 입력.
        symbol: 해석된 티커. resolve 단계에서 실패하면 None.
        articles: 분류된 기사 목록 (조회 순서 유지).
        error: 실패 사유 (ERROR일 때만).
    """

    status: PipelineStatus
    query: str
    symbol: str | None = None
    articles: list[ClassifiedArticle] = field(default_factory=list)
    error: str | None = None

    @classmethod
    def success(
        cls, query: str, symbol: str, articles: list[ClassifiedArticle]
    ) -> PipelineResult:
        status = PipelineStatus.ARTICLES if articles else PipelineStatus.EMPTY
        return cls(status=status, query=query, symbol=symbol, articles=articles)

    @classmethod
    def failure(cls, query: str, error: str, symbol: str | None = None) -> PipelineResult:
        return cls(status=PipelineStatus.ERROR, query=query, symbol=symbol, error=error)

    @property
    def ok(self) -> bool:
        return self.status is not PipelineStatus.ERROR
