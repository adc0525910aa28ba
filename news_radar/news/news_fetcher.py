"""
회사 뉴스 조회기.

오늘을 포함한 최근 N일(기본 7일) 달력 날짜 윈도우로 Finnhub 회사 뉴스를
조회하여 Article 리스트로 변환한다. 결과는 필터링/정렬하지 않는다.
빈 리스트는 정상 결과이며 전송 실패(TransportError)와 구별된다.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any, Callable

from news_radar.news.models import Article
from news_radar.utils.logger import get_logger

if TYPE_CHECKING:
    from news_radar.clients.finnhub_client import FinnhubClient

logger = get_logger(__name__)

_DEFAULT_WINDOW_DAYS: int = 7


def _utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def news_window(now: datetime, days: int = _DEFAULT_WINDOW_DAYS) -> tuple[date, date]:
    """조회 윈도우 (from, to)를 날짜 단위로 계산한다.

    to는 now의 UTC 날짜, from은 그로부터 days일 전 날짜이다. 시각은 버린다.
    """
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    date_to = now.date()
    date_from = (now - timedelta(days=days)).date()
    return date_from, date_to


def parse_article(item: Any) -> Article | None:
    """Finnhub 기사 dict를 Article로 변환한다.

    Finnhub 응답 필드:
        - headline: 제목
        - url: 원문 링크
        - datetime: Unix timestamp (초)
        - source: 출처명
        - summary: 요약

    필드 누락은 오류가 아니다. dict가 아닌 항목만 None을 반환한다.
    """
    if not isinstance(item, dict):
        return None

    published_at: datetime | None = None
    unix_ts = item.get("datetime")
    if isinstance(unix_ts, (int, float)) and not isinstance(unix_ts, bool) and unix_ts > 0:
        try:
            published_at = datetime.fromtimestamp(unix_ts, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            published_at = None

    return Article(
        headline=_as_text(item.get("headline")),
        url=_as_text(item.get("url")),
        published_at=published_at,
        source=_as_text(item.get("source")),
        summary=_as_text(item.get("summary")),
    )


def _as_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


class NewsFetcher:
    """심볼별 최근 뉴스를 조회한다."""

    def __init__(
        self,
        news_client: FinnhubClient,
        window_days: int = _DEFAULT_WINDOW_DAYS,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """NewsFetcher 초기화.

        Args:
            news_client: company_news(symbol, date_from, date_to)를 제공하는 클라이언트.
            window_days: 조회 윈도우 일수.
            clock: 현재 시각 공급자. 테스트에서 고정 시각을 주입한다.
        """
        self._client = news_client
        self._window_days = window_days
        self._clock = clock

    async def fetch(self, symbol: str) -> list[Article]:
        """심볼의 최근 기사 목록을 조회 순서 그대로 반환한다.

        Raises:
            TransportError: 뉴스 API 호출이 실패한 경우.
        """
        date_from, date_to = news_window(self._clock(), self._window_days)
        raw_items = await self._client.company_news(symbol, date_from, date_to)

        articles: list[Article] = []
        skipped = 0
        for item in raw_items:
            article = parse_article(item)
            if article is None:
                skipped += 1
                continue
            articles.append(article)

        if skipped:
            logger.debug("[%s] 형식이 맞지 않는 항목 %d건 건너뜀", symbol, skipped)
        logger.info(
            "[%s] 뉴스 %d건 조회 (%s ~ %s)", symbol, len(articles), date_from, date_to
        )
        return articles
