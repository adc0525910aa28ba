"""
FYI 헤드라인 감성 보강기.

헤드라인 하나를 감성 API로 보내 positive/negative/neutral 판정을 받는다.
알 수 없는 판정값은 NEUTRAL로 정규화한다. 전송 실패 시 폴백은 호출자
(NewsPipeline)의 정책이므로 여기서는 TransportError를 그대로 전파한다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from news_radar.news.models import SentimentVerdict
from news_radar.utils.logger import get_logger

if TYPE_CHECKING:
    from news_radar.clients.sentiment_client import SentimentClient

logger = get_logger(__name__)

_DEFAULT_VERDICT: SentimentVerdict = SentimentVerdict.NEUTRAL


def normalize_verdict(raw: str | None) -> SentimentVerdict:
    """API 판정 문자열을 SentimentVerdict로 변환한다. 인식 불가 시 NEUTRAL."""
    if not raw:
        return _DEFAULT_VERDICT
    try:
        return SentimentVerdict(raw.strip().lower())
    except ValueError:
        logger.debug("알 수 없는 감성 판정값 %r, 기본값 %s 사용", raw, _DEFAULT_VERDICT.value)
        return _DEFAULT_VERDICT


class SentimentEnricher:
    """헤드라인 단건 감성 분류. 배치/순서 보장 없음."""

    def __init__(self, client: SentimentClient) -> None:
        self._client = client

    async def enrich(self, headline: str) -> SentimentVerdict:
        """헤드라인의 감성 판정을 반환한다.

        Raises:
            TransportError: 감성 API 호출이 실패한 경우.
        """
        raw = await self._client.classify_text(headline)
        return normalize_verdict(raw)
