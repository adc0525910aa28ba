"""
회사명 → 티커 심볼 해석기.

Finnhub 검색 결과의 첫 번째 후보 심볼을 사용한다. 후보가 없으면
입력값을 대문자로 바꿔 티커로 간주한다. 이 폴백은 예외를 던지지 않으며,
전송 계층 실패(TransportError)만 호출자에게 전파된다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from news_radar.utils.logger import get_logger

if TYPE_CHECKING:
    from news_radar.clients.finnhub_client import FinnhubClient

logger = get_logger(__name__)


def fallback_symbol(query: str) -> str:
    """검색 후보가 없을 때 사용할 리터럴 티커를 만든다."""
    return query.strip().upper()


class SymbolResolver:
    """자유 입력 쿼리를 티커 심볼로 변환한다."""

    def __init__(self, search_client: FinnhubClient) -> None:
        self._client = search_client

    async def resolve(self, query: str) -> str:
        """쿼리를 심볼로 해석한다.

        Args:
            query: 사용자 입력 원문 (예: "apple", "TSLA").

        Returns:
            첫 번째 후보의 심볼, 없으면 대문자 쿼리.

        Raises:
            TransportError: 검색 API 호출 자체가 실패한 경우.
        """
        candidates = await self._client.search(query)
        for candidate in candidates[:1]:
            symbol = candidate.get("symbol") if isinstance(candidate, dict) else None
            if isinstance(symbol, str) and symbol.strip():
                logger.debug("심볼 해석: %r -> %s", query, symbol)
                return symbol.strip()

        symbol = fallback_symbol(query)
        logger.debug("검색 후보 없음, 입력값을 티커로 사용: %r -> %s", query, symbol)
        return symbol
