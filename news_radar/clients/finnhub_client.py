"""
Finnhub API 클라이언트.

심볼 검색(/search)과 회사 뉴스(/company-news) 두 엔드포인트만 감싼다.
응답 형태 검증은 최소한으로 하고, 해석은 SymbolResolver/NewsFetcher가 맡는다.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import aiohttp

from news_radar.clients.base_client import BaseApiClient
from news_radar.utils.config import get_settings
from news_radar.utils.logger import get_logger

logger = get_logger(__name__)


class FinnhubClient(BaseApiClient):
    """Finnhub REST API 클라이언트.

    Attributes:
        _api_key: Finnhub API 인증 키.
        _base_url: API 베이스 URL.
    """

    name = "Finnhub"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(session)
        settings = get_settings()
        self._api_key: str = api_key if api_key is not None else settings.finnhub_api_key
        self._base_url: str = (base_url or settings.finnhub_base_url).rstrip("/")
        if not self._api_key:
            logger.warning("[%s] API 키가 설정되지 않았다. 요청이 거부될 수 있다", self.name)

    async def search(self, query: str) -> list[dict[str, Any]]:
        """심볼 검색 결과 후보 목록을 반환한다.

        GET https://finnhub.io/api/v1/search?q={query}&token={key}

        Args:
            query: 사용자 입력 원문.

        Returns:
            후보 dict 리스트 (순서 유지). 응답 형태가 예상과 다르면 빈 리스트.
        """
        data = await self._get_json(
            f"{self._base_url}/search",
            params={"q": query, "token": self._api_key},
        )
        if not isinstance(data, dict):
            logger.warning("[%s] 검색 응답이 객체가 아니다: %s", self.name, type(data))
            return []

        result = data.get("result")
        if not isinstance(result, list):
            return []
        return [item for item in result if isinstance(item, dict)]

    async def company_news(
        self, symbol: str, date_from: date, date_to: date
    ) -> list[Any]:
        """특정 심볼의 회사 뉴스 원시 응답을 반환한다.

        GET https://finnhub.io/api/v1/company-news?symbol={sym}&from={date}&to={date}&token={key}

        Args:
            symbol: 조회할 티커 심볼.
            date_from: 조회 시작일 (포함).
            date_to: 조회 종료일 (포함).

        Returns:
            원시 기사 리스트. 응답이 리스트가 아니면 빈 리스트.
        """
        params = {
            "symbol": symbol,
            "from": date_from.strftime("%Y-%m-%d"),
            "to": date_to.strftime("%Y-%m-%d"),
            "token": self._api_key,
        }
        data = await self._get_json(f"{self._base_url}/company-news", params=params)

        if not isinstance(data, list):
            logger.warning(
                "[%s] 회사 뉴스 응답이 리스트가 아니다 (%s): %s",
                self.name, symbol, type(data),
            )
            return []
        return data
