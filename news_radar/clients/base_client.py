"""
Abstract base class for all HTTP collaborators.

Every concrete client (Finnhub search/news, sentiment API) inherits from
BaseApiClient and goes through `_get_json` / `_post_json`, so transport
failures surface uniformly as TransportError.
"""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp

from news_radar.utils.config import get_settings
from news_radar.utils.logger import get_logger

logger = get_logger(__name__)


class TransportError(Exception):
    """외부 API 호출 실패 예외.

    네트워크 오류, 타임아웃, 200이 아닌 응답, JSON 파싱 불가 응답을 모두 포함한다.

    Attributes:
        status: HTTP 상태 코드. 응답을 받지 못했으면 None.
    """

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


class BaseApiClient:
    """Base for aiohttp-backed API clients.

    Attributes:
        name: Human-readable client name used in log lines.
    """

    name: str = "api"

    # Shared aiohttp session across all client instances
    _shared_session: aiohttp.ClientSession | None = None

    def __init__(self, session: aiohttp.ClientSession | None = None) -> None:
        self._session = session

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET 요청 후 JSON 본문을 반환한다.

        Raises:
            TransportError: 연결 실패, 타임아웃, 비정상 상태 코드, JSON 파싱 실패.
        """
        session = await self._resolve_session()
        try:
            async with session.get(url, params=params) as resp:
                return await self._read_json(resp)
        except TransportError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"[{self.name}] GET 실패: {e}") from e

    async def _post_json(self, url: str, payload: dict[str, Any]) -> Any:
        """JSON POST 요청 후 JSON 본문을 반환한다.

        Raises:
            TransportError: 연결 실패, 타임아웃, 비정상 상태 코드, JSON 파싱 실패.
        """
        session = await self._resolve_session()
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        try:
            async with session.post(url, json=payload, headers=headers) as resp:
                return await self._read_json(resp)
        except TransportError:
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise TransportError(f"[{self.name}] POST 실패: {e}") from e

    async def _read_json(self, resp: aiohttp.ClientResponse) -> Any:
        if resp.status != 200:
            logger.warning("[%s] API 응답 오류: status=%d", self.name, resp.status)
            raise TransportError(
                f"[{self.name}] unexpected status {resp.status}", status=resp.status
            )
        try:
            return await resp.json(content_type=None)
        except ValueError as e:
            raise TransportError(
                f"[{self.name}] JSON 파싱 실패: {e}", status=resp.status
            ) from e

    async def _resolve_session(self) -> aiohttp.ClientSession:
        if self._session is not None:
            return self._session
        return await self.get_session()

    @classmethod
    async def get_session(cls) -> aiohttp.ClientSession:
        """Return shared aiohttp session, creating one if needed."""
        shared = BaseApiClient._shared_session
        if shared is None or shared.closed:
            settings = get_settings()
            timeout = aiohttp.ClientTimeout(
                total=settings.http_timeout_total,
                connect=settings.http_timeout_connect,
            )
            BaseApiClient._shared_session = aiohttp.ClientSession(
                timeout=timeout,
                headers={"User-Agent": "NewsRadar/1.0 (Ticker News Monitor)"},
            )
        return BaseApiClient._shared_session

    @classmethod
    async def close_session(cls) -> None:
        """Close the shared aiohttp session."""
        if BaseApiClient._shared_session is not None and not BaseApiClient._shared_session.closed:
            await BaseApiClient._shared_session.close()
        BaseApiClient._shared_session = None
