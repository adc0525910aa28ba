"""
Sentiment API client.

POSTs a single headline to the sentim-api endpoint and returns the raw
verdict string from ``result.type``. Mapping to SentimentVerdict happens
in SentimentEnricher.
"""

from __future__ import annotations

from typing import Any

import aiohttp

from news_radar.clients.base_client import BaseApiClient
from news_radar.utils.config import get_settings
from news_radar.utils.logger import get_logger

logger = get_logger(__name__)


class SentimentClient(BaseApiClient):
    """Text tone classification over HTTP."""

    name = "Sentiment"

    def __init__(
        self,
        api_url: str | None = None,
        session: aiohttp.ClientSession | None = None,
    ) -> None:
        super().__init__(session)
        self._api_url = api_url or get_settings().sentiment_api_url

    async def classify_text(self, text: str) -> str | None:
        """Return the tone string for ``text``, or None if the body has none.

        Raises:
            TransportError: on any transport-level failure.
        """
        data: Any = await self._post_json(self._api_url, {"text": text})
        if not isinstance(data, dict):
            logger.debug("[%s] Response is not an object: %s", self.name, type(data))
            return None
        result = data.get("result")
        if not isinstance(result, dict):
            return None
        verdict = result.get("type")
        return verdict if isinstance(verdict, str) else None
