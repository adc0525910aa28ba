"""
External API clients.

Thin aiohttp wrappers for Finnhub (symbol search, company news) and the
sentiment API. All transport failures are raised as TransportError.
"""

from news_radar.clients.base_client import BaseApiClient, TransportError
from news_radar.clients.finnhub_client import FinnhubClient
from news_radar.clients.sentiment_client import SentimentClient

__all__ = [
    "BaseApiClient",
    "FinnhubClient",
    "SentimentClient",
    "TransportError",
]
