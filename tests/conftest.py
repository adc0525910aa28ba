import pytest

from fakes import FakeFinnhubClient, FakeSentimentClient, MemoryBlobStore
from news_radar.storage.watchlist_store import WatchlistStore


@pytest.fixture
def finnhub() -> FakeFinnhubClient:
    return FakeFinnhubClient()


@pytest.fixture
def sentiment() -> FakeSentimentClient:
    return FakeSentimentClient()


@pytest.fixture
def blob_store() -> MemoryBlobStore:
    return MemoryBlobStore()


@pytest.fixture
def watchlist_store(blob_store: MemoryBlobStore) -> WatchlistStore:
    return WatchlistStore(blob_store)
