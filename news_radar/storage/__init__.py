"""
저장소 모듈 (Watchlist blob 저장소 + Redis 연결)
"""
from news_radar.storage.connection import close_redis, get_redis
from news_radar.storage.watchlist_store import (
    WATCHLIST_KEY,
    BlobStore,
    JsonFileBlobStore,
    PersistenceCorruption,
    RedisBlobStore,
    WatchlistStore,
    decode_watchlist,
)

__all__ = [
    "BlobStore",
    "JsonFileBlobStore",
    "PersistenceCorruption",
    "RedisBlobStore",
    "WATCHLIST_KEY",
    "WatchlistStore",
    "close_redis",
    "decode_watchlist",
    "get_redis",
]
