"""
Watchlist 저장소.

Watchlist는 중복 없는 순서 있는 문자열 목록이며 key/value blob 저장소에
JSON 배열로 보관된다 (키: "watchList").

변경(add/remove/clear)은 asyncio.Lock으로 직렬화된다. 저장소 쓰기가 먼저
성공한 뒤에만 메모리의 튜플을 교체하므로, 읽는 쪽은 영속 상태와 어긋난
목록을 보지 않는다. 손상된 저장 데이터는 빈 목록으로 대체되며 예외를
전파하지 않는다.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any, Iterable, Protocol

import redis.asyncio as aioredis

from news_radar.utils.logger import get_logger

logger = get_logger(__name__)

WATCHLIST_KEY: str = "watchList"


class PersistenceCorruption(ValueError):
    """저장된 blob을 해석할 수 없을 때 발생하는 예외이다."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"corrupt blob for key {key!r}: {reason}")


def _loads(key: str, text: str | bytes) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as exc:
        # JSONDecodeError와 bytes 입력의 UnicodeDecodeError는 모두 ValueError이다.
        raise PersistenceCorruption(key, f"invalid JSON: {exc}") from exc


class BlobStore(Protocol):
    """JSON 호환 값을 저장하는 비동기 key/value 저장소."""

    async def get(self, key: str) -> Any: ...

    async def set(self, key: str, value: Any) -> None: ...


class JsonFileBlobStore:
    """JSON 객체 파일 하나에 키별 값을 저장한다.

    파일 I/O는 이벤트 루프를 막지 않도록 스레드로 위임한다. 쓰기는 임시
    파일에 기록한 뒤 os.replace로 교체한다.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise PersistenceCorruption(str(self.path), f"invalid UTF-8: {exc}") from exc
        if not text.strip():
            return {}
        data = _loads(str(self.path), text)
        if not isinstance(data, dict):
            raise PersistenceCorruption(str(self.path), "top-level value is not an object")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    async def get(self, key: str) -> Any:
        data = await asyncio.to_thread(self._read_all)
        return data.get(key)

    async def set(self, key: str, value: Any) -> None:
        def _update() -> None:
            try:
                data = self._read_all()
            except PersistenceCorruption:
                logger.warning("손상된 저장 파일을 덮어씀: %s", self.path)
                data = {}
            data[key] = value
            self._write_all(data)

        await asyncio.to_thread(_update)


class RedisBlobStore:
    """Redis 문자열 키에 JSON으로 직렬화한 값을 저장한다."""

    def __init__(self, redis_client: aioredis.Redis) -> None:
        self._redis = redis_client

    async def get(self, key: str) -> Any:
        # decode_responses=True 연결은 잘못된 UTF-8에서 UnicodeDecodeError를 낸다.
        try:
            raw = await self._redis.get(key)
        except UnicodeDecodeError as exc:
            raise PersistenceCorruption(key, f"invalid UTF-8: {exc}") from exc
        if raw is None:
            return None
        return _loads(key, raw)

    async def set(self, key: str, value: Any) -> None:
        await self._redis.set(key, json.dumps(value, ensure_ascii=False))


def decode_watchlist(key: str, raw: Any) -> tuple[str, ...]:
    """저장된 값을 Watchlist 튜플로 변환한다.

    None은 빈 목록이다. 배열이 아니면 PersistenceCorruption을 발생시킨다.
    문자열이 아니거나 비어 있는 항목은 건너뛰고 중복은 첫 항목만 남긴다.
    """
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise PersistenceCorruption(key, f"expected a list, got {type(raw).__name__}")
    return _dedupe(entry.strip() for entry in raw if isinstance(entry, str))


def _dedupe(entries: Iterable[str]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for entry in entries:
        if entry:
            seen.setdefault(entry, None)
    return tuple(seen)


class WatchlistStore:
    """Watchlist의 유일한 소유자.

    사용 예시:
        store = WatchlistStore(JsonFileBlobStore("data/watchlist.json"))
        await store.load()
        await store.add("AAPL")
        store.symbols  # ("AAPL",)
    """

    def __init__(self, blob_store: BlobStore, key: str = WATCHLIST_KEY) -> None:
        self._blob_store = blob_store
        self._key = key
        self._symbols: tuple[str, ...] = ()
        self._lock = asyncio.Lock()

    @property
    def symbols(self) -> tuple[str, ...]:
        """현재 Watchlist 스냅샷 (순서 유지)."""
        return self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    async def load(self) -> tuple[str, ...]:
        """저장소에서 Watchlist를 읽어 메모리 상태를 교체한다.

        손상되었거나 없는 데이터는 빈 목록으로 처리한다.
        """
        async with self._lock:
            try:
                raw = await self._blob_store.get(self._key)
                symbols = decode_watchlist(self._key, raw)
            except PersistenceCorruption as exc:
                logger.warning("Watchlist 데이터 손상, 빈 목록으로 시작: %s", exc)
                symbols = ()
            self._symbols = symbols

        logger.info("Watchlist 로드 완료: %d개 종목", len(symbols))
        return symbols

    async def add(self, symbol: str) -> bool:
        """종목을 추가한다. 이미 있거나 비어 있으면 False를 반환한다."""
        entry = symbol.strip()
        if not entry:
            return False
        async with self._lock:
            if entry in self._symbols:
                return False
            await self._commit(self._symbols + (entry,))
        logger.info("Watchlist 추가: %s", entry)
        return True

    async def remove(self, symbol: str) -> bool:
        """종목을 제거한다. 없으면 False를 반환한다."""
        async with self._lock:
            if symbol not in self._symbols:
                return False
            await self._commit(tuple(s for s in self._symbols if s != symbol))
        logger.info("Watchlist 제거: %s", symbol)
        return True

    async def clear(self) -> None:
        async with self._lock:
            await self._commit(())
        logger.info("Watchlist 초기화")

    async def _commit(self, symbols: tuple[str, ...]) -> None:
        # 쓰기가 실패하면 메모리 상태는 그대로 남는다.
        await self._blob_store.set(self._key, list(symbols))
        self._symbols = symbols
