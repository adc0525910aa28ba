"""
Watchlist fan-out orchestrator.

Runs the single-query pipeline once per tracked symbol (no enrichment, no
sort/top-N) and emits one WatchUpdate per symbol carrying the first
High Impact article in fetch order, or None for "no high-impact news".

Per-symbol failures are isolated: a failed fetch emits nothing, so the
display keeps that slot's prior state, and never aborts the fan-out.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, Sequence

from news_radar.news.models import (
    Article,
    ClassifiedArticle,
    ImpactLabel,
    WatchUpdate,
)
from news_radar.utils.logger import get_logger

if TYPE_CHECKING:
    from news_radar.orchestration.news_pipeline import NewsPipeline
    from news_radar.storage.watchlist_store import WatchlistStore

logger = get_logger(__name__)

WatchUpdateCallback = Callable[[WatchUpdate], Awaitable[None]]
WatchlistCallback = Callable[[Sequence[str]], Awaitable[None]]


def select_high_impact(items: Iterable[ClassifiedArticle]) -> Article | None:
    """Return the first High Impact article in fetch order, if any."""
    for item in items:
        if item.label is ImpactLabel.HIGH_IMPACT:
            return item.article
    return None


class WatchlistOrchestrator:
    """Owns the watchlist mutations and the per-symbol refresh fan-out."""

    def __init__(
        self,
        pipeline: NewsPipeline,
        store: WatchlistStore,
        on_update: WatchUpdateCallback,
        on_watchlist_changed: WatchlistCallback | None = None,
    ) -> None:
        self.pipeline = pipeline
        self.store = store
        self._on_update = on_update
        self._on_watchlist_changed = on_watchlist_changed

    # ------------------------------------------------------------------
    # Fan-out
    # ------------------------------------------------------------------

    async def refresh_all(self, symbols: Sequence[str] | None = None) -> None:
        """Refresh every symbol independently. Never raises.

        Args:
            symbols: Symbols to refresh. Defaults to the current watchlist.
        """
        targets = list(self.store.symbols if symbols is None else symbols)
        if not targets:
            logger.debug("Watchlist empty, nothing to refresh")
            return

        logger.info("Watchlist refresh started: %d symbols", len(targets))
        results = await asyncio.gather(
            *(self.refresh_symbol(symbol) for symbol in targets),
            return_exceptions=True,
        )

        failed = 0
        for symbol, result in zip(targets, results):
            if isinstance(result, BaseException):
                failed += 1
                logger.error("Watch refresh crashed for %s: %s", symbol, result)
            elif result is None:
                failed += 1
        logger.info(
            "Watchlist refresh finished: %d/%d updated",
            len(targets) - failed, len(targets),
        )

    async def refresh_symbol(self, symbol: str) -> WatchUpdate | None:
        """Refresh one slot. Returns the emitted update, or None if the fetch failed."""
        result = await self.pipeline.run(symbol, enrich=False)
        if not result.ok:
            logger.warning(
                "Watch refresh failed for %s, keeping previous slot: %s",
                symbol, result.error,
            )
            return None

        update = WatchUpdate(symbol=symbol, article=select_high_impact(result.articles))
        await self._on_update(update)
        return update

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add(self, symbol: str) -> bool:
        """Track ``symbol`` and refresh only its slot. No-op for duplicates."""
        entry = symbol.strip()
        if not entry:
            logger.debug("Ignoring empty watch entry")
            return False
        if not await self.store.add(entry):
            logger.debug("Watch entry %s already present", entry)
            return False

        await self._notify_watchlist()
        await self._refresh_isolated(entry)
        return True

    async def remove(self, symbol: str) -> bool:
        removed = await self.store.remove(symbol.strip())
        if removed:
            await self._notify_watchlist()
        return removed

    async def clear(self) -> None:
        await self.store.clear()
        await self._notify_watchlist()

    async def _refresh_isolated(self, symbol: str) -> None:
        try:
            await self.refresh_symbol(symbol)
        except Exception as exc:
            logger.error("Watch refresh crashed for %s: %s", symbol, exc, exc_info=True)

    async def _notify_watchlist(self) -> None:
        if self._on_watchlist_changed is not None:
            await self._on_watchlist_changed(self.store.symbols)
