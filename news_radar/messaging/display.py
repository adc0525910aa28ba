"""
Reference display consumer for the MessageChannel.

DisplaySlots holds everything the untrusted display side knows: one search
slot and one slot per watched symbol. It only talks to the backend through
plain dict requests and only learns results through outbound events. Any
event whose tag does not match a live slot is dropped without error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from news_radar.messaging.protocol import (
    SearchRequest,
    SearchResultEvent,
    SentimentEvent,
    WatchAddRequest,
    WatchClearRequest,
    WatchlistEvent,
    WatchRefreshRequest,
    WatchRemoveRequest,
    WatchUpdateEvent,
    parse_outbound,
)
from news_radar.news.models import (
    Article,
    ImpactLabel,
    SentimentVerdict,
    SortMode,
)
from news_radar.orchestration.presentation import DEFAULT_TOP_N, ArticleBatch
from news_radar.utils.logger import get_logger

if TYPE_CHECKING:
    from news_radar.messaging.channel import MessageChannel

logger = get_logger(__name__)


def display_label(label: ImpactLabel, verdict: SentimentVerdict | None = None) -> str:
    """Card label text, e.g. "High Impact" or "FYI – Positive"."""
    if label is ImpactLabel.FYI and verdict is not None:
        return f"{label.value} – {verdict.value.capitalize()}"
    return label.value


class SlotStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ARTICLES = "articles"
    EMPTY = "empty"
    ERROR = "error"
    NO_HIGH_IMPACT = "noHighImpact"


@dataclass(frozen=True)
class DisplayCard:
    headline: str
    url: str
    published_at: datetime | None
    label: str
    correlation_id: str | None = None


@dataclass
class SearchSlot:
    """Search results area. ``batch`` keeps the whole fetch for re-sorting."""

    query: str = ""
    status: SlotStatus = SlotStatus.IDLE
    symbol: str | None = None
    batch: ArticleBatch = field(default_factory=lambda: ArticleBatch(()))
    error: str | None = None
    verdicts: dict[str, SentimentVerdict] = field(default_factory=dict)

    @property
    def live(self) -> bool:
        return self.status is not SlotStatus.IDLE


@dataclass
class WatchSlot:
    symbol: str
    status: SlotStatus = SlotStatus.LOADING
    article: Article | None = None


class DisplaySlots:
    """Display-side state fed exclusively by channel events."""

    def __init__(self, channel: MessageChannel, top_n: int = DEFAULT_TOP_N) -> None:
        self.channel = channel
        self.top_n = top_n
        self.sort_mode = SortMode.BY_DATE
        self.search_slot = SearchSlot()
        self.watch_slots: dict[str, WatchSlot] = {}
        self.dropped = 0
        channel.subscribe(self.receive)

    # ------------------------------------------------------------------
    # Requests
    # ------------------------------------------------------------------

    def search(self, query: str) -> None:
        query = query.strip()
        if not query:
            return
        self.search_slot = SearchSlot(query=query, status=SlotStatus.LOADING)
        self.channel.send(SearchRequest(query=query).to_wire())

    def refresh_search(self) -> None:
        if self.search_slot.query:
            self.search(self.search_slot.query)

    def clear_search(self) -> None:
        self.search_slot = SearchSlot()

    def set_sort_mode(self, mode: SortMode) -> None:
        """Re-orders the retained batch. Never re-fetches."""
        self.sort_mode = SortMode(mode)

    def add_watch(self, symbol: str) -> None:
        entry = symbol.strip()
        if not entry:
            return
        self.watch_slots.setdefault(entry, WatchSlot(entry))
        self.channel.send(WatchAddRequest(symbol=entry).to_wire())

    def remove_watch(self, symbol: str) -> None:
        entry = symbol.strip()
        if not entry:
            return
        self.watch_slots.pop(entry, None)
        self.channel.send(WatchRemoveRequest(symbol=entry).to_wire())

    def clear_watch(self) -> None:
        self.watch_slots.clear()
        self.channel.send(WatchClearRequest().to_wire())

    def refresh_watch(self) -> None:
        """Slots keep their current state until an update arrives for them."""
        self.channel.send(WatchRefreshRequest().to_wire())

    # ------------------------------------------------------------------
    # Rendering helpers
    # ------------------------------------------------------------------

    def visible_cards(self) -> list[DisplayCard]:
        slot = self.search_slot
        if slot.status is not SlotStatus.ARTICLES:
            return []
        cards = []
        for item in slot.batch.visible(self.sort_mode, self.top_n):
            verdict = slot.verdicts.get(item.correlation_id) if item.correlation_id else None
            cards.append(
                DisplayCard(
                    headline=item.article.headline,
                    url=item.article.url,
                    published_at=item.article.published_at,
                    label=display_label(item.label, verdict),
                    correlation_id=item.correlation_id,
                )
            )
        return cards

    def watch_headline(self, symbol: str) -> str | None:
        slot = self.watch_slots.get(symbol)
        if slot is None or slot.article is None:
            return None
        return slot.article.headline

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    async def receive(self, payload: dict[str, Any]) -> None:
        try:
            event = parse_outbound(payload)
        except ValidationError:
            logger.debug("Dropping unrecognised event: %s", payload)
            self.dropped += 1
            return

        if isinstance(event, SearchResultEvent):
            self._on_search_result(event)
        elif isinstance(event, SentimentEvent):
            self._on_sentiment(event)
        elif isinstance(event, WatchUpdateEvent):
            self._on_watch_update(event)
        elif isinstance(event, WatchlistEvent):
            self._on_watchlist(event)

    def _drop(self, reason: str, tag: str) -> None:
        logger.debug("Dropping %s event for %s", reason, tag)
        self.dropped += 1

    def _on_search_result(self, event: SearchResultEvent) -> None:
        slot = self.search_slot
        if not slot.live:
            self._drop("search", event.for_query)
            return
        # The last response received wins, whichever query it answers.
        slot.symbol = event.symbol
        slot.verdicts = {}
        if event.error is not None:
            slot.status = SlotStatus.ERROR
            slot.error = event.error
            slot.batch = ArticleBatch(())
        elif event.empty or not event.articles:
            slot.status = SlotStatus.EMPTY
            slot.error = None
            slot.batch = ArticleBatch(())
        else:
            slot.status = SlotStatus.ARTICLES
            slot.error = None
            slot.batch = ArticleBatch([a.to_classified() for a in event.articles])

    def _on_sentiment(self, event: SentimentEvent) -> None:
        slot = self.search_slot
        if event.correlation_id not in slot.batch.correlation_ids():
            self._drop("sentiment", event.correlation_id)
            return
        slot.verdicts[event.correlation_id] = event.verdict

    def _on_watch_update(self, event: WatchUpdateEvent) -> None:
        slot = self.watch_slots.get(event.symbol)
        if slot is None:
            self._drop("watch", event.symbol)
            return
        if event.article is None:
            slot.status = SlotStatus.NO_HIGH_IMPACT
            slot.article = None
        else:
            slot.status = SlotStatus.ARTICLES
            slot.article = event.article.to_article()

    def _on_watchlist(self, event: WatchlistEvent) -> None:
        current = self.watch_slots
        self.watch_slots = {
            symbol: current.get(symbol) or WatchSlot(symbol) for symbol in event.symbols
        }
