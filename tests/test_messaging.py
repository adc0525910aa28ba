import pytest
from pydantic import ValidationError

from fakes import FakeFinnhubClient, FakeSentimentClient, MemoryBlobStore, build_pipeline, news_item
from news_radar.messaging.channel import MessageChannel
from news_radar.messaging.display import DisplaySlots, SlotStatus, display_label
from news_radar.messaging.protocol import (
    SearchRequest,
    SearchResultEvent,
    WatchUpdateEvent,
    parse_inbound,
)
from news_radar.messaging.router import BackgroundRouter
from news_radar.news.models import (
    ClassifiedArticle,
    ImpactLabel,
    PipelineResult,
    SentimentVerdict,
    SortMode,
    WatchUpdate,
)
from news_radar.news.news_fetcher import parse_article
from news_radar.storage.watchlist_store import WATCHLIST_KEY, WatchlistStore


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

def test_parse_inbound_discriminates_on_type():
    assert isinstance(parse_inbound({"type": "search", "query": "apple"}), SearchRequest)
    assert parse_inbound({"type": "watchAdd", "symbol": "AAPL"}).symbol == "AAPL"


@pytest.mark.parametrize(
    "payload",
    [{"type": "explode"}, {"type": "search"}, {"query": "apple"}, "search apple"],
)
def test_parse_inbound_rejects_invalid(payload):
    with pytest.raises(ValidationError):
        parse_inbound(payload)


def test_search_result_wire_format_uses_camel_case():
    article = parse_article(news_item("Apple hosts developer event", ts=1710504000, url="https://a"))
    result = PipelineResult.success(
        "apple", "AAPL", [ClassifiedArticle(article, ImpactLabel.FYI, "cid-1")]
    )
    wire = SearchResultEvent.from_result(result).to_wire()

    assert wire["type"] == "searchResult"
    assert wire["forQuery"] == "apple"
    assert wire["empty"] is False
    card = wire["articles"][0]
    assert card["correlationId"] == "cid-1"
    assert card["label"] == "FYI"
    assert card["publishedAt"].startswith("2024-03-15T12:00:00")


def test_error_and_empty_results_carry_no_articles():
    error = SearchResultEvent.from_result(PipelineResult.failure("tsla", "fetch: down", "TSLA"))
    empty = SearchResultEvent.from_result(PipelineResult.success("ibm", "IBM", []))

    assert error.to_wire()["error"] == "fetch: down"
    assert error.articles is None
    assert empty.to_wire()["empty"] is True


def test_watch_update_without_article_is_no_high_impact():
    wire = WatchUpdateEvent.from_update(WatchUpdate("MSFT", None)).to_wire()
    assert wire == {"type": "watchUpdate", "symbol": "MSFT", "article": None, "noHighImpact": True}


def test_display_label():
    assert display_label(ImpactLabel.FYI, SentimentVerdict.POSITIVE) == "FYI – Positive"
    assert display_label(ImpactLabel.FYI) == "FYI"
    assert display_label(ImpactLabel.HIGH_IMPACT, SentimentVerdict.NEGATIVE) == "High Impact"


# ---------------------------------------------------------------------------
# Channel
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_send_returns_before_handler_runs():
    handled = []

    async def handler(request):
        handled.append(request)

    channel = MessageChannel(handler)
    channel.send({"type": "watchRefresh"})
    assert handled == []
    assert channel.pending == 1

    await channel.drain()
    assert len(handled) == 1


@pytest.mark.asyncio
async def test_invalid_request_is_dropped():
    async def handler(request):
        raise AssertionError("must not be called")

    channel = MessageChannel(handler)
    channel.send({"type": "bogus"})
    assert channel.pending == 0


@pytest.mark.asyncio
async def test_request_without_handler_is_dropped_and_rebind_keeps_scheduled_handler():
    channel = MessageChannel()
    channel.send({"type": "watchRefresh"})
    assert channel.pending == 0

    first, second = [], []

    async def handle_first(request):
        first.append(request)

    async def handle_second(request):
        second.append(request)

    channel.bind(handle_first)
    channel.send({"type": "watchRefresh"})
    channel.bind(handle_second)
    await channel.drain()

    assert len(first) == 1
    assert second == []


@pytest.mark.asyncio
async def test_handler_failure_is_contained():
    async def handler(request):
        raise RuntimeError("boom")

    channel = MessageChannel(handler)
    channel.send({"type": "watchClear"})
    await channel.drain()


@pytest.mark.asyncio
async def test_emit_reaches_every_consumer_with_own_copy():
    channel = MessageChannel()
    seen_a, seen_b = [], []

    async def consumer_a(payload):
        payload["symbol"] = "MUTATED"
        seen_a.append(payload)

    async def consumer_b(payload):
        seen_b.append(payload)

    async def broken(payload):
        raise RuntimeError("consumer bug")

    for consumer in (consumer_a, broken, consumer_b):
        channel.subscribe(consumer)
    await channel.emit(WatchUpdateEvent.from_update(WatchUpdate("AAPL", None)))

    assert seen_a[0]["symbol"] == "MUTATED"
    assert seen_b[0]["symbol"] == "AAPL"

    channel.unsubscribe(consumer_a)
    await channel.emit(WatchUpdateEvent.from_update(WatchUpdate("TSLA", None)))
    assert len(seen_a) == 1
    assert len(seen_b) == 2


# ---------------------------------------------------------------------------
# Router + display, end to end
# ---------------------------------------------------------------------------

def _wire(client, sentiment=None, store=None):
    if store is None:
        store = WatchlistStore(MemoryBlobStore())
    channel = MessageChannel()
    router = BackgroundRouter(build_pipeline(client, sentiment), store, channel)
    display = DisplaySlots(channel)
    return router, display


def _apple_news():
    return [
        news_item("Apple hosts developer event", ts=1710500000),
        news_item("Apple posts record quarterly earnings", ts=1710400000),
        news_item("Analysts publish outlook for iPhone sales", ts=1710300000),
        news_item("Apple opens new store in Seoul", ts=1710200000),
        news_item("Apple sponsors film festival", ts=1710100000),
        news_item("Apple faces lawsuit over patents", ts=1700000000),
    ]


@pytest.mark.asyncio
async def test_search_renders_cards_then_applies_verdicts():
    client = FakeFinnhubClient(candidates={"apple": [{"symbol": "AAPL"}]}, news={"AAPL": _apple_news()})
    sentiment = FakeSentimentClient(
        verdicts={
            "Apple hosts developer event": "positive",
            "Apple opens new store in Seoul": "negative",
        }
    )
    router, display = _wire(client, sentiment)

    display.search("apple")
    await router.drain()

    slot = display.search_slot
    assert slot.status is SlotStatus.ARTICLES
    assert slot.symbol == "AAPL"
    assert len(slot.batch) == 6

    labels = [card.label for card in display.visible_cards()]
    assert labels == [
        "FYI – Positive",
        "High Impact",
        "Neutral",
        "FYI – Negative",
        "FYI – Neutral",
    ]


@pytest.mark.asyncio
async def test_sort_switch_does_not_refetch():
    client = FakeFinnhubClient(candidates={"apple": [{"symbol": "AAPL"}]}, news={"AAPL": _apple_news()})
    router, display = _wire(client, FakeSentimentClient())

    display.search("apple")
    await router.drain()
    calls = len(client.news_calls)

    display.set_sort_mode(SortMode.BY_IMPACT)
    headlines = [card.headline for card in display.visible_cards()]

    assert headlines[:2] == [
        "Apple posts record quarterly earnings",
        "Apple faces lawsuit over patents",
    ]
    assert len(client.news_calls) == calls


@pytest.mark.asyncio
async def test_refresh_search_refetches_last_query():
    client = FakeFinnhubClient(news={"AAPL": _apple_news()})
    router, display = _wire(client)

    display.search("aapl")
    await router.drain()
    client.news["AAPL"] = [news_item("Apple faces lawsuit over patents", ts=1710500000)]
    display.refresh_search()
    await router.drain()

    assert len(client.news_calls) == 2
    assert [card.label for card in display.visible_cards()] == ["High Impact"]


@pytest.mark.asyncio
async def test_search_error_and_empty_states():
    client = FakeFinnhubClient(news={"IBM": []}, failing_symbols={"TSLA"})
    router, display = _wire(client)

    display.search("tsla")
    await router.drain()
    assert display.search_slot.status is SlotStatus.ERROR
    assert display.visible_cards() == []

    display.search("ibm")
    await router.drain()
    assert display.search_slot.status is SlotStatus.EMPTY


@pytest.mark.asyncio
async def test_unknown_correlation_id_is_dropped():
    router, display = _wire(FakeFinnhubClient())

    await display.receive({"type": "sentiment", "correlationId": "nope", "verdict": "positive"})
    await display.receive({"type": "somethingElse"})

    assert display.dropped == 2
    assert display.search_slot.verdicts == {}


@pytest.mark.asyncio
async def test_verdict_for_replaced_batch_is_dropped():
    router, display = _wire(FakeFinnhubClient())
    display.search_slot.status = SlotStatus.LOADING

    first = SearchResultEvent.from_result(
        PipelineResult.success(
            "apple",
            "AAPL",
            [ClassifiedArticle(parse_article(news_item("Old card", ts=1)), ImpactLabel.FYI, "old-cid")],
        )
    )
    await display.receive(first.to_wire())
    second = SearchResultEvent.from_result(PipelineResult.success("tesla", "TSLA", []))
    await display.receive(second.to_wire())
    await display.receive({"type": "sentiment", "correlationId": "old-cid", "verdict": "negative"})

    assert display.search_slot.symbol == "TSLA"
    assert display.search_slot.verdicts == {}
    assert display.dropped == 1


@pytest.mark.asyncio
async def test_last_received_search_result_wins():
    router, display = _wire(FakeFinnhubClient())
    display.search_slot.status = SlotStatus.LOADING
    display.search_slot.query = "tesla"

    stale = SearchResultEvent.from_result(PipelineResult.success("apple", "AAPL", []))
    await display.receive(stale.to_wire())

    assert display.search_slot.symbol == "AAPL"


@pytest.mark.asyncio
async def test_results_after_clear_are_dropped():
    client = FakeFinnhubClient(news={"AAPL": _apple_news()})
    router, display = _wire(client)

    display.search("aapl")
    display.clear_search()
    await router.drain()

    assert display.search_slot.status is SlotStatus.IDLE
    assert display.dropped == 1


@pytest.mark.asyncio
async def test_watchlist_end_to_end_aapl_tsla():
    client = FakeFinnhubClient(
        news={
            "AAPL": [
                news_item("Apple posts record quarterly earnings", ts=1710500000),
                news_item("Apple hosts developer event", ts=1710400000),
            ],
            "TSLA": [news_item("Tesla shares surge on deliveries", ts=1710500000)],
        }
    )
    store = WatchlistStore(MemoryBlobStore({WATCHLIST_KEY: ["AAPL", "TSLA"]}))
    await store.load()
    router, display = _wire(client, FakeSentimentClient(), store)

    # Prior state: both symbols refreshed successfully.
    display.refresh_watch()
    await router.drain()
    assert display.watch_headline("TSLA") == "Tesla shares surge on deliveries"

    client.failing_symbols.add("TSLA")
    client.news["AAPL"] = [
        news_item("Apple hosts developer event", ts=1710500000),
        news_item("Apple faces lawsuit over patents", ts=1710400000),
    ]
    display.refresh_watch()
    await router.drain()

    assert display.watch_headline("AAPL") == "Apple faces lawsuit over patents"
    assert display.watch_slots["AAPL"].status is SlotStatus.ARTICLES
    assert display.watch_headline("TSLA") == "Tesla shares surge on deliveries"


@pytest.mark.asyncio
async def test_watch_mutations_from_display():
    client = FakeFinnhubClient(news={"MSFT": [news_item("Microsoft hosts hackathon", ts=1)], "NVDA": []})
    router, display = _wire(client)

    display.add_watch("MSFT")
    display.add_watch("NVDA")
    display.add_watch("MSFT")
    await router.drain()

    assert list(display.watch_slots) == ["MSFT", "NVDA"]
    assert display.watch_slots["MSFT"].status is SlotStatus.NO_HIGH_IMPACT

    display.remove_watch("MSFT")
    await router.drain()
    assert list(display.watch_slots) == ["NVDA"]

    await display.receive(WatchUpdateEvent.from_update(WatchUpdate("MSFT", None)).to_wire())
    assert "MSFT" not in display.watch_slots

    display.clear_watch()
    await router.drain()
    assert display.watch_slots == {}
    assert router.watchlist.store.symbols == ()


@pytest.mark.asyncio
async def test_failed_watch_add_reverts_optimistic_slot():
    blob_store = MemoryBlobStore()
    blob_store.fail_writes = True
    store = WatchlistStore(blob_store)
    router, display = _wire(FakeFinnhubClient(news={"AAPL": []}), store=store)

    display.add_watch("AAPL")
    assert list(display.watch_slots) == ["AAPL"]
    await router.drain()

    assert store.symbols == ()
    assert display.watch_slots == {}


@pytest.mark.asyncio
async def test_failed_watch_remove_restores_slot():
    blob_store = MemoryBlobStore({WATCHLIST_KEY: ["AAPL"]})
    store = WatchlistStore(blob_store)
    await store.load()
    router, display = _wire(FakeFinnhubClient(news={"AAPL": []}), store=store)
    display.refresh_watch()
    await router.drain()

    blob_store.fail_writes = True
    display.remove_watch(" AAPL ")
    assert display.watch_slots == {}
    await router.drain()

    assert store.symbols == ("AAPL",)
    assert list(display.watch_slots) == ["AAPL"]
