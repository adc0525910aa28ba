import pytest

from fakes import FakeFinnhubClient, FakeSentimentClient, build_pipeline, news_item
from news_radar.news.models import Article, ClassifiedArticle, ImpactLabel
from news_radar.orchestration.watchlist_orchestrator import (
    WatchlistOrchestrator,
    select_high_impact,
)


class _Recorder:
    def __init__(self):
        self.updates = []
        self.watchlists = []

    async def on_update(self, update):
        self.updates.append(update)

    async def on_watchlist(self, symbols):
        self.watchlists.append(tuple(symbols))


def _orchestrator(client, store, recorder=None):
    recorder = recorder or _Recorder()
    orchestrator = WatchlistOrchestrator(
        build_pipeline(client),
        store,
        on_update=recorder.on_update,
        on_watchlist_changed=recorder.on_watchlist,
    )
    return orchestrator, recorder


def test_select_high_impact_takes_first_in_fetch_order():
    first = Article("Profit warning", "u1", None)
    second = Article("Merger approved", "u2", None)
    items = [
        ClassifiedArticle(Article("Store opening", "u0", None), ImpactLabel.FYI),
        ClassifiedArticle(first, ImpactLabel.HIGH_IMPACT),
        ClassifiedArticle(second, ImpactLabel.HIGH_IMPACT),
    ]
    assert select_high_impact(items) is first
    assert select_high_impact(items[:1]) is None
    assert select_high_impact([]) is None


@pytest.mark.asyncio
async def test_fan_out_isolates_failures(watchlist_store):
    client = FakeFinnhubClient(
        news={"GOOD": [news_item("GOOD beats earnings estimates", ts=1710500000)]},
        failing_symbols={"BAD"},
    )
    await watchlist_store.add("BAD")
    await watchlist_store.add("GOOD")
    orchestrator, recorder = _orchestrator(client, watchlist_store)

    await orchestrator.refresh_all()

    assert [u.symbol for u in recorder.updates] == ["GOOD"]
    assert recorder.updates[0].article.headline == "GOOD beats earnings estimates"


@pytest.mark.asyncio
async def test_no_high_impact_and_empty_fetch_emit_none(watchlist_store):
    client = FakeFinnhubClient(
        news={"MSFT": [news_item("Microsoft hosts hackathon", ts=1710500000)], "IBM": []}
    )
    orchestrator, recorder = _orchestrator(client, watchlist_store)

    await orchestrator.refresh_all(["MSFT", "IBM"])

    assert {u.symbol: u.article for u in recorder.updates} == {"MSFT": None, "IBM": None}


@pytest.mark.asyncio
async def test_crashing_consumer_does_not_escape_fan_out(watchlist_store):
    client = FakeFinnhubClient(news={"AAPL": [], "TSLA": []})

    async def explode(update):
        raise RuntimeError("consumer bug")

    orchestrator = WatchlistOrchestrator(build_pipeline(client), watchlist_store, on_update=explode)
    await orchestrator.refresh_all(["AAPL", "TSLA"])


@pytest.mark.asyncio
async def test_refresh_does_not_enrich(watchlist_store):
    client = FakeFinnhubClient(news={"AAPL": [news_item("Apple hosts developer event", ts=1)]})
    sentiment = FakeSentimentClient()
    recorder = _Recorder()
    orchestrator = WatchlistOrchestrator(
        build_pipeline(client, sentiment), watchlist_store, on_update=recorder.on_update
    )

    await orchestrator.refresh_all(["AAPL"])
    await orchestrator.pipeline.drain()

    assert sentiment.calls == []
    assert recorder.updates[0].article is None


@pytest.mark.asyncio
async def test_add_persists_then_refreshes_only_new_symbol(watchlist_store, blob_store):
    client = FakeFinnhubClient(
        news={"TSLA": [news_item("Tesla announces recall", ts=1710500000)], "AAPL": []}
    )
    await watchlist_store.add("AAPL")
    orchestrator, recorder = _orchestrator(client, watchlist_store)

    assert await orchestrator.add(" TSLA ") is True

    assert blob_store.data["watchList"] == ["AAPL", "TSLA"]
    assert recorder.watchlists == [("AAPL", "TSLA")]
    assert [call[0] for call in client.news_calls] == ["TSLA"]
    assert recorder.updates[0].symbol == "TSLA"


@pytest.mark.asyncio
async def test_add_duplicate_is_noop(watchlist_store):
    client = FakeFinnhubClient(news={"AAPL": []})
    orchestrator, recorder = _orchestrator(client, watchlist_store)

    await orchestrator.add("AAPL")
    assert await orchestrator.add("AAPL") is False

    assert watchlist_store.symbols == ("AAPL",)
    assert len(recorder.watchlists) == 1
    assert len(client.news_calls) == 1


@pytest.mark.asyncio
async def test_add_with_failing_fetch_still_tracks_symbol(watchlist_store):
    client = FakeFinnhubClient(failing_symbols={"TSLA"})
    orchestrator, recorder = _orchestrator(client, watchlist_store)

    assert await orchestrator.add("TSLA") is True
    assert watchlist_store.symbols == ("TSLA",)
    assert recorder.updates == []


@pytest.mark.asyncio
async def test_remove_and_clear_notify(watchlist_store):
    client = FakeFinnhubClient()
    await watchlist_store.add("AAPL")
    await watchlist_store.add("TSLA")
    orchestrator, recorder = _orchestrator(client, watchlist_store)

    assert await orchestrator.remove("AAPL") is True
    assert await orchestrator.remove("AAPL") is False
    await orchestrator.clear()

    assert recorder.watchlists == [("TSLA",), ()]
    assert watchlist_store.symbols == ()
