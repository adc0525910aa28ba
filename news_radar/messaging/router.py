"""
BackgroundRouter: 요청 이벤트를 파이프라인/Watchlist 오케스트레이터로 연결한다.

검색 응답에는 forQuery, watch 응답에는 symbol, 감성 응답에는 correlationId가
붙어 표시 계층이 해당 슬롯으로 라우팅할 수 있다.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, Sequence

from news_radar.messaging.protocol import (
    InboundRequest,
    SearchRequest,
    SearchResultEvent,
    SentimentEvent,
    WatchAddRequest,
    WatchClearRequest,
    WatchlistEvent,
    WatchRefreshRequest,
    WatchRemoveRequest,
    WatchUpdateEvent,
)
from news_radar.news.models import PipelineStatus, SentimentUpdate, WatchUpdate
from news_radar.orchestration.watchlist_orchestrator import WatchlistOrchestrator
from news_radar.utils.logger import get_logger

if TYPE_CHECKING:
    from news_radar.messaging.channel import MessageChannel
    from news_radar.orchestration.news_pipeline import NewsPipeline
    from news_radar.storage.watchlist_store import WatchlistStore

logger = get_logger(__name__)


class BackgroundRouter:
    """채널 하나에 묶이는 백엔드 측 요청 처리기."""

    def __init__(
        self,
        pipeline: NewsPipeline,
        store: WatchlistStore,
        channel: MessageChannel,
    ) -> None:
        self.pipeline = pipeline
        self.channel = channel
        self.watchlist = WatchlistOrchestrator(
            pipeline,
            store,
            on_update=self._emit_watch_update,
            on_watchlist_changed=self._emit_watchlist,
        )
        channel.bind(self.dispatch)

    async def dispatch(self, request: InboundRequest) -> None:
        """요청 종류별 처리 함수로 분기한다."""
        if isinstance(request, SearchRequest):
            await self._handle_search(request.query)
        elif isinstance(request, WatchRefreshRequest):
            await self._emit_watchlist(self.watchlist.store.symbols)
            await self.watchlist.refresh_all()
        elif isinstance(request, WatchAddRequest):
            await self._mutate_watchlist(request.type, self.watchlist.add(request.symbol))
        elif isinstance(request, WatchRemoveRequest):
            await self._mutate_watchlist(request.type, self.watchlist.remove(request.symbol))
        elif isinstance(request, WatchClearRequest):
            await self._mutate_watchlist(request.type, self.watchlist.clear())
        else:
            logger.warning("알 수 없는 요청 타입: %r", request)

    async def _mutate_watchlist(self, kind: str, mutation: Awaitable[object]) -> None:
        try:
            await mutation
        except Exception as exc:
            logger.error("Watchlist 변경 실패 (%s): %s", kind, exc, exc_info=True)
            # 표시 계층의 낙관적 슬롯을 저장된 목록으로 되돌린다.
            await self._emit_watchlist(self.watchlist.store.symbols)

    async def _handle_search(self, query: str) -> None:
        result = await self.pipeline.run(query)
        await self.channel.emit(SearchResultEvent.from_result(result))
        # 카드가 전달된 뒤에 보강을 시작한다.
        if result.status is PipelineStatus.ARTICLES:
            self.pipeline.schedule_enrichment(result, self._emit_sentiment)

    async def _emit_sentiment(self, update: SentimentUpdate) -> None:
        await self.channel.emit(SentimentEvent.from_update(update))

    async def _emit_watch_update(self, update: WatchUpdate) -> None:
        await self.channel.emit(WatchUpdateEvent.from_update(update))

    async def _emit_watchlist(self, symbols: Sequence[str]) -> None:
        await self.channel.emit(WatchlistEvent(symbols=list(symbols)))

    async def drain(self) -> None:
        """요청 태스크와 감성 보강 태스크가 모두 끝날 때까지 기다린다."""
        await self.channel.drain()
        await self.pipeline.drain()
