"""
News Radar - Main Entry Point

전체 시스템을 조립하고 FastAPI WebSocket 서버를 실행한다.

주요 기능:
- 설정/로깅 초기화
- Finnhub / 감성 API 클라이언트 생성
- 파이프라인 (심볼 해석 → 뉴스 조회 → 분류 → 감성 보강) 조립
- Watchlist 저장소 로드 (JSON 파일 또는 Redis)
- Graceful shutdown 처리
"""

from __future__ import annotations

import asyncio
import signal

from dotenv import load_dotenv

# .env 값을 os.environ에 로드
load_dotenv()

import uvicorn

from news_radar.analysis.sentiment_enricher import SentimentEnricher
from news_radar.clients.base_client import BaseApiClient
from news_radar.clients.finnhub_client import FinnhubClient
from news_radar.clients.sentiment_client import SentimentClient
from news_radar.messaging.channel import MessageChannel
from news_radar.messaging.router import BackgroundRouter
from news_radar.monitoring.api_server import app as api_app
from news_radar.monitoring.api_server import set_dependencies
from news_radar.news.news_fetcher import NewsFetcher
from news_radar.news.symbol_resolver import SymbolResolver
from news_radar.orchestration.news_pipeline import NewsPipeline
from news_radar.storage.connection import close_redis, get_redis
from news_radar.storage.watchlist_store import (
    BlobStore,
    JsonFileBlobStore,
    RedisBlobStore,
    WatchlistStore,
)
from news_radar.utils.config import Settings, get_settings
from news_radar.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

# 종료 시퀀스 최대 대기 시간 (초)
_SHUTDOWN_TIMEOUT: float = 10.0


def build_blob_store(settings: Settings) -> BlobStore:
    """설정에 따라 Watchlist blob 저장소를 생성한다."""
    backend = settings.watchlist_backend.lower()
    if backend == "redis":
        return RedisBlobStore(get_redis())
    if backend != "file":
        logger.warning("알 수 없는 watchlist_backend=%r, 파일 저장소 사용", backend)
    return JsonFileBlobStore(settings.watchlist_path)


class NewsRadarSystem:
    """News Radar의 메인 시스템 클래스.

    모든 컴포넌트를 생성하고 연결한다. 표시 계층은 create_channel()로
    얻은 MessageChannel 또는 /ws/news WebSocket을 통해서만 접근한다.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

        self.finnhub_client = FinnhubClient()
        self.sentiment_client = SentimentClient()

        self.pipeline = NewsPipeline(
            resolver=SymbolResolver(self.finnhub_client),
            fetcher=NewsFetcher(self.finnhub_client, window_days=self.settings.news_window_days),
            enricher=SentimentEnricher(self.sentiment_client),
        )
        self.watchlist_store = WatchlistStore(
            build_blob_store(self.settings), key=self.settings.watchlist_key
        )

    async def initialize(self) -> None:
        """Watchlist를 로드하고 API 서버에 의존성을 주입한다."""
        logger.info("========== News Radar Initializing ==========")
        await self.watchlist_store.load()
        set_dependencies(pipeline=self.pipeline, watchlist_store=self.watchlist_store)
        logger.info("========== News Radar Ready ==========")

    def create_channel(self) -> MessageChannel:
        """In-process 표시 계층용 채널을 생성한다."""
        channel = MessageChannel()
        BackgroundRouter(self.pipeline, self.watchlist_store, channel)
        return channel

    async def shutdown(self) -> None:
        """시스템을 안전하게 종료한다."""
        logger.info("========== News Radar Shutting Down ==========")
        await self.pipeline.drain()
        await BaseApiClient.close_session()
        if self.settings.watchlist_backend.lower() == "redis":
            await close_redis()
        logger.info("Shutdown complete")

    async def start_api_server(self) -> None:
        """FastAPI 서버를 실행한다."""
        config = uvicorn.Config(
            api_app,
            host=self.settings.api_host,
            port=self.settings.api_port,
            log_level=self.settings.log_level.lower(),
        )
        server = uvicorn.Server(config)
        logger.info(
            "Starting News Radar API on %s:%d...", self.settings.api_host, self.settings.api_port
        )
        await server.serve()


async def main() -> None:
    """메인 진입점.

    API 서버를 시작하고 종료 신호를 기다린다.
    """
    setup_logging()
    system = NewsRadarSystem()
    shutdown_event = asyncio.Event()

    def signal_handler(sig: signal.Signals) -> None:
        logger.info("Received signal %s, initiating graceful shutdown...", sig)
        shutdown_event.set()

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda s=sig: signal_handler(s))

    server_task: asyncio.Task[None] | None = None
    try:
        await system.initialize()
        server_task = asyncio.create_task(system.start_api_server())
        waiter = asyncio.create_task(shutdown_event.wait())
        # 서버가 먼저 끝나면 (포트 충돌 등) 종료 절차로 넘어간다.
        await asyncio.wait({server_task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        waiter.cancel()
    except Exception as e:
        logger.exception("Fatal error in main: %s", e)
    finally:
        if server_task is not None and not server_task.done():
            server_task.cancel()
            await asyncio.gather(server_task, return_exceptions=True)
        try:
            await asyncio.wait_for(system.shutdown(), timeout=_SHUTDOWN_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning("Shutdown timed out after %.0f seconds", _SHUTDOWN_TIMEOUT)


if __name__ == "__main__":
    asyncio.run(main())
