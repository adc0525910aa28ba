"""
FastAPI server exposing the display boundary over a WebSocket.

/ws/news carries the same JSON events as the in-process MessageChannel.
Each connection gets its own MessageChannel and BackgroundRouter while the
pipeline and the watchlist store are shared across connections.

이 모듈은 FastAPI 앱 인스턴스, 라이프사이클, 미들웨어, WebSocket 엔드포인트,
의존성 주입 허브만 담당한다.
"""

from __future__ import annotations

import json
import time
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from news_radar.messaging.channel import MessageChannel
from news_radar.messaging.router import BackgroundRouter
from news_radar.orchestration.news_pipeline import NewsPipeline
from news_radar.storage.watchlist_store import WatchlistStore
from news_radar.utils.logger import get_logger

logger = get_logger(__name__)

# WebSocket 정책 위반 종료 코드 (의존성 미주입 시)
_WS_CLOSE_UNAVAILABLE: int = 1013

_startup_time: float = time.monotonic()

# ---------------------------------------------------------------------------
# Dependency injection hub
# ---------------------------------------------------------------------------

_deps: dict[str, Any] = {}


def set_dependencies(
    pipeline: NewsPipeline | None = None,
    watchlist_store: WatchlistStore | None = None,
) -> None:
    """Inject the shared pipeline and watchlist store.

    NewsRadarSystem.initialize()에서 호출한다. None으로 전달된 항목은
    기존 값을 유지한다.
    """
    if pipeline is not None:
        _deps["pipeline"] = pipeline
    if watchlist_store is not None:
        _deps["watchlist_store"] = watchlist_store
    logger.info("API dependencies injected: %s", sorted(_deps))


def reset_dependencies() -> None:
    _deps.clear()


# Active WebSocket connections
_ws_news_clients: set[WebSocket] = set()


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):  # type: ignore[type-arg]
    """Startup / shutdown lifecycle handler.

    종료 시 진행 중인 감성 보강 태스크를 기다린다.
    """
    global _startup_time
    _startup_time = time.monotonic()
    logger.info("News Radar API server starting up")

    yield

    pipeline = _deps.get("pipeline")
    if pipeline is not None:
        await pipeline.drain()
    logger.info("News Radar API server shutting down")


# ---------------------------------------------------------------------------
# App factory
# ---------------------------------------------------------------------------

app = FastAPI(
    title="News Radar API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Log every HTTP request and its response time."""
    start = time.monotonic()
    response = await call_next(request)
    elapsed = (time.monotonic() - start) * 1000
    logger.debug(
        "%s %s -> %d (%.1fms)",
        request.method,
        request.url.path,
        response.status_code,
        elapsed,
    )
    return response


# ===================================================================
# WebSocket endpoint
# ===================================================================

@app.websocket("/ws/news")
async def ws_news(websocket: WebSocket) -> None:
    """Bidirectional display boundary.

    클라이언트가 보낸 JSON 요청은 MessageChannel.send()로 전달되고,
    채널이 발행한 이벤트는 그대로 클라이언트에 전송된다.
    """
    pipeline = _deps.get("pipeline")
    store = _deps.get("watchlist_store")
    if pipeline is None or store is None:
        await websocket.close(code=_WS_CLOSE_UNAVAILABLE, reason="service not initialised")
        return

    await websocket.accept()
    channel = MessageChannel()
    BackgroundRouter(pipeline, store, channel)

    async def forward(payload: dict[str, Any]) -> None:
        await websocket.send_json(payload)

    channel.subscribe(forward)
    _ws_news_clients.add(websocket)
    logger.info("WebSocket /ws/news connected (total=%d)", len(_ws_news_clients))

    try:
        while True:
            text = await websocket.receive_text()
            try:
                payload = json.loads(text)
            except json.JSONDecodeError:
                logger.warning("WebSocket /ws/news: non-JSON message ignored")
                continue
            channel.send(payload)
    except WebSocketDisconnect:
        pass
    finally:
        channel.unsubscribe(forward)
        _ws_news_clients.discard(websocket)
        logger.info(
            "WebSocket /ws/news disconnected (remaining=%d)",
            len(_ws_news_clients),
        )


# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------

@app.get("/health")
async def health_check() -> dict:
    """Simple health check endpoint."""
    store = _deps.get("watchlist_store")
    return {
        "status": "ok",
        "uptime": round(time.monotonic() - _startup_time, 1),
        "watchlist_size": len(store) if store is not None else 0,
        "ws_clients": len(_ws_news_clients),
    }
