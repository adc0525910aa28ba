"""
MessageChannel: 백엔드와 표시 계층 사이의 비동기 메시지 경계.

send()는 요청을 검증한 뒤 핸들러를 태스크로 예약하고 즉시 반환한다.
결과는 subscribe()로 등록한 소비자 콜백으로만 전달된다. 경계를 넘는
페이로드는 항상 JSON 호환 dict이며 소비자마다 새로 직렬화된다.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from news_radar.messaging.protocol import InboundRequest, parse_inbound
from news_radar.utils.logger import get_logger

logger = get_logger(__name__)

Handler = Callable[[InboundRequest], Awaitable[None]]
Consumer = Callable[[dict[str, Any]], Awaitable[None]]


class MessageChannel:
    """요청/응답을 분리한 비동기 pub/sub 채널.

    사용 예시:
        channel = MessageChannel()
        channel.bind(router.dispatch)
        channel.subscribe(display.receive)
        channel.send({"type": "search", "query": "apple"})
        await channel.drain()
    """

    def __init__(self, handler: Handler | None = None) -> None:
        self._handler = handler
        self._consumers: list[Consumer] = []
        self._tasks: set[asyncio.Task[None]] = set()

    def bind(self, handler: Handler) -> None:
        """요청 핸들러를 등록한다 (백엔드 측)."""
        self._handler = handler

    def subscribe(self, consumer: Consumer) -> None:
        if consumer not in self._consumers:
            self._consumers.append(consumer)

    def unsubscribe(self, consumer: Consumer) -> None:
        if consumer in self._consumers:
            self._consumers.remove(consumer)

    # ------------------------------------------------------------------
    # 요청 (표시 계층 → 백엔드)
    # ------------------------------------------------------------------

    def send(self, payload: dict[str, Any]) -> None:
        """요청을 예약하고 즉시 반환한다. 잘못된 페이로드는 로그 후 버린다."""
        try:
            request = parse_inbound(payload)
        except ValidationError as exc:
            logger.warning("잘못된 요청 무시: %s (%d errors)", payload, exc.error_count())
            return

        if self._handler is None:
            logger.warning("핸들러가 없어 요청을 버림: %s", request.type)
            return

        task = asyncio.create_task(
            self._handle(self._handler, request), name=f"request:{request.type}"
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _handle(self, handler: Handler, request: InboundRequest) -> None:
        try:
            await handler(request)
        except Exception as exc:
            logger.error("요청 처리 실패 (%s): %s", request.type, exc, exc_info=True)

    # ------------------------------------------------------------------
    # 응답 (백엔드 → 표시 계층)
    # ------------------------------------------------------------------

    async def emit(self, event: BaseModel) -> None:
        """이벤트를 모든 소비자에게 전달한다. 소비자 오류는 격리된다."""
        consumers = list(self._consumers)
        if not consumers:
            logger.debug("소비자가 없어 이벤트 버림: %s", getattr(event, "type", event))
            return

        results = await asyncio.gather(
            *(
                consumer(event.model_dump(by_alias=True, mode="json"))
                for consumer in consumers
            ),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, Exception):
                logger.error("이벤트 소비자 오류: %s", result)

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """예약된 요청 태스크가 모두 끝날 때까지 기다린다."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
