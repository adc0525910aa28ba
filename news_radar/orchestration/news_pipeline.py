"""
뉴스 파이프라인 오케스트레이터 (단일 쿼리 모드).

심볼 해석 → 뉴스 조회 → 영향도 분류 → (FYI 기사) 감성 보강 예약
순서로 실행한다.

심볼 해석/뉴스 조회가 실패하면 분류를 시도하지 않고 ERROR 결과를 반환한다.
감성 보강은 기본 결과를 막지 않는다. run()이 FYI 기사마다 correlation id를
발급하고, 호출자가 기본 결과를 전달한 뒤 schedule_enrichment()로 백그라운드
태스크를 시작한다. 보강 실패는 흡수되며 해당 카드는 FYI 라벨로 남는다.
재시도는 하지 않는다.
"""

from __future__ import annotations

import asyncio
import uuid
from typing import TYPE_CHECKING, Awaitable, Callable

from news_radar.analysis.classifier import classify
from news_radar.clients.base_client import TransportError
from news_radar.news.models import (
    ClassifiedArticle,
    ImpactLabel,
    PipelineResult,
    SentimentUpdate,
)
from news_radar.utils.logger import get_logger

if TYPE_CHECKING:
    from news_radar.analysis.sentiment_enricher import SentimentEnricher
    from news_radar.news.news_fetcher import NewsFetcher
    from news_radar.news.symbol_resolver import SymbolResolver

logger = get_logger(__name__)

VerdictCallback = Callable[[SentimentUpdate], Awaitable[None]]


def _new_correlation_id() -> str:
    return uuid.uuid4().hex


class NewsPipeline:
    """심볼 해석 → 조회 → 분류 → 감성 보강 파이프라인.

    사용 예시:
        pipeline = NewsPipeline(resolver, fetcher, enricher)
        result = await pipeline.run("apple")
        await emit(result)
        pipeline.schedule_enrichment(result, on_verdict)
    """

    def __init__(
        self,
        resolver: SymbolResolver,
        fetcher: NewsFetcher,
        enricher: SentimentEnricher | None = None,
        id_factory: Callable[[], str] = _new_correlation_id,
    ) -> None:
        """NewsPipeline을 초기화한다.

        Args:
            resolver: SymbolResolver 인스턴스.
            fetcher: NewsFetcher 인스턴스.
            enricher: SentimentEnricher 인스턴스. None이면 감성 보강 생략.
            id_factory: correlation id 발급 함수.
        """
        self.resolver = resolver
        self.fetcher = fetcher
        self.enricher = enricher
        self._id_factory = id_factory
        self._enrichment_tasks: set[asyncio.Task[None]] = set()

    async def run(self, query: str, enrich: bool = True) -> PipelineResult:
        """쿼리 하나에 대해 파이프라인을 실행한다.

        Args:
            query: 사용자 입력 원문.
            enrich: True이면 FYI 기사에 correlation id를 발급한다.
                실제 보강은 schedule_enrichment()에서 시작한다.

        Returns:
            ARTICLES / EMPTY / ERROR 상태의 PipelineResult.
        """
        logger.debug("NewsPipeline 시작 (query=%r)", query)

        # 1단계: 심볼 해석
        try:
            symbol = await self.resolver.resolve(query)
        except TransportError as exc:
            logger.warning("심볼 해석 실패 (query=%r): %s", query, exc)
            return PipelineResult.failure(query, f"resolve: {exc}")

        # 2단계: 뉴스 조회
        try:
            articles = await self.fetcher.fetch(symbol)
        except TransportError as exc:
            logger.warning("뉴스 조회 실패 (%s): %s", symbol, exc)
            return PipelineResult.failure(query, f"fetch: {exc}", symbol=symbol)

        if not articles:
            logger.info("[%s] 조회된 기사 없음", symbol)
            return PipelineResult.success(query, symbol, [])

        # 3단계: 분류 (+ FYI 기사 correlation id 발급)
        mint_ids = enrich and self.enricher is not None
        classified: list[ClassifiedArticle] = []
        for article in articles:
            label = classify(article.headline)
            correlation_id = (
                self._id_factory() if mint_ids and label is ImpactLabel.FYI else None
            )
            classified.append(ClassifiedArticle(article, label, correlation_id))

        logger.info(
            "[%s] 분류 완료: %d건 (High Impact %d, FYI %d)",
            symbol,
            len(classified),
            sum(1 for c in classified if c.label is ImpactLabel.HIGH_IMPACT),
            sum(1 for c in classified if c.label is ImpactLabel.FYI),
        )
        return PipelineResult.success(query, symbol, classified)

    def schedule_enrichment(
        self, result: PipelineResult, on_verdict: VerdictCallback
    ) -> list[asyncio.Task[None]]:
        """correlation id가 있는 FYI 기사마다 감성 보강 태스크를 시작한다.

        각 태스크는 독립적이며 완료 순서는 보장되지 않는다.

        Returns:
            생성된 태스크 목록.
        """
        if self.enricher is None:
            return []

        tasks: list[asyncio.Task[None]] = []
        for item in result.articles:
            if item.correlation_id is None:
                continue
            task = asyncio.create_task(
                self._enrich_one(self.enricher, item, on_verdict),
                name=f"enrich:{item.correlation_id}",
            )
            self._enrichment_tasks.add(task)
            task.add_done_callback(self._enrichment_tasks.discard)
            tasks.append(task)

        if tasks:
            logger.debug("감성 보강 %d건 예약 (query=%r)", len(tasks), result.query)
        return tasks

    async def _enrich_one(
        self,
        enricher: SentimentEnricher,
        item: ClassifiedArticle,
        on_verdict: VerdictCallback,
    ) -> None:
        correlation_id = item.correlation_id
        try:
            verdict = await enricher.enrich(item.article.headline)
        except TransportError as exc:
            # 카드는 FYI 라벨을 유지한다.
            logger.warning("감성 보강 실패 (id=%s): %s", correlation_id, exc)
            return
        except Exception as exc:
            logger.error("감성 보강 예외 (id=%s): %s", correlation_id, exc, exc_info=True)
            return

        try:
            await on_verdict(SentimentUpdate(correlation_id, verdict))
        except Exception as exc:
            logger.error("감성 결과 전달 실패 (id=%s): %s", correlation_id, exc, exc_info=True)

    @property
    def pending_enrichments(self) -> int:
        return len(self._enrichment_tasks)

    async def drain(self) -> None:
        """진행 중인 감성 보강 태스크가 모두 끝날 때까지 기다린다."""
        while self._enrichment_tasks:
            await asyncio.gather(*list(self._enrichment_tasks), return_exceptions=True)
