"""
Pydantic models for the display boundary protocol.

Every payload crossing the MessageChannel is a plain JSON-compatible dict
with a ``type`` discriminator and camelCase keys. Inbound events flow from
the display to the backend, outbound events flow back.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

from news_radar.news.models import (
    Article,
    ClassifiedArticle,
    ImpactLabel,
    PipelineResult,
    PipelineStatus,
    SentimentUpdate,
    SentimentVerdict,
    WatchUpdate,
)


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, mode="json")


# ---------------------------------------------------------------------------
# Inbound (display -> backend)
# ---------------------------------------------------------------------------

class SearchRequest(_WireModel):
    """Free-text company query."""

    type: Literal["search"] = "search"
    query: str


class WatchRefreshRequest(_WireModel):
    type: Literal["watchRefresh"] = "watchRefresh"


class WatchAddRequest(_WireModel):
    type: Literal["watchAdd"] = "watchAdd"
    symbol: str


class WatchRemoveRequest(_WireModel):
    type: Literal["watchRemove"] = "watchRemove"
    symbol: str


class WatchClearRequest(_WireModel):
    type: Literal["watchClear"] = "watchClear"


InboundRequest = Annotated[
    Union[
        SearchRequest,
        WatchRefreshRequest,
        WatchAddRequest,
        WatchRemoveRequest,
        WatchClearRequest,
    ],
    Field(discriminator="type"),
]

_INBOUND_ADAPTER: TypeAdapter[InboundRequest] = TypeAdapter(InboundRequest)


def parse_inbound(payload: Any) -> InboundRequest:
    """Validate an inbound payload. Raises pydantic.ValidationError."""
    return _INBOUND_ADAPTER.validate_python(payload)


# ---------------------------------------------------------------------------
# Outbound (backend -> display)
# ---------------------------------------------------------------------------

class ArticlePayload(_WireModel):
    """Article as rendered on a card."""

    headline: str
    url: str
    published_at: datetime | None = None
    source: str = ""
    label: ImpactLabel | None = None
    correlation_id: str | None = None

    @classmethod
    def from_article(
        cls,
        article: Article,
        label: ImpactLabel | None = None,
        correlation_id: str | None = None,
    ) -> ArticlePayload:
        return cls(
            headline=article.headline,
            url=article.url,
            published_at=article.published_at,
            source=article.source,
            label=label,
            correlation_id=correlation_id,
        )

    @classmethod
    def from_classified(cls, item: ClassifiedArticle) -> ArticlePayload:
        return cls.from_article(item.article, item.label, item.correlation_id)

    def to_article(self) -> Article:
        return Article(
            headline=self.headline,
            url=self.url,
            published_at=self.published_at,
            source=self.source,
        )

    def to_classified(self) -> ClassifiedArticle:
        return ClassifiedArticle(
            article=self.to_article(),
            label=self.label or ImpactLabel.FYI,
            correlation_id=self.correlation_id,
        )


class SearchResultEvent(_WireModel):
    """Primary search result. Exactly one of articles / error / empty applies."""

    type: Literal["searchResult"] = "searchResult"
    for_query: str
    symbol: str | None = None
    articles: list[ArticlePayload] | None = None
    error: str | None = None
    empty: bool = False

    @classmethod
    def from_result(cls, result: PipelineResult) -> SearchResultEvent:
        if result.status is PipelineStatus.ERROR:
            return cls(for_query=result.query, symbol=result.symbol, error=result.error)
        if result.status is PipelineStatus.EMPTY:
            return cls(for_query=result.query, symbol=result.symbol, empty=True)
        return cls(
            for_query=result.query,
            symbol=result.symbol,
            articles=[ArticlePayload.from_classified(item) for item in result.articles],
        )


class WatchUpdateEvent(_WireModel):
    type: Literal["watchUpdate"] = "watchUpdate"
    symbol: str
    article: ArticlePayload | None = None
    no_high_impact: bool = False

    @classmethod
    def from_update(cls, update: WatchUpdate) -> WatchUpdateEvent:
        if update.article is None:
            return cls(symbol=update.symbol, no_high_impact=True)
        return cls(
            symbol=update.symbol,
            article=ArticlePayload.from_article(update.article, ImpactLabel.HIGH_IMPACT),
        )


class SentimentEvent(_WireModel):
    type: Literal["sentiment"] = "sentiment"
    correlation_id: str
    verdict: SentimentVerdict

    @classmethod
    def from_update(cls, update: SentimentUpdate) -> SentimentEvent:
        return cls(correlation_id=update.correlation_id, verdict=update.verdict)


class WatchlistEvent(_WireModel):
    """Authoritative watchlist after a mutation or before a refresh."""

    type: Literal["watchlist"] = "watchlist"
    symbols: list[str] = Field(default_factory=list)


OutboundEvent = Annotated[
    Union[SearchResultEvent, WatchUpdateEvent, SentimentEvent, WatchlistEvent],
    Field(discriminator="type"),
]

_OUTBOUND_ADAPTER: TypeAdapter[OutboundEvent] = TypeAdapter(OutboundEvent)


def parse_outbound(payload: Any) -> OutboundEvent:
    """Validate an outbound payload on the display side. Raises pydantic.ValidationError."""
    return _OUTBOUND_ADAPTER.validate_python(payload)
