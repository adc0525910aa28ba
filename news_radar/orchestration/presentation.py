"""
검색 결과 표시 정책.

정렬은 조회 시점이 아니라 표시 시점에 적용된다. 조회된 전체 기사 묶음은
ArticleBatch에 보관되므로 정렬 기준을 바꿔도 다시 조회하지 않는다.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable, Sequence

from news_radar.news.models import ClassifiedArticle, SortMode

DEFAULT_TOP_N: int = 5


def _date_key(item: ClassifiedArticle) -> tuple[int, float]:
    published_at: datetime | None = item.article.published_at
    if published_at is None:
        return (0, 0.0)
    return (1, published_at.timestamp())


def sort_articles(
    items: Iterable[ClassifiedArticle], mode: SortMode
) -> list[ClassifiedArticle]:
    """표시 순서로 정렬된 새 리스트를 반환한다. 동일 키는 원래 순서를 유지한다.

    BY_DATE: 게시 시각 내림차순, 시각이 없는 기사는 맨 뒤.
    BY_IMPACT: High Impact < Neutral < FYI.
    """
    if mode is SortMode.BY_IMPACT:
        return sorted(items, key=lambda item: item.label.rank)
    # reverse=True 정렬도 안정 정렬이다.
    return sorted(items, key=_date_key, reverse=True)


class ArticleBatch:
    """한 번의 조회 결과 전체를 보관하고 정렬 기준별 상위 N건을 제공한다."""

    def __init__(self, items: Sequence[ClassifiedArticle]) -> None:
        self._items: tuple[ClassifiedArticle, ...] = tuple(items)

    def __len__(self) -> int:
        return len(self._items)

    def visible(
        self, mode: SortMode, limit: int = DEFAULT_TOP_N
    ) -> list[ClassifiedArticle]:
        return sort_articles(self._items, mode)[:limit]

    def correlation_ids(self) -> set[str]:
        return {item.correlation_id for item in self._items if item.correlation_id}
