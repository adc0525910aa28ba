#!/usr/bin/env python3
"""
단일 쿼리 뉴스 검색 스크립트.

API 서버를 띄우지 않고 in-process MessageChannel로 검색을 한 번 실행한 뒤,
분류된 카드와 감성 보강 결과를 출력한다.

사용법:
    .venv/bin/python scripts/search_news.py apple
    .venv/bin/python scripts/search_news.py TSLA --sort impact --limit 3
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

# 프로젝트 루트를 sys.path에 추가한다.
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(_PROJECT_ROOT))

from dotenv import load_dotenv

load_dotenv()

from news_radar.clients.base_client import BaseApiClient
from news_radar.main import NewsRadarSystem
from news_radar.messaging.display import DisplaySlots, SlotStatus
from news_radar.news.models import SortMode
from news_radar.utils.config import get_settings
from news_radar.utils.logger import setup_logging


async def run_search(query: str, sort_mode: SortMode, limit: int) -> int:
    system = NewsRadarSystem()
    channel = system.create_channel()
    display = DisplaySlots(channel, top_n=limit)
    display.set_sort_mode(sort_mode)

    try:
        display.search(query)
        await channel.drain()
        await system.pipeline.drain()
    finally:
        await BaseApiClient.close_session()

    slot = display.search_slot
    if slot.status is SlotStatus.ERROR:
        print(f"[ERROR] 뉴스 조회 실패: {slot.error}")
        return 1
    if slot.status is SlotStatus.EMPTY:
        print(f"[INFO] {slot.symbol}: 최근 뉴스가 없습니다.")
        return 0

    print(f"[{slot.symbol}] {len(slot.batch)}건 중 상위 {limit}건 ({sort_mode.value} 순)")
    for card in display.visible_cards():
        published = card.published_at.strftime("%Y-%m-%d %H:%M") if card.published_at else "-"
        print(f"  [{card.label}] {published}  {card.headline}")
        print(f"      {card.url}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="티커 뉴스 검색 + 영향도 분류")
    parser.add_argument("query", help="회사명 또는 티커")
    parser.add_argument(
        "--sort",
        choices=[mode.value for mode in SortMode],
        default=SortMode.BY_DATE.value,
        help="정렬 기준 (기본: date)",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=get_settings().top_articles,
        help="출력할 기사 수 (기본: TOP_ARTICLES 설정값)",
    )
    args = parser.parse_args()

    setup_logging()
    sys.exit(asyncio.run(run_search(args.query, SortMode(args.sort), args.limit)))


if __name__ == "__main__":
    main()
