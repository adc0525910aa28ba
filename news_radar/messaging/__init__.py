"""
메시징 모듈 (표시 계층 경계 프로토콜, 채널, 라우터, 표시 소비자)
"""
from news_radar.messaging.channel import MessageChannel
from news_radar.messaging.display import DisplaySlots, display_label
from news_radar.messaging.protocol import parse_inbound, parse_outbound
from news_radar.messaging.router import BackgroundRouter

__all__ = [
    "BackgroundRouter",
    "DisplaySlots",
    "MessageChannel",
    "display_label",
    "parse_inbound",
    "parse_outbound",
]
