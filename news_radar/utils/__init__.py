"""유틸리티 모듈 패키지."""
from news_radar.utils.config import Settings, get_settings
from news_radar.utils.logger import get_logger, setup_logging

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "setup_logging",
]
