"""
news_radar 로깅 설정
- 콘솔(stdout) 출력, 설정에 따라 날짜별 로테이션 파일 출력
- 외부 라이브러리(aiohttp, uvicorn 등) 로그 억제
- 모듈별 로거 생성 헬퍼
"""
import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

from news_radar.utils.config import Settings, get_settings

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

NOISY_LOGGERS: tuple[str, ...] = (
    "aiohttp",
    "asyncio",
    "urllib3",
    "httpx",
    "httpcore",
    "uvicorn.access",
)

_initialized: bool = False


def resolve_log_path(settings: Settings) -> Path:
    """설정값으로 로그 파일 경로를 만든다. 상대 경로는 프로젝트 루트 기준이다."""
    log_dir = Path(settings.log_dir)
    if not log_dir.is_absolute():
        log_dir = PROJECT_ROOT / log_dir
    return log_dir / settings.log_file


def _file_handler(settings: Settings) -> TimedRotatingFileHandler:
    path = resolve_log_path(settings)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = TimedRotatingFileHandler(
        filename=path,
        when="midnight",
        interval=1,
        backupCount=settings.log_backup_days,
        encoding="utf-8",
    )
    handler.suffix = "%Y-%m-%d"
    return handler


def setup_logging() -> None:
    """루트 로거에 핸들러를 설정한다. 최초 한 번만 실행된다."""
    global _initialized
    if _initialized:
        return
    _initialized = True

    settings = get_settings()
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.log_to_file:
        handlers.append(_file_handler(settings))

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """모듈별 로거를 반환한다. 보통 ``__name__`` 을 전달한다."""
    setup_logging()
    return logging.getLogger(name)
