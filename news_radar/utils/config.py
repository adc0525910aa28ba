"""
프로젝트 설정 관리
.env 파일에서 환경변수를 로드하여 타입-안전한 설정 객체 제공
"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """애플리케이션 전체 설정을 관리하는 클래스."""

    # Finnhub (심볼 검색 + 회사 뉴스)
    finnhub_api_key: str = ""
    finnhub_base_url: str = "https://finnhub.io/api/v1"

    # 감성 분석 API (FYI 헤드라인 보강용)
    sentiment_api_url: str = "https://sentim-api.herokuapp.com/api/v1/"

    # 뉴스 조회 윈도우 (달력 기준 일수, 오늘 포함)
    news_window_days: int = 7
    # 검색 결과 화면에 노출할 최대 기사 수
    top_articles: int = 5

    # HTTP 타임아웃 (초). 이 계층에서는 재시도/취소를 하지 않는다.
    http_timeout_total: float = 30.0
    http_timeout_connect: float = 10.0

    # Watchlist 저장소: "file" 또는 "redis"
    watchlist_backend: str = "file"
    watchlist_path: str = "data/watchlist.json"
    watchlist_key: str = "watchList"

    # Redis (watchlist_backend="redis" 일 때만 사용)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_password: str = ""

    log_level: str = "INFO"
    log_to_file: bool = True
    log_dir: str = "logs"  # 상대 경로는 프로젝트 루트 기준
    log_file: str = "news_radar.log"
    log_backup_days: int = 30

    # API Server (display 경계 WebSocket)
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


_settings: Settings | None = None


def get_settings() -> Settings:
    """Settings 싱글톤 인스턴스를 반환한다."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
