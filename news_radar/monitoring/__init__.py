"""
모니터링 모듈 (FastAPI WebSocket 서버)
"""
from news_radar.monitoring.api_server import app, set_dependencies

__all__ = ["app", "set_dependencies"]
