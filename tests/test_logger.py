from logging.handlers import TimedRotatingFileHandler

from news_radar.utils.config import Settings
from news_radar.utils.logger import PROJECT_ROOT, _file_handler, resolve_log_path


def test_relative_log_dir_is_under_project_root():
    settings = Settings(log_dir="logs", log_file="radar.log")
    assert resolve_log_path(settings) == PROJECT_ROOT / "logs" / "radar.log"


def test_file_handler_uses_configured_path_and_retention(tmp_path):
    settings = Settings(log_dir=str(tmp_path / "nested"), log_file="radar.log", log_backup_days=7)
    handler = _file_handler(settings)
    try:
        assert isinstance(handler, TimedRotatingFileHandler)
        assert handler.baseFilename == str(tmp_path / "nested" / "radar.log")
        assert handler.backupCount == 7
    finally:
        handler.close()
