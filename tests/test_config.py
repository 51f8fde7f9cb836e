# tests/test_config.py
import pytest
from loguru import logger
from pydantic import ValidationError

from english_tutor.config import Settings, get_settings
from english_tutor.log import configure_logging


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch):
    monkeypatch.delenv("ENGLISH_TUTOR_USER_ID", raising=False)
    settings = Settings(_env_file=None)
    assert settings.user_id == "guest"
    assert settings.history_limit == 10
    assert settings.exam_duration_seconds == 5400


def test_env_override(monkeypatch, tmp_db):
    monkeypatch.setenv("ENGLISH_TUTOR_USER_ID", "alice")
    monkeypatch.setenv("ENGLISH_TUTOR_DB_PATH", tmp_db)
    monkeypatch.setenv("ENGLISH_TUTOR_HISTORY_LIMIT", "5")
    settings = get_settings()
    assert settings.user_id == "alice"
    assert settings.db_path == tmp_db
    assert settings.history_limit == 5
    assert get_settings() is settings


def test_invalid_history_limit(monkeypatch):
    monkeypatch.setenv("ENGLISH_TUTOR_HISTORY_LIMIT", "0")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_configure_logging_writes_file(tmp_path):
    log_file = tmp_path / "tutor.log"
    configure_logging("INFO", str(log_file))
    logger.info("goal set")
    logger.remove()
    assert "goal set" in log_file.read_text()
