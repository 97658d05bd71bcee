# tests/test_config_logging.py

import json
import logging

import pytest

from prompt_library.core.config import Settings
from prompt_library.core.logging import (
    StructuredJSONFormatter,
    operation_logger,
    set_request_id,
    setup_logging,
)


def test_database_url_for_file_and_memory(tmp_path):
    file_settings = Settings(database_path=str(tmp_path / "p.db"))
    memory_settings = Settings(database_path=":memory:")

    assert file_settings.database_url == f"sqlite+aiosqlite:///{tmp_path / 'p.db'}"
    assert not file_settings.is_in_memory()
    assert memory_settings.database_url == "sqlite+aiosqlite:///:memory:"
    assert memory_settings.is_in_memory()


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_PATH", "/tmp/env.db")
    monkeypatch.setenv("PORT", "4000")
    monkeypatch.setenv("SEED_ON_STARTUP", "false")

    settings = Settings()

    assert settings.database_path == "/tmp/env.db"
    assert settings.port == 4000
    assert settings.seed_on_startup is False


def test_json_formatter_includes_context():
    record = logging.LogRecord("prompt_library.test", logging.INFO, __file__, 10, "hello", None, None)
    record.event = "operation_start"
    record.context = {"prompt_id": "1"}

    set_request_id("req_test")
    try:
        payload = json.loads(StructuredJSONFormatter().format(record))
    finally:
        set_request_id(None)

    assert payload["message"] == "hello"
    assert payload["event"] == "operation_start"
    assert payload["request_id"] == "req_test"
    assert payload["context"] == {"prompt_id": "1"}


def test_setup_logging_writes_both_files(tmp_path):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging(log_level="DEBUG", log_dir=tmp_path)
        logging.getLogger("prompt_library.test").info("written")
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)

    assert "written" in (tmp_path / "application.log").read_text(encoding="utf-8")
    lines = (tmp_path / "application.log.json").read_text(encoding="utf-8").splitlines()
    assert any(json.loads(line)["message"] == "written" for line in lines)


async def test_operation_logger_logs_async_success_and_failure(caplog):
    @operation_logger("sample_operation")
    async def succeed(value):
        return value * 2

    @operation_logger("sample_operation")
    async def fail():
        raise ValueError("nope")

    caplog.set_level(logging.INFO)
    assert await succeed(21) == 42
    events = [getattr(r, "event", None) for r in caplog.records]
    assert events[-2:] == ["operation_start", "operation_complete"]

    caplog.clear()
    with pytest.raises(ValueError):
        await fail()
    assert [getattr(r, "event", None) for r in caplog.records][-1] == "operation_error"
