from __future__ import annotations

import json
import logging
import sys

import pytest

from coursehub.core.logging import (
    _ContainerFormatter,
    _JsonFormatter,
    _RequestContextFilter,
    request_id_var,
    setup_logging,
)


@pytest.fixture(autouse=True)
def restore_logging():
    yield
    setup_logging("info")


def _record(level: int = logging.INFO, msg: str = "hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="test",
        level=level,
        pathname="svc.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_quiets_noisy_libraries_at_debug() -> None:
    setup_logging("debug")
    assert logging.getLogger("uvicorn").level == logging.WARNING
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_setup_logging_allows_uvicorn_at_error() -> None:
    setup_logging("error")
    assert logging.getLogger("uvicorn").level == logging.ERROR


def test_container_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record())
    assert "hello" in output
    assert "[svc.py:" not in output


def test_container_formatter_includes_location_for_warning() -> None:
    output = _ContainerFormatter().format(_record(logging.WARNING, "bad thing"))
    assert "bad thing" in output
    assert "[svc.py:42]" in output


def test_json_formatter_emits_one_object_with_context() -> None:
    record = _record(request_id="req-1", course_id="c-9", user_id="u-3")
    entry = json.loads(_JsonFormatter().format(record))
    assert entry["message"] == "hello"
    assert entry["level"] == "INFO"
    assert entry["request_id"] == "req-1"
    assert entry["course_id"] == "c-9"
    assert entry["user_id"] == "u-3"


def test_json_formatter_drops_placeholder_request_id() -> None:
    entry = json.loads(_JsonFormatter().format(_record(request_id="-")))
    assert "request_id" not in entry


def test_json_formatter_includes_exception() -> None:
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record(logging.ERROR, "failed")
        record.exc_info = sys.exc_info()
    entry = json.loads(_JsonFormatter().format(record))
    assert "RuntimeError: boom" in entry["exception"]


def test_request_context_filter_stamps_current_request_id() -> None:
    token = request_id_var.set("abc-123")
    try:
        record = _record()
        assert _RequestContextFilter().filter(record) is True
        assert record.request_id == "abc-123"
    finally:
        request_id_var.reset(token)

    record = _record()
    _RequestContextFilter().filter(record)
    assert record.request_id == "-"
