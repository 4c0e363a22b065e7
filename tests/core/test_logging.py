"""Log output format tests.

The JSON formatter feeds the log pipeline, so its shape is asserted
directly; the console formatter only needs to stay on one line.
"""

from __future__ import annotations

import json
import logging
import sys

from learnhub.core.logging import (
    _ConsoleFormatter,
    _JsonLinesFormatter,
    setup_logging,
)


def _record(msg: str = "hello %s", args: tuple = ("world",), **kwargs):
    return logging.LogRecord(
        name="learnhub.test",
        level=kwargs.pop("level", logging.INFO),
        pathname="test.py",
        lineno=42,
        msg=msg,
        args=args,
        exc_info=kwargs.pop("exc_info", None),
    )


def test_json_formatter_produces_valid_json() -> None:
    parsed = json.loads(_JsonLinesFormatter().format(_record()))
    assert parsed["level"] == "INFO"
    assert parsed["logger"] == "learnhub.test"
    assert parsed["message"] == "hello world"
    assert "timestamp" in parsed


def test_json_formatter_promotes_request_context() -> None:
    record = _record()
    record.request_id = "req-1"  # type: ignore[attr-defined]
    record.method = "POST"  # type: ignore[attr-defined]
    record.path = "/checkout"  # type: ignore[attr-defined]
    record.status_code = 200  # type: ignore[attr-defined]
    record.duration_ms = 3.2  # type: ignore[attr-defined]

    parsed = json.loads(_JsonLinesFormatter().format(record))
    assert parsed["request_id"] == "req-1"
    assert parsed["method"] == "POST"
    assert parsed["path"] == "/checkout"
    assert parsed["status_code"] == 200
    assert parsed["duration_ms"] == 3.2


def test_json_formatter_skips_placeholder_request_id() -> None:
    record = _record()
    record.request_id = "-"  # type: ignore[attr-defined]
    assert "request_id" not in json.loads(_JsonLinesFormatter().format(record))


def test_json_formatter_includes_exception() -> None:
    try:
        raise ValueError("checkout failed")
    except ValueError:
        record = _record("boom", (), level=logging.ERROR, exc_info=sys.exc_info())

    parsed = json.loads(_JsonLinesFormatter().format(record))
    assert "ValueError: checkout failed" in parsed["exception"]


def test_container_formatter_location_suffix_only_for_warnings() -> None:
    formatter = _ConsoleFormatter()
    info = formatter.format(_record())
    warning = formatter.format(_record(level=logging.WARNING))

    assert "[test.py:42]" not in info
    assert warning.endswith("[test.py:42]")
    assert "\n" not in info


def test_setup_logging_installs_single_handler() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        setup_logging("debug", json_format=True)
        setup_logging("warning", json_format=True)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, _JsonLinesFormatter)
        assert root.level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)


def test_console_formatter_prefixes_request_id() -> None:
    record = _record()
    record.request_id = "req-7"  # type: ignore[attr-defined]
    assert "req=req-7  hello world" in _ConsoleFormatter().format(record)

    record.request_id = "-"  # type: ignore[attr-defined]
    assert "req=" not in _ConsoleFormatter().format(record)
