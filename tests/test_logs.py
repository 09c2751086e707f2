from __future__ import annotations

import logging
from pathlib import Path

import pytest

from booktrack.logs import configure_logging
from booktrack.redaction import redact, truncate


@pytest.fixture(autouse=True)
def _reset_booktrack_logger(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr("booktrack.logs._HANDLER", None)
    yield
    logger = logging.getLogger("booktrack")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def test_redact_masks_bearer_tokens_and_token_fields() -> None:
    text = 'Authorization: Bearer abc.def-123 body={"token": "s3cret", "id": 1}'

    cleaned = redact(text)

    assert "abc.def-123" not in cleaned
    assert "s3cret" not in cleaned
    assert '"id": 1' in cleaned


def test_truncate_long_text() -> None:
    assert truncate("a" * 10, limit=4) == "aaaa..."
    assert truncate("short") == "short"


def test_configure_logging_writes_redacted_lines_to_file(tmp_path: Path) -> None:
    log_path = tmp_path / "logs" / "booktrack.log"

    logger = configure_logging("info", str(log_path))
    logging.getLogger("booktrack.gateway").info("sending Bearer %s", "tok-xyz")
    logging.getLogger("booktrack.gateway").debug("hidden below level")
    for handler in logger.handlers:
        handler.flush()

    content = log_path.read_text()
    assert "[booktrack]" in content
    assert "sending [REDACTED]" in content
    assert "tok-xyz" not in content
    assert "hidden below level" not in content


def test_configure_logging_replaces_previous_handler(tmp_path: Path) -> None:
    configure_logging("WARNING", str(tmp_path / "first.log"))
    logger = configure_logging("WARNING", str(tmp_path / "second.log"))

    assert len(logger.handlers) == 1
    assert logger.propagate is False
