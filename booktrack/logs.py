from __future__ import annotations

import logging
import threading
from pathlib import Path

from .redaction import redact

LOG_FORMAT = "[booktrack] %(asctime)s %(levelname)s %(name)s %(message)s"

_LOCK = threading.Lock()
_HANDLER: logging.Handler | None = None


class RedactingFilter(logging.Filter):
    """Scrub bearer tokens from formatted messages."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def configure_logging(level: str = "WARNING", log_file: str | None = None) -> logging.Logger:
    """Attach a single handler to the ``booktrack`` logger.

    Calling again replaces the handler, so the CLI can reconfigure after
    loading config.
    """
    global _HANDLER
    logger = logging.getLogger("booktrack")
    with _LOCK:
        if _HANDLER is not None:
            logger.removeHandler(_HANDLER)
            _HANDLER.close()
        handler: logging.Handler
        if log_file:
            path = Path(log_file).expanduser()
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = logging.FileHandler(path, encoding="utf-8")
        else:
            handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(RedactingFilter())
        logger.addHandler(handler)
        logger.setLevel(getattr(logging, level.upper(), logging.WARNING))
        logger.propagate = False
        _HANDLER = handler
    return logger
