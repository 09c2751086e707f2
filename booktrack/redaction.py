from __future__ import annotations

import re

REDACTION_PATTERNS = [
    re.compile(r"Bearer\s+[A-Za-z0-9._~+/=-]+", re.IGNORECASE),
    re.compile(r"\"token\"\s*:\s*\"[^\"]*\"", re.IGNORECASE),
]


def redact(text: str) -> str:
    redacted = text
    for pattern in REDACTION_PATTERNS:
        redacted = pattern.sub("[REDACTED]", redacted)
    return redacted


def truncate(text: str, limit: int = 240) -> str:
    if len(text) > limit:
        return f"{text[:limit]}..."
    return text
