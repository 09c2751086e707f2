from __future__ import annotations

import json
import os
import warnings
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

DEFAULT_CONFIG_PATH = Path("~/.config/booktrack/config.json").expanduser()
DEFAULT_SESSION_PATH = "~/.config/booktrack/session.json"
DEFAULT_API_URL = "http://localhost:5004"

CONFIG_ENV_OVERRIDES = {
    "api_url": "BOOKTRACK_API_URL",
    "session_path": "BOOKTRACK_SESSION_PATH",
    "request_timeout_s": "BOOKTRACK_REQUEST_TIMEOUT_S",
    "book_probe_limit": "BOOKTRACK_BOOK_PROBE_LIMIT",
    "club_probe_limit": "BOOKTRACK_CLUB_PROBE_LIMIT",
    "post_probe_limit": "BOOKTRACK_POST_PROBE_LIMIT",
    "notice_ttl_s": "BOOKTRACK_NOTICE_TTL_S",
    "log_level": "BOOKTRACK_LOG_LEVEL",
    "log_file": "BOOKTRACK_LOG_FILE",
}

_INT_KEYS = {"book_probe_limit", "club_probe_limit", "post_probe_limit"}
_FLOAT_KEYS = {"request_timeout_s", "notice_ttl_s"}


def get_config_path(path: Path | None = None) -> Path:
    candidate = path or Path(os.getenv("BOOKTRACK_CONFIG", DEFAULT_CONFIG_PATH))
    return candidate.expanduser()


def strip_json_comments(text: str) -> str:
    lines: list[str] = []
    for line in text.splitlines():
        result: list[str] = []
        in_string = False
        escape_next = False
        i = 0
        while i < len(line):
            char = line[i]
            if escape_next:
                result.append(char)
                escape_next = False
                i += 1
                continue
            if char == "\\" and in_string:
                result.append(char)
                escape_next = True
                i += 1
                continue
            if char == '"':
                in_string = not in_string
            elif not in_string and char == "/" and line[i + 1 : i + 2] == "/":
                break
            result.append(char)
            i += 1
        lines.append("".join(result))
    return "\n".join(lines)


def _parse_json_text(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return json.loads(strip_json_comments(raw))


def read_config_file(path: Path | None = None) -> dict[str, Any]:
    config_path = get_config_path(path)
    if not config_path.exists():
        return {}
    raw = config_path.read_text()
    if not raw.strip():
        return {}
    try:
        data = _parse_json_text(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("invalid config json") from exc
    if not isinstance(data, dict):
        raise ValueError("config must be an object")
    return data


def write_config_file(data: dict[str, Any], path: Path | None = None) -> Path:
    config_path = get_config_path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n")
    return config_path


def get_env_overrides() -> dict[str, str]:
    overrides: dict[str, str] = {}
    for key, env_var in CONFIG_ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value is not None:
            overrides[key] = value
    return overrides


@dataclass
class BooktrackConfig:
    api_url: str = DEFAULT_API_URL
    session_path: str = DEFAULT_SESSION_PATH
    # httpx's own default; no extra timeout is layered on top of it.
    request_timeout_s: float = 5.0
    book_probe_limit: int = 20
    club_probe_limit: int = 10
    post_probe_limit: int = 20
    notice_ttl_s: float = 3.0
    log_level: str = "WARNING"
    log_file: str | None = None

    @property
    def resolved_session_path(self) -> Path:
        return Path(self.session_path).expanduser()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _parse_int(value: object, default: int, *, key: str) -> int:
    if value is None:
        return default
    try:
        parsed = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    if parsed < 0:
        warnings.warn(f"Invalid int for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    return parsed


def _parse_float(value: object, default: float, *, key: str) -> float:
    if value is None:
        return default
    try:
        parsed = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        warnings.warn(f"Invalid float for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    if parsed <= 0:
        warnings.warn(f"Invalid float for {key}: {value!r}", RuntimeWarning, stacklevel=2)
        return default
    return parsed


def coerce_value(key: str, value: object, default: object) -> object:
    if key in _INT_KEYS:
        return _parse_int(value, int(default), key=key)  # type: ignore[call-overload]
    if key in _FLOAT_KEYS:
        return _parse_float(value, float(default), key=key)  # type: ignore[arg-type]
    if key == "log_level":
        return str(value).strip().upper() if value else default
    if value is None:
        return default
    return str(value)


def load_config(path: Path | None = None) -> BooktrackConfig:
    cfg = BooktrackConfig()
    config_path = get_config_path(path)
    if config_path.exists():
        try:
            data = _parse_json_text(config_path.read_text())
        except json.JSONDecodeError:
            data = {}
        if isinstance(data, dict):
            cfg = _apply_dict(cfg, data)
    cfg = _apply_env(cfg)
    return cfg


def _apply_dict(cfg: BooktrackConfig, data: dict[str, Any]) -> BooktrackConfig:
    for key, value in data.items():
        if not hasattr(cfg, key):
            continue
        if key == "log_file" and not value:
            cfg.log_file = None
            continue
        setattr(cfg, key, coerce_value(key, value, getattr(cfg, key)))
    return cfg


def _apply_env(cfg: BooktrackConfig) -> BooktrackConfig:
    for key, value in get_env_overrides().items():
        if key == "log_file":
            cfg.log_file = value or None
            continue
        setattr(cfg, key, coerce_value(key, value, getattr(cfg, key)))
    return cfg
