from __future__ import annotations

import json
from dataclasses import fields

import typer
from rich import print
from rich.markup import escape

from booktrack.config import BooktrackConfig, coerce_value, get_config_path, load_config

from . import common

_CONFIG_KEYS = {item.name for item in fields(BooktrackConfig)}


def config_show_cmd() -> None:
    """Print the effective configuration (file plus environment)."""

    config = load_config()
    print(f"- Config: {get_config_path()}")
    print(escape(json.dumps(config.to_dict(), indent=2, ensure_ascii=False)))


def config_set_cmd(*, key: str, value: str) -> None:
    """Write one configuration value to the config file."""

    if key not in _CONFIG_KEYS:
        known = ", ".join(sorted(_CONFIG_KEYS))
        print(f"[red]Unknown config key: {escape(key)}[/red]")
        print(f"Known keys: {known}")
        raise typer.Exit(code=1)
    data = common.read_config_or_exit()
    default = getattr(BooktrackConfig(), key)
    if key == "log_file" and not value.strip():
        data[key] = None
    else:
        data[key] = coerce_value(key, value, default)
    common.write_config_or_exit(data)
    print(f"[green]Set {key}[/green] = {escape(json.dumps(data[key]))}")
