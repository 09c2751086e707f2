from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import httpx

from .config import BooktrackConfig
from .gate import SessionGate
from .gateway import ApiClient
from .session import SessionStore
from .storage import JsonFileStorage, KeyValueStorage


@dataclass
class AppContext:
    """Everything a command needs, wired once at startup."""

    config: BooktrackConfig
    store: SessionStore
    gate: SessionGate

    @classmethod
    def create(
        cls,
        config: BooktrackConfig,
        *,
        storage: KeyValueStorage | None = None,
        on_logout: Callable[[], None] | None = None,
        on_unauthenticated: Callable[[], None] | None = None,
    ) -> AppContext:
        store = SessionStore(
            storage or JsonFileStorage(config.resolved_session_path),
            on_clear=on_logout,
        )
        gate = SessionGate(store, redirect=on_unauthenticated)
        # Startup barrier: the gate must not decide before the store has loaded.
        store.initialize()
        return cls(config=config, store=store, gate=gate)

    def open_client(self, *, transport: httpx.AsyncBaseTransport | None = None) -> ApiClient:
        return ApiClient(
            self.config.api_url,
            token_source=lambda: self.store.token,
            timeout_s=self.config.request_timeout_s,
            transport=transport,
        )
