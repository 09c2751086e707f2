from __future__ import annotations

from types import SimpleNamespace

import pytest

from booktrack.errors import NotAuthenticated
from booktrack.gate import GateState, SessionGate
from booktrack.models import Session
from booktrack.session import SessionStore
from booktrack.storage import MemoryStorage

ADA = Session(user_id=7, full_name="Ada Reader", email="ada@example.com", token="tok-1")


def test_gate_waits_until_store_initialized() -> None:
    redirects: list[str] = []
    store = SessionStore(MemoryStorage())
    gate = SessionGate(store, redirect=lambda: redirects.append("login"))

    assert gate.state is GateState.UNKNOWN
    assert gate.waiting is True
    assert gate.admit() is False
    assert redirects == []
    with pytest.raises(NotAuthenticated, match="not initialized"):
        gate.require()


def test_gate_redirects_when_logged_out() -> None:
    redirects: list[str] = []
    store = SessionStore(MemoryStorage())
    gate = SessionGate(store, redirect=lambda: redirects.append("login"))
    store.initialize()

    assert gate.state is GateState.UNAUTHENTICATED
    assert gate.admit() is False
    assert redirects == ["login"]
    with pytest.raises(NotAuthenticated, match="not logged in"):
        gate.require()
    assert redirects == ["login", "login"]


def test_gate_admits_authenticated_session() -> None:
    store = SessionStore(MemoryStorage())
    store.initialize()
    store.establish(ADA)
    gate = SessionGate(store)

    assert gate.state is GateState.AUTHENTICATED
    assert gate.admit() is True
    assert gate.require() == ADA


def test_gate_follows_login_and_logout() -> None:
    store = SessionStore(MemoryStorage())
    gate = SessionGate(store)
    store.initialize()

    store.establish(ADA)
    assert gate.state is GateState.AUTHENTICATED

    store.clear()
    assert gate.state is GateState.UNAUTHENTICATED


def test_closed_gate_stops_following_store() -> None:
    store = SessionStore(MemoryStorage())
    gate = SessionGate(store)
    gate.close()

    store.initialize()

    assert gate.state is GateState.UNKNOWN


def test_require_raises_when_store_loses_session() -> None:
    store = SimpleNamespace(
        initialized=True,
        session=None,
        is_authenticated=lambda: True,
        subscribe=lambda listener: lambda: None,
    )
    gate = SessionGate(store)  # type: ignore[arg-type]

    assert gate.state is GateState.AUTHENTICATED
    with pytest.raises(NotAuthenticated, match="not logged in"):
        gate.require()
