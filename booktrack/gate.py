from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum

from .errors import NotAuthenticated
from .models import Session
from .session import SessionStore

logger = logging.getLogger(__name__)


class GateState(str, Enum):
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class SessionGate:
    """Admission control for protected views.

    ``redirect`` is called each time an unauthenticated caller asks to be
    admitted; it sends the user to the login entry point.
    """

    def __init__(self, store: SessionStore, *, redirect: Callable[[], None] | None = None) -> None:
        self._store = store
        self._redirect = redirect
        self._state = self._evaluate()
        self._unsubscribe = store.subscribe(self._on_session_change)

    @property
    def state(self) -> GateState:
        return self._state

    @property
    def waiting(self) -> bool:
        return self._state is GateState.UNKNOWN

    def _evaluate(self) -> GateState:
        if not self._store.initialized:
            return GateState.UNKNOWN
        if self._store.is_authenticated():
            return GateState.AUTHENTICATED
        return GateState.UNAUTHENTICATED

    def _on_session_change(self, _session: Session | None) -> None:
        previous = self._state
        self._state = self._evaluate()
        if previous is not self._state:
            logger.debug("session gate %s -> %s", previous.value, self._state.value)

    def admit(self) -> bool:
        if self._state is GateState.AUTHENTICATED:
            return True
        if self._state is GateState.UNAUTHENTICATED and self._redirect is not None:
            self._redirect()
        return False

    def require(self) -> Session:
        if not self.admit():
            if self._state is GateState.UNKNOWN:
                raise NotAuthenticated("session not initialized")
            raise NotAuthenticated("not logged in")
        session = self._store.session
        if session is None:
            raise NotAuthenticated("not logged in")
        return session

    def close(self) -> None:
        self._unsubscribe()
