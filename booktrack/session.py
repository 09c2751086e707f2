from __future__ import annotations

import json
import logging
from collections.abc import Callable

from .models import Session, UserProfile
from .storage import KeyValueStorage

logger = logging.getLogger(__name__)

TOKEN_KEY = "token"
PROFILE_KEY = "user"

SessionListener = Callable[["Session | None"], None]


def _restore(token: str | None, raw_profile: str | None) -> Session | None:
    if not token or not raw_profile:
        return None
    try:
        profile = UserProfile.from_payload(json.loads(raw_profile))
    except (json.JSONDecodeError, ValueError):
        return None
    return Session.from_profile(token, profile)


class SessionStore:
    """Single source of truth for who is logged in.

    The credential and the profile live under two storage keys that are
    always written and removed together. ``initialize`` must run before the
    session gate makes its first decision.
    """

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        on_clear: Callable[[], None] | None = None,
    ) -> None:
        self._storage = storage
        self._on_clear = on_clear
        self._session: Session | None = None
        self._initialized = False
        self._listeners: list[SessionListener] = []

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def token(self) -> str | None:
        return self._session.token if self._session is not None else None

    def is_authenticated(self) -> bool:
        return self._session is not None

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def initialize(self) -> Session | None:
        try:
            stored = self._storage.read((TOKEN_KEY, PROFILE_KEY))
            token = stored.get(TOKEN_KEY)
            raw_profile = stored.get(PROFILE_KEY)
        except (OSError, ValueError) as exc:
            logger.warning("session storage unreadable, starting logged out", exc_info=exc)
            token = raw_profile = None
            self._wipe_storage()
        session = None
        if token is not None or raw_profile is not None:
            session = _restore(token, raw_profile)
            if session is None:
                logger.warning(
                    "discarding partial session state",
                    extra={"has_token": token is not None, "has_profile": raw_profile is not None},
                )
                self._wipe_storage()
        self._session = session
        self._initialized = True
        self._notify()
        return session

    def establish(self, session: Session) -> Session:
        if not isinstance(session, Session):
            raise TypeError("establish() expects a Session")
        # Profile first: a token on disk always has its profile beside it.
        self._storage.update(
            {
                PROFILE_KEY: json.dumps(session.profile.to_payload(), ensure_ascii=False),
                TOKEN_KEY: session.token,
            }
        )
        self._session = session
        self._initialized = True
        logger.info("session established", extra={"user_id": session.user_id})
        self._notify()
        return session

    def clear(self) -> None:
        self._storage.update({TOKEN_KEY: None, PROFILE_KEY: None})
        self._session = None
        self._initialized = True
        self._notify()
        if self._on_clear is not None:
            self._on_clear()

    def _wipe_storage(self) -> None:
        try:
            self._storage.update({TOKEN_KEY: None, PROFILE_KEY: None})
        except OSError as exc:
            logger.warning("failed to clear session storage", exc_info=exc)

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._session)
