from __future__ import annotations

import logging

from .errors import AuthFailure, RequestFailed
from .gateway import ApiClient
from .models import Session
from .session import SessionStore

logger = logging.getLogger(__name__)


def _auth_failure(action: str, exc: RequestFailed) -> AuthFailure:
    if exc.status in {400, 401, 403}:
        message = f"{action} rejected: {exc.message}"
    elif exc.status is None:
        message = f"{action} failed: could not reach the server ({exc.message})"
    else:
        message = f"{action} failed: {exc.message}"
    return AuthFailure(message, status=exc.status)


async def login(client: ApiClient, store: SessionStore, email: str, password: str) -> Session:
    try:
        session = await client.authenticate(email, password)
    except RequestFailed as exc:
        logger.info("login failed", extra={"status": exc.status})
        raise _auth_failure("Login", exc) from exc
    return store.establish(session)


async def register(
    client: ApiClient,
    store: SessionStore,
    full_name: str,
    email: str,
    password: str,
) -> Session:
    try:
        session = await client.register(full_name, email, password)
    except RequestFailed as exc:
        logger.info("registration failed", extra={"status": exc.status})
        raise _auth_failure("Registration", exc) from exc
    return store.establish(session)


def logout(store: SessionStore) -> None:
    store.clear()
