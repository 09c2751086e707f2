from __future__ import annotations

import json
import logging
from collections.abc import Callable, Generator
from typing import Any

import httpx

from .errors import RequestFailed
from .models import (
    Book,
    BookClub,
    DiscussionPost,
    NewBook,
    NewBookClub,
    NewDiscussionPost,
    ReadingProgress,
    Session,
)
from .redaction import redact, truncate

logger = logging.getLogger(__name__)


def build_base_url(address: str) -> str:
    trimmed = address.strip().rstrip("/")
    if not trimmed:
        return ""
    if "://" in trimmed:
        return trimmed
    return f"http://{trimmed}"


class BearerTokenAuth(httpx.Auth):
    """Attach ``Authorization: Bearer`` from a token source at send time.

    The token is looked up per request, so logging in or out mid-run is
    picked up by the next call. No token means no header.
    """

    def __init__(self, token_source: Callable[[], str | None]) -> None:
        self._token_source = token_source

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self._token_source()
        if token:
            request.headers["Authorization"] = f"Bearer {token}"
        yield request


def _error_message(response: httpx.Response) -> str:
    try:
        payload = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        payload = None
    if isinstance(payload, dict):
        for key in ("message", "error", "title", "detail"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                return redact(value.strip())
    text = response.text.strip()
    if text:
        return truncate(redact(text))
    return response.reason_phrase or f"HTTP {response.status_code}"


def _decode(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return response.text


def _parse(parser: Callable[[Any], Any], payload: Any, *, method: str, path: str, status: int) -> Any:
    try:
        return parser(payload)
    except ValueError as exc:
        raise RequestFailed(
            status, f"unexpected response: {exc}", method=method, path=path
        ) from exc


class ApiClient:
    """Typed access to the book-tracking API.

    One coroutine per endpoint. Every failure, transport or HTTP, surfaces as
    :class:`RequestFailed`; nothing is retried here.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token_source: Callable[[], str | None] | None = None,
        timeout_s: float | None = 5.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = build_base_url(base_url)
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Accept": "application/json"},
            auth=BearerTokenAuth(token_source or (lambda: None)),
            timeout=timeout_s,
            transport=transport,
        )

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> tuple[int, Any]:
        try:
            response = await self._client.request(method, path, params=params, json=body)
        except httpx.HTTPError as exc:
            message = str(exc) or exc.__class__.__name__
            logger.info(
                "request transport failure",
                extra={"method": method, "path": path, "error": message},
            )
            raise RequestFailed(None, message, method=method, path=path) from exc
        if not response.is_success:
            message = _error_message(response)
            logger.info(
                "request failed",
                extra={"method": method, "path": path, "status": response.status_code},
            )
            raise RequestFailed(response.status_code, message, method=method, path=path)
        return response.status_code, _decode(response)

    # Auth

    async def authenticate(self, email: str, password: str) -> Session:
        status, payload = await self._request(
            "POST", "/login", body={"email": email, "password": password}
        )
        return _parse(Session.from_auth_response, payload, method="POST", path="/login", status=status)

    async def register(self, full_name: str, email: str, password: str) -> Session:
        status, payload = await self._request(
            "POST",
            "/register",
            body={"fullName": full_name, "email": email, "password": password},
        )
        return _parse(
            Session.from_auth_response, payload, method="POST", path="/register", status=status
        )

    # Books

    async def get_book(self, book_id: int) -> Book:
        path = f"/api/Book/{book_id}"
        status, payload = await self._request("GET", path)
        return _parse(Book.from_payload, payload, method="GET", path=path, status=status)

    async def create_book(self, book: NewBook) -> Book:
        status, payload = await self._request("POST", "/api/Book", body=book.to_payload())
        return _parse(Book.from_payload, payload, method="POST", path="/api/Book", status=status)

    async def delete_book(self, book_id: int) -> None:
        await self._request("DELETE", f"/api/Book/{book_id}")

    async def get_recommended_books(self) -> list[Book]:
        path = "/api/Book/recommended"
        status, payload = await self._request("GET", path)
        return _parse(_book_list, payload, method="GET", path=path, status=status)

    # Library

    async def get_library(self) -> list[Book]:
        path = "/api/UserLibrary/library"
        status, payload = await self._request("GET", path)
        return _parse(_book_list, payload, method="GET", path=path, status=status)

    async def add_to_library(self, book_id: int) -> None:
        await self._request("POST", "/api/UserLibrary/Add/Book", params={"bookId": book_id})

    async def remove_from_library(self, book_id: int) -> None:
        await self._request("DELETE", "/api/UserLibrary/delete/Book", params={"bookId": book_id})

    # Book clubs

    async def get_book_club(self, club_id: int) -> BookClub:
        path = f"/api/BookClub/{club_id}"
        status, payload = await self._request("GET", path)
        return _parse(BookClub.from_payload, payload, method="GET", path=path, status=status)

    async def create_book_club(self, club: NewBookClub) -> BookClub:
        status, payload = await self._request("POST", "/api/Bookclub", body=club.to_payload())
        return _parse(
            BookClub.from_payload, payload, method="POST", path="/api/Bookclub", status=status
        )

    async def delete_book_club(self, club_id: int) -> None:
        await self._request("DELETE", f"/api/BookClub/{club_id}")

    # Discussion posts

    async def get_discussion_post(self, post_id: int) -> DiscussionPost:
        path = f"/api/DiscussionPost/{post_id}"
        status, payload = await self._request("GET", path)
        return _parse(DiscussionPost.from_payload, payload, method="GET", path=path, status=status)

    async def create_discussion_post(self, post: NewDiscussionPost) -> DiscussionPost:
        path = "/api/DiscussionPost"
        status, payload = await self._request("POST", path, body=post.to_payload())
        return _parse(DiscussionPost.from_payload, payload, method="POST", path=path, status=status)

    async def delete_discussion_post(self, post_id: int) -> None:
        await self._request("DELETE", f"/api/DiscussionPost/{post_id}")

    # Reading progress

    async def get_reading_progress(self, book_id: int) -> ReadingProgress:
        _, payload = await self._request(
            "GET", "/api/Reading/progress/book", params={"bookId": book_id}
        )
        return ReadingProgress.from_payload(book_id, payload)

    async def update_reading_progress(
        self, book_id: int, pages_read: int, reading_goal: int
    ) -> ReadingProgress:
        await self._request(
            "POST",
            "/api/Reading/progress",
            params={"bookId": book_id, "pagesRead": pages_read, "readingGoal": reading_goal},
        )
        return ReadingProgress(book_id=book_id, pages_read=pages_read, reading_goal=reading_goal)


def _book_list(payload: Any) -> list[Book]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise ValueError("expected a list of books")
    return [Book.from_payload(item) for item in payload]
