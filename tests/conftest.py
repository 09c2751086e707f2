from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import httpx
import pytest

from booktrack.config import CONFIG_ENV_OVERRIDES
from booktrack.gate import SessionGate
from booktrack.gateway import ApiClient
from booktrack.models import Session
from booktrack.session import SessionStore
from booktrack.storage import MemoryStorage

API_URL = "http://books.test"
TOKEN = "tok-ada-123"


@pytest.fixture(autouse=True)
def _isolate_booktrack_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for env_var in CONFIG_ENV_OVERRIDES.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.setenv("BOOKTRACK_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.setenv("BOOKTRACK_SESSION_PATH", str(tmp_path / "session.json"))
    monkeypatch.setenv("BOOKTRACK_API_URL", API_URL)


class FakeApi:
    """In-memory stand-in for the book-tracking service."""

    def __init__(self) -> None:
        self.token = TOKEN
        self.users: dict[str, dict[str, Any]] = {
            "ada@example.com": {"id": 7, "fullName": "Ada Reader", "password": "secret"}
        }
        self.books: dict[int, dict[str, Any]] = {}
        self.clubs: dict[int, dict[str, Any]] = {}
        self.posts: dict[int, dict[str, Any]] = {}
        self.library: list[int] = []
        self.progress: dict[int, dict[str, int]] = {}
        self.failures: dict[tuple[str, str], int] = {}
        self.requests: list[httpx.Request] = []

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def fail(self, method: str, path: str, status: int = 500) -> None:
        self.failures[(method, path)] = status

    def add_book(self, book_id: int, title: str, author: str = "Anon", pages: int = 100) -> None:
        self.books[book_id] = {
            "id": book_id,
            "title": title,
            "author": author,
            "description": f"About {title}",
            "totalPages": pages,
        }

    def add_club(self, club_id: int, name: str, book_title: str = "Dune") -> None:
        self.clubs[club_id] = {
            "id": club_id,
            "name": name,
            "description": f"{name} meets weekly",
            "bookTitle": book_title,
        }

    def add_post(self, post_id: int, club_id: int, content: str, user_name: str = "Bo") -> None:
        self.posts[post_id] = {
            "id": post_id,
            "bookClubId": club_id,
            "userId": 3,
            "userName": user_name,
            "content": content,
            "postedAt": "2026-10-01T10:00:00.000Z",
        }

    def paths(self, method: str | None = None) -> list[str]:
        return [
            request.url.path
            for request in self.requests
            if method is None or request.method == method
        ]

    def _next_id(self, table: dict[int, Any]) -> int:
        return max(table, default=0) + 1

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.method
        path = request.url.path
        forced = self.failures.get((method, path))
        if forced is not None:
            return httpx.Response(forced, json={"message": "forced failure"})
        body = json.loads(request.content) if request.content else None

        if (method, path) == ("POST", "/login"):
            user = self.users.get(body.get("email"))
            if user is None or user["password"] != body.get("password"):
                return httpx.Response(401, json={"message": "Invalid credentials"})
            return self._auth_response(body["email"], user)
        if (method, path) == ("POST", "/register"):
            if body["email"] in self.users:
                return httpx.Response(400, json={"message": "Email already registered"})
            user = {
                "id": 100 + len(self.users),
                "fullName": body["fullName"],
                "password": body["password"],
            }
            self.users[body["email"]] = user
            return self._auth_response(body["email"], user)

        if request.headers.get("Authorization") != f"Bearer {self.token}":
            return httpx.Response(401, json={"message": "Unauthorized"})

        params = request.url.params
        if path == "/api/Book" and method == "POST":
            record = {**body, "id": self._next_id(self.books)}
            self.books[record["id"]] = record
            return httpx.Response(201, json=record)
        if path == "/api/Book/recommended":
            return httpx.Response(200, json=[self.books[key] for key in sorted(self.books)][:3])
        if path.startswith("/api/Book/"):
            return self._by_id(self.books, path, method)
        if path == "/api/Bookclub" and method == "POST":
            record = {**body, "id": self._next_id(self.clubs)}
            self.clubs[record["id"]] = record
            return httpx.Response(201, json=record)
        if path.startswith("/api/BookClub/"):
            return self._by_id(self.clubs, path, method)
        if path == "/api/DiscussionPost" and method == "POST":
            record = {
                "id": self._next_id(self.posts),
                "bookClubId": body["bookClubId"],
                "userId": body["userId"],
                "userName": None,
                "content": body["content"],
                "postedAt": body["postedAt"],
            }
            self.posts[record["id"]] = record
            return httpx.Response(201, json=record)
        if path.startswith("/api/DiscussionPost/"):
            return self._by_id(self.posts, path, method)
        if path == "/api/UserLibrary/library":
            return httpx.Response(200, json=[self.books[key] for key in self.library])
        if path == "/api/UserLibrary/Add/Book":
            book_id = int(params["bookId"])
            if book_id not in self.books:
                return httpx.Response(404, json={"message": "Book not found"})
            if book_id not in self.library:
                self.library.append(book_id)
            return httpx.Response(200, json={"message": "added"})
        if path == "/api/UserLibrary/delete/Book":
            book_id = int(params["bookId"])
            if book_id not in self.library:
                return httpx.Response(404, json={"message": "Not in library"})
            self.library.remove(book_id)
            return httpx.Response(204)
        if path == "/api/Reading/progress" and method == "POST":
            book_id = int(params["bookId"])
            self.progress[book_id] = {
                "pagesRead": int(params["pagesRead"]),
                "readingGoal": int(params["readingGoal"]),
            }
            return httpx.Response(200, json={"message": "updated"})
        if path == "/api/Reading/progress/book":
            record = self.progress.get(int(params["bookId"]))
            if record is None:
                return httpx.Response(404, json={"message": "No progress"})
            return httpx.Response(200, json={"pagesRead": record})
        return httpx.Response(404, json={"message": "Unknown route"})

    def _auth_response(self, email: str, user: dict[str, Any]) -> httpx.Response:
        return httpx.Response(
            200,
            json={"token": self.token, "id": user["id"], "fullName": user["fullName"], "email": email},
        )

    def _by_id(self, table: dict[int, dict[str, Any]], path: str, method: str) -> httpx.Response:
        try:
            record_id = int(path.rsplit("/", 1)[1])
        except ValueError:
            return httpx.Response(400, json={"message": "Bad id"})
        if record_id not in table:
            return httpx.Response(404, json={"message": "Not found"})
        if method == "DELETE":
            del table[record_id]
            return httpx.Response(204)
        return httpx.Response(200, json=table[record_id])


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi()


@pytest.fixture
def session_store() -> SessionStore:
    store = SessionStore(MemoryStorage())
    store.initialize()
    store.establish(
        Session(user_id=7, full_name="Ada Reader", email="ada@example.com", token=TOKEN)
    )
    return store


@pytest.fixture
def gate(session_store: SessionStore) -> SessionGate:
    return SessionGate(session_store)


@pytest.fixture
def make_client(fake_api: FakeApi):
    def _make(store: SessionStore | None = None) -> ApiClient:
        return ApiClient(
            API_URL,
            token_source=(lambda: store.token) if store is not None else None,
            transport=fake_api.transport(),
        )

    return _make
