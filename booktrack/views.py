"""View models behind the command-line screens.

Each view asks the session gate for admission before touching the network,
keeps its own snapshot of records, and folds create/delete results into that
snapshot without fetching the collection again. Results that arrive after
``unmount`` are dropped.
"""

from __future__ import annotations

import datetime as dt
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import RequestFailed
from .gate import SessionGate
from .gateway import ApiClient
from .materialize import (
    DEFAULT_BOOK_PROBE_LIMIT,
    DEFAULT_CLUB_PROBE_LIMIT,
    DEFAULT_POST_PROBE_LIMIT,
    materialize_book_clubs,
    materialize_books,
    materialize_discussion_posts,
)
from .merge import append_created, remove_deleted
from .models import (
    Book,
    BookClub,
    DiscussionPost,
    NewBook,
    NewBookClub,
    NewDiscussionPost,
    ReadingProgress,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_NOTICE_TTL_S = 3.0


@dataclass(frozen=True)
class Notice:
    kind: str
    text: str
    expires_at: float


class NoticeBoard:
    """Short-lived success/error banners for one view."""

    def __init__(
        self,
        ttl_s: float = DEFAULT_NOTICE_TTL_S,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_s = ttl_s
        self._clock = clock
        self._notices: list[Notice] = []

    def _post(self, kind: str, text: str) -> Notice:
        notice = Notice(kind=kind, text=text, expires_at=self._clock() + self.ttl_s)
        self._notices = [item for item in self._notices if item.kind != kind]
        self._notices.append(notice)
        return notice

    def success(self, text: str) -> Notice:
        return self._post("success", text)

    def error(self, text: str) -> Notice:
        return self._post("error", text)

    def active(self) -> list[Notice]:
        now = self._clock()
        self._notices = [item for item in self._notices if item.expires_at > now]
        return list(self._notices)

    def latest(self, kind: str) -> Notice | None:
        for notice in reversed(self.active()):
            if notice.kind == kind:
                return notice
        return None

    def dismiss(self, kind: str | None = None) -> None:
        if kind is None:
            self._notices = []
            return
        self._notices = [item for item in self._notices if item.kind != kind]


class View:
    def __init__(
        self,
        client: ApiClient,
        gate: SessionGate,
        *,
        notice_ttl_s: float = DEFAULT_NOTICE_TTL_S,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client = client
        self.gate = gate
        self.notices = NoticeBoard(notice_ttl_s, clock=clock)
        self.loading = True
        self.error: str | None = None
        self.mounted = True

    def unmount(self) -> None:
        self.mounted = False

    async def _mutate(
        self,
        action: Callable[[], Awaitable[R]],
        *,
        success: str,
        failure: str,
    ) -> tuple[bool, R | None]:
        if not self.gate.admit():
            return False, None
        try:
            result = await action()
        except RequestFailed as exc:
            logger.info(
                "mutation failed",
                extra={"view": type(self).__name__, "status": exc.status, "error": exc.message},
            )
            if self.mounted:
                self.notices.error(failure)
            return False, None
        if self.mounted:
            self.notices.success(success)
        return True, result


class CollectionView(View, Generic[T]):
    load_failure = "Failed to load. Please try again."

    def __init__(self, client: ApiClient, gate: SessionGate, **kwargs) -> None:
        super().__init__(client, gate, **kwargs)
        self.items: list[T] = []

    async def _fetch(self) -> list[T]:
        raise NotImplementedError

    async def load(self) -> list[T]:
        if not self.gate.admit():
            return []
        self.loading = True
        try:
            items = await self._fetch()
        except RequestFailed as exc:
            logger.info("view load failed", extra={"view": type(self).__name__, "status": exc.status})
            if self.mounted:
                self.error = self.load_failure
                self.loading = False
            return []
        if self.mounted:
            self.items = items
            self.error = None
            self.loading = False
        return items

    def _append(self, record: T) -> None:
        if self.mounted:
            self.items = append_created(self.items, record)

    def _remove(self, record_id: int) -> None:
        if self.mounted:
            self.items = remove_deleted(self.items, record_id)


class BooksView(CollectionView[Book]):
    load_failure = "Failed to load books. Please try again."

    def __init__(
        self,
        client: ApiClient,
        gate: SessionGate,
        *,
        probe_limit: int = DEFAULT_BOOK_PROBE_LIMIT,
        **kwargs,
    ) -> None:
        super().__init__(client, gate, **kwargs)
        self.probe_limit = probe_limit

    async def _fetch(self) -> list[Book]:
        return await materialize_books(self.client, limit=self.probe_limit)

    def filtered(self, term: str) -> list[Book]:
        needle = term.strip().lower()
        if not needle:
            return list(self.items)
        return [
            book
            for book in self.items
            if needle in book.title.lower() or needle in book.author.lower()
        ]

    async def create(self, book: NewBook) -> Book | None:
        ok, created = await self._mutate(
            lambda: self.client.create_book(book),
            success="Book added successfully!",
            failure="Failed to add book. Please try again.",
        )
        if ok and created is not None:
            self._append(created)
        return created

    async def delete(self, book_id: int) -> bool:
        ok, _ = await self._mutate(
            lambda: self.client.delete_book(book_id),
            success="Book deleted successfully!",
            failure="Failed to delete book. Please try again.",
        )
        if ok:
            self._remove(book_id)
        return ok


class BookClubsView(CollectionView[BookClub]):
    load_failure = "Failed to load book clubs. Please try again."

    def __init__(
        self,
        client: ApiClient,
        gate: SessionGate,
        *,
        probe_limit: int = DEFAULT_CLUB_PROBE_LIMIT,
        **kwargs,
    ) -> None:
        super().__init__(client, gate, **kwargs)
        self.probe_limit = probe_limit

    async def _fetch(self) -> list[BookClub]:
        return await materialize_book_clubs(self.client, limit=self.probe_limit)

    async def create(self, club: NewBookClub) -> BookClub | None:
        ok, created = await self._mutate(
            lambda: self.client.create_book_club(club),
            success="Book club created successfully!",
            failure="Failed to create book club. Please try again.",
        )
        if ok and created is not None:
            self._append(created)
        return created

    async def delete(self, club_id: int) -> bool:
        ok, _ = await self._mutate(
            lambda: self.client.delete_book_club(club_id),
            success="Book club deleted successfully!",
            failure="Failed to delete book club. Please try again.",
        )
        if ok:
            self._remove(club_id)
        return ok


def _utc_now() -> dt.datetime:
    return dt.datetime.now(dt.UTC)


class BookClubDetailView(CollectionView[DiscussionPost]):
    """One club and the discussion posts that belong to it."""

    load_failure = "Failed to load book club details. Please try again."

    def __init__(
        self,
        client: ApiClient,
        gate: SessionGate,
        club_id: int,
        *,
        probe_limit: int = DEFAULT_POST_PROBE_LIMIT,
        now: Callable[[], dt.datetime] = _utc_now,
        **kwargs,
    ) -> None:
        super().__init__(client, gate, **kwargs)
        self.club_id = club_id
        self.probe_limit = probe_limit
        self.club: BookClub | None = None
        self._now = now

    async def _fetch(self) -> list[DiscussionPost]:
        club = await self.client.get_book_club(self.club_id)
        if self.mounted:
            self.club = club
        return await materialize_discussion_posts(
            self.client, self.club_id, limit=self.probe_limit
        )

    async def post(self, content: str) -> DiscussionPost | None:
        if not content.strip():
            return None
        session = self.gate.require()
        draft = NewDiscussionPost(
            book_club_id=self.club_id,
            user_id=session.user_id,
            book_title=self.club.book_title if self.club is not None else "",
            content=content,
            posted_at=self._now().isoformat(timespec="milliseconds").replace("+00:00", "Z"),
        )
        ok, created = await self._mutate(
            lambda: self.client.create_discussion_post(draft),
            success="Post created successfully!",
            failure="Failed to create post. Please try again.",
        )
        if not ok or created is None:
            return None
        created = created.with_user_name(session.full_name or "Anonymous")
        self._append(created)
        return created

    async def delete_post(self, post_id: int) -> bool:
        ok, _ = await self._mutate(
            lambda: self.client.delete_discussion_post(post_id),
            success="Post deleted successfully!",
            failure="Failed to delete post. Please try again.",
        )
        if ok:
            self._remove(post_id)
        return ok


class BookDetailView(View):
    def __init__(self, client: ApiClient, gate: SessionGate, book_id: int, **kwargs) -> None:
        super().__init__(client, gate, **kwargs)
        self.book_id = book_id
        self.book: Book | None = None
        self.progress = ReadingProgress(book_id=book_id)

    @property
    def percent_complete(self) -> int:
        if self.book is None:
            return 0
        return self.progress.percent_of(self.book.total_pages)

    async def load(self) -> Book | None:
        if not self.gate.admit():
            return None
        self.loading = True
        try:
            book = await self.client.get_book(self.book_id)
        except RequestFailed as exc:
            logger.info("book load failed", extra={"book_id": self.book_id, "status": exc.status})
            if self.mounted:
                self.error = "Failed to load book details. Please try again."
                self.loading = False
            return None
        try:
            progress = await self.client.get_reading_progress(self.book_id)
        except RequestFailed:
            logger.debug("no reading progress for book id=%s", self.book_id)
            progress = ReadingProgress(book_id=self.book_id)
        if self.mounted:
            self.book = book
            self.progress = progress
            self.error = None
            self.loading = False
        return book

    async def update_progress(self, pages_read: int, reading_goal: int) -> ReadingProgress | None:
        ok, progress = await self._mutate(
            lambda: self.client.update_reading_progress(self.book_id, pages_read, reading_goal),
            success="Reading progress updated successfully!",
            failure="Failed to update reading progress. Please try again.",
        )
        if ok and progress is not None and self.mounted:
            self.progress = progress
        return progress

    async def add_to_library(self) -> bool:
        ok, _ = await self._mutate(
            lambda: self.client.add_to_library(self.book_id),
            success="Book added to your library!",
            failure="Failed to add book to your library. Please try again.",
        )
        return ok


class LibraryView(CollectionView[Book]):
    load_failure = "Failed to load your library. Please try again."

    async def _fetch(self) -> list[Book]:
        return await self.client.get_library()

    async def remove(self, book_id: int) -> bool:
        ok, _ = await self._mutate(
            lambda: self.client.remove_from_library(book_id),
            success="Book removed from your library.",
            failure="Failed to remove book from library. Please try again.",
        )
        if ok:
            self._remove(book_id)
        return ok


class RecommendationsView(CollectionView[Book]):
    load_failure = "Failed to load recommendations. Please try again."

    async def _fetch(self) -> list[Book]:
        return await self.client.get_recommended_books()
