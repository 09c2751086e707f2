"""Rebuild list views from endpoints that only fetch one record by id.

The service has no list operations for books, book clubs or discussion
posts. A collection is reconstructed by probing ids ``1..N`` concurrently and
keeping the hits, ordered by probed id. Records with an id above the probe
bound are invisible to this; the result is a snapshot, not a live view.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Generic, TypeVar

from .gateway import ApiClient
from .models import Book, BookClub, DiscussionPost

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_BOOK_PROBE_LIMIT = 20
DEFAULT_CLUB_PROBE_LIMIT = 10
DEFAULT_POST_PROBE_LIMIT = 20


@dataclass(frozen=True)
class Found(Generic[T]):
    id: int
    record: T


@dataclass(frozen=True)
class Absent:
    id: int
    reason: str


async def probe(record_id: int, fetch_one: Callable[[int], Awaitable[T]]) -> Found[T] | Absent:
    try:
        record = await fetch_one(record_id)
    except Exception as exc:
        # Missing ids and broken ones look the same from here.
        logger.debug("probe miss id=%s: %s", record_id, exc)
        return Absent(record_id, str(exc) or exc.__class__.__name__)
    return Found(record_id, record)


async def probe_all(
    ids: Iterable[int], fetch_one: Callable[[int], Awaitable[T]]
) -> list[Found[T] | Absent]:
    """Probe every id concurrently and wait for all of them to settle."""
    ordered = sorted(set(ids))
    return list(await asyncio.gather(*(probe(record_id, fetch_one) for record_id in ordered)))


async def materialize(
    ids: Iterable[int],
    fetch_one: Callable[[int], Awaitable[T]],
    *,
    keep: Callable[[T], bool] | None = None,
) -> list[T]:
    results = await probe_all(ids, fetch_one)
    records = [result.record for result in results if isinstance(result, Found)]
    if keep is not None:
        records = [record for record in records if keep(record)]
    logger.debug(
        "materialized collection",
        extra={"probed": len(results), "found": len(records)},
    )
    return records


def probe_range(limit: int) -> range:
    return range(1, max(limit, 0) + 1)


@dataclass(frozen=True)
class ResourceKind(Generic[T]):
    name: str
    probe_limit: int
    fetch: Callable[[ApiClient], Callable[[int], Awaitable[T]]]

    async def materialize(
        self, client: ApiClient, *, keep: Callable[[T], bool] | None = None
    ) -> list[T]:
        return await materialize(probe_range(self.probe_limit), self.fetch(client), keep=keep)

    def with_limit(self, probe_limit: int) -> ResourceKind[T]:
        return ResourceKind(self.name, probe_limit, self.fetch)


BOOKS: ResourceKind[Book] = ResourceKind(
    "book", DEFAULT_BOOK_PROBE_LIMIT, lambda client: client.get_book
)
BOOK_CLUBS: ResourceKind[BookClub] = ResourceKind(
    "book club", DEFAULT_CLUB_PROBE_LIMIT, lambda client: client.get_book_club
)
DISCUSSION_POSTS: ResourceKind[DiscussionPost] = ResourceKind(
    "discussion post", DEFAULT_POST_PROBE_LIMIT, lambda client: client.get_discussion_post
)


async def materialize_books(
    client: ApiClient, *, limit: int = DEFAULT_BOOK_PROBE_LIMIT
) -> list[Book]:
    return await BOOKS.with_limit(limit).materialize(client)


async def materialize_book_clubs(
    client: ApiClient, *, limit: int = DEFAULT_CLUB_PROBE_LIMIT
) -> list[BookClub]:
    return await BOOK_CLUBS.with_limit(limit).materialize(client)


async def materialize_discussion_posts(
    client: ApiClient, club_id: int, *, limit: int = DEFAULT_POST_PROBE_LIMIT
) -> list[DiscussionPost]:
    return await DISCUSSION_POSTS.with_limit(limit).materialize(
        client, keep=lambda post: post.book_club_id == club_id
    )
