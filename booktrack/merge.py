from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _record_id(record: Any) -> Any:
    return record.id


def append_created(snapshot: Sequence[T], created: T) -> list[T]:
    """Return ``snapshot`` with the server-returned record at the end.

    New records follow everything already in the view even when a fresh
    materialization would place them earlier by id.
    """
    return [*snapshot, created]


def remove_deleted(
    snapshot: Sequence[T],
    deleted_id: Any,
    *,
    key: Callable[[T], Any] = _record_id,
) -> list[T]:
    remaining = [record for record in snapshot if key(record) != deleted_id]
    if len(remaining) == len(snapshot):
        logger.debug("delete merge found no record id=%s", deleted_id)
    return remaining
