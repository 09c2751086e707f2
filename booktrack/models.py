from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any


def _require_dict(data: Any, kind: str) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise ValueError(f"{kind} payload must be an object")
    return data


def _require_id(data: dict[str, Any], key: str, kind: str) -> int:
    value = data.get(key)
    if isinstance(value, bool):
        raise ValueError(f"{kind} {key} must be an integer")
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError(f"{kind} {key} must be an integer") from exc


def _as_int(value: Any, default: int = 0) -> int:
    if value is None or isinstance(value, bool):
        return default
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError):
        return default


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


@dataclass(frozen=True)
class UserProfile:
    id: int | str
    full_name: str
    email: str

    def to_payload(self) -> dict[str, Any]:
        return {"id": self.id, "fullName": self.full_name, "email": self.email}

    @classmethod
    def from_payload(cls, data: Any) -> UserProfile:
        payload = _require_dict(data, "profile")
        user_id = payload.get("id")
        if user_id is None or user_id == "" or isinstance(user_id, bool):
            raise ValueError("profile id missing")
        full_name = payload.get("fullName")
        email = payload.get("email")
        if not isinstance(full_name, str) or not isinstance(email, str):
            raise ValueError("profile fullName and email must be strings")
        return cls(id=user_id, full_name=full_name, email=email)


@dataclass(frozen=True)
class Session:
    user_id: int | str
    full_name: str
    email: str
    token: str

    def __post_init__(self) -> None:
        if self.user_id is None or self.user_id == "":
            raise ValueError("session userId missing")
        if self.full_name is None or self.email is None:
            raise ValueError("session fullName and email required")
        if not self.token:
            raise ValueError("session token missing")

    def __repr__(self) -> str:
        return (
            f"Session(user_id={self.user_id!r}, full_name={self.full_name!r}, "
            f"email={self.email!r}, token='***')"
        )

    @property
    def profile(self) -> UserProfile:
        return UserProfile(id=self.user_id, full_name=self.full_name, email=self.email)

    @classmethod
    def from_profile(cls, token: str, profile: UserProfile) -> Session:
        return cls(
            user_id=profile.id,
            full_name=profile.full_name,
            email=profile.email,
            token=token,
        )

    @classmethod
    def from_auth_response(cls, data: Any) -> Session:
        """Build a session from a login/register response body."""
        payload = _require_dict(data, "auth response")
        token = payload.get("token")
        if not isinstance(token, str) or not token:
            raise ValueError("auth response missing token")
        return cls.from_profile(token, UserProfile.from_payload(payload))


@dataclass(frozen=True)
class Book:
    id: int
    title: str
    author: str
    description: str = ""
    total_pages: int = 0

    @classmethod
    def from_payload(cls, data: Any) -> Book:
        payload = _require_dict(data, "book")
        return cls(
            id=_require_id(payload, "id", "book"),
            title=_as_str(payload.get("title")),
            author=_as_str(payload.get("author")),
            description=_as_str(payload.get("description")),
            total_pages=_as_int(payload.get("totalPages")),
        )


@dataclass(frozen=True)
class NewBook:
    title: str
    author: str
    description: str = ""
    total_pages: int = 0

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "author": self.author,
            "description": self.description,
            "totalPages": self.total_pages,
        }


@dataclass(frozen=True)
class BookClub:
    id: int
    name: str
    description: str = ""
    book_title: str = ""

    @classmethod
    def from_payload(cls, data: Any) -> BookClub:
        payload = _require_dict(data, "book club")
        return cls(
            id=_require_id(payload, "id", "book club"),
            name=_as_str(payload.get("name")),
            description=_as_str(payload.get("description")),
            book_title=_as_str(payload.get("bookTitle")),
        )


@dataclass(frozen=True)
class NewBookClub:
    name: str
    description: str
    book_title: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "bookTitle": self.book_title,
        }


@dataclass(frozen=True)
class DiscussionPost:
    id: int
    book_club_id: int
    user_id: int | str | None
    user_name: str
    content: str
    posted_at: str

    def with_user_name(self, user_name: str) -> DiscussionPost:
        return replace(self, user_name=user_name)

    @classmethod
    def from_payload(cls, data: Any) -> DiscussionPost:
        payload = _require_dict(data, "discussion post")
        return cls(
            id=_require_id(payload, "id", "discussion post"),
            book_club_id=_as_int(payload.get("bookClubId"), default=-1),
            user_id=payload.get("userId"),
            user_name=_as_str(payload.get("userName")),
            content=_as_str(payload.get("content")),
            posted_at=_as_str(payload.get("postedAt")),
        )


@dataclass(frozen=True)
class NewDiscussionPost:
    book_club_id: int
    user_id: int | str
    book_title: str
    content: str
    posted_at: str

    def to_payload(self) -> dict[str, Any]:
        return {
            "bookClubId": self.book_club_id,
            "userId": self.user_id,
            "bookTitle": self.book_title,
            "content": self.content,
            "postedAt": self.posted_at,
        }


@dataclass(frozen=True)
class ReadingProgress:
    book_id: int
    pages_read: int = 0
    reading_goal: int = 0

    def percent_of(self, total_pages: int) -> int:
        if total_pages <= 0:
            return 0
        return min(round(self.pages_read / total_pages * 100), 100)

    @classmethod
    def from_payload(cls, book_id: int, data: Any) -> ReadingProgress:
        """Parse a progress response.

        The service nests the record under ``pagesRead``
        (``{"pagesRead": {"pagesRead": 12, "readingGoal": 40}}``); a flat
        record is accepted too. Anything else reads as no progress.
        """
        if not isinstance(data, dict):
            return cls(book_id=book_id)
        record = data.get("pagesRead")
        if not isinstance(record, dict):
            record = data
        return cls(
            book_id=book_id,
            pages_read=_as_int(record.get("pagesRead")),
            reading_goal=_as_int(record.get("readingGoal")),
        )
