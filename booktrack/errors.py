from __future__ import annotations


class BooktrackError(Exception):
    """Base class for errors surfaced to the command line."""


class RequestFailed(BooktrackError):
    """A gateway call failed: transport error or non-2xx response.

    ``status`` is ``None`` when the request never produced a response.
    """

    def __init__(
        self,
        status: int | None,
        message: str,
        *,
        method: str | None = None,
        path: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.message = message
        self.method = method
        self.path = path

    def __str__(self) -> str:
        if self.status is None:
            return self.message
        return f"{self.status}: {self.message}"


class AuthFailure(BooktrackError):
    """Login or registration rejected; the session is left as it was."""

    def __init__(self, message: str, *, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class NotAuthenticated(BooktrackError):
    pass
