from __future__ import annotations

import asyncio
from collections.abc import Coroutine
from typing import Any, TypeVar

import typer
from rich import print
from rich.markup import escape

from booktrack.config import load_config, read_config_file, write_config_file
from booktrack.context import AppContext
from booktrack.errors import NotAuthenticated
from booktrack.gateway import ApiClient
from booktrack.logs import configure_logging
from booktrack.models import Book, BookClub, DiscussionPost, Session
from booktrack.views import View

T = TypeVar("T")

LOGIN_HINT = "Run `booktrack login` to sign in."


def read_config_or_exit() -> dict[str, Any]:
    try:
        return read_config_file()
    except ValueError as exc:
        print(f"[red]Invalid config file: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def write_config_or_exit(data: dict[str, Any]) -> None:
    try:
        write_config_file(data)
    except OSError as exc:
        print(f"[red]Failed to write config: {exc}[/red]")
        raise typer.Exit(code=1) from exc


def _show_logged_out() -> None:
    print("[yellow]Logged out.[/yellow]")
    print(LOGIN_HINT)


def _show_login_required() -> None:
    print("[yellow]Not logged in.[/yellow]")
    print(LOGIN_HINT)


def load_context() -> AppContext:
    config = load_config()
    configure_logging(config.log_level, config.log_file)
    return AppContext.create(
        config,
        on_logout=_show_logged_out,
        on_unauthenticated=_show_login_required,
    )


def open_client(ctx: AppContext) -> ApiClient:
    return ctx.open_client()


def run(coro: Coroutine[Any, Any, T]) -> T:
    return asyncio.run(coro)


def require_session(ctx: AppContext) -> Session:
    try:
        return ctx.gate.require()
    except NotAuthenticated as exc:
        raise typer.Exit(code=1) from exc


def report(view: View) -> bool:
    """Print the view's banners; return True when an error is showing."""
    failed = False
    if view.error:
        print(f"[red]{escape(view.error)}[/red]")
        failed = True
    for notice in view.notices.active():
        if notice.kind == "error":
            print(f"[red]{escape(notice.text)}[/red]")
            failed = True
        else:
            print(f"[green]{escape(notice.text)}[/green]")
    return failed


def exit_on_error(view: View) -> None:
    if report(view):
        raise typer.Exit(code=1)


def format_book(book: Book) -> str:
    author = f" by {escape(book.author)}" if book.author else ""
    pages = f" ({book.total_pages} pages)" if book.total_pages else ""
    return f"{book.id}|{escape(book.title)}{author}{pages}"


def format_club(club: BookClub) -> str:
    reading = f" | reading: {escape(club.book_title)}" if club.book_title else ""
    return f"{club.id}|{escape(club.name)}{reading}"


def format_post(post: DiscussionPost) -> str:
    author = escape(post.user_name or "Anonymous")
    return f"{post.id}|{author}|{escape(post.posted_at)}|{escape(post.content)}"


def print_books(books: list[Book], *, empty: str) -> None:
    if not books:
        print(f"[yellow]{empty}[/yellow]")
        return
    for book in books:
        print(format_book(book))


def print_clubs(clubs: list[BookClub]) -> None:
    if not clubs:
        print("[yellow]No book clubs found[/yellow]")
        return
    for club in clubs:
        print(format_club(club))
