from __future__ import annotations

import typer
from rich import print
from rich.markup import escape

from booktrack.context import AppContext
from booktrack.models import NewBook
from booktrack.views import BookDetailView, BooksView, RecommendationsView

from . import common


def _books_view(ctx: AppContext, client) -> BooksView:
    return BooksView(
        client,
        ctx.gate,
        probe_limit=ctx.config.book_probe_limit,
        notice_ttl_s=ctx.config.notice_ttl_s,
    )


def books_list_cmd(*, search: str | None) -> None:
    """List books the server knows about."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _load() -> BooksView:
        async with common.open_client(ctx) as client:
            view = _books_view(ctx, client)
            await view.load()
            return view

    view = common.run(_load())
    common.exit_on_error(view)
    if search:
        common.print_books(view.filtered(search), empty=f"No books match '{escape(search)}'")
        return
    common.print_books(view.items, empty="No books found")


def books_add_cmd(*, title: str, author: str, description: str, total_pages: int) -> None:
    """Add a book and show the updated list."""

    ctx = common.load_context()
    common.require_session(ctx)
    draft = NewBook(title=title, author=author, description=description, total_pages=total_pages)

    async def _add() -> BooksView:
        async with common.open_client(ctx) as client:
            view = _books_view(ctx, client)
            await view.load()
            await view.create(draft)
            return view

    view = common.run(_add())
    failed = common.report(view)
    common.print_books(view.items, empty="No books found")
    if failed:
        raise typer.Exit(code=1)


def books_delete_cmd(*, book_id: int) -> None:
    """Delete a book and show the updated list."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _delete() -> BooksView:
        async with common.open_client(ctx) as client:
            view = _books_view(ctx, client)
            await view.load()
            await view.delete(book_id)
            return view

    view = common.run(_delete())
    failed = common.report(view)
    common.print_books(view.items, empty="No books found")
    if failed:
        raise typer.Exit(code=1)


def _print_book_detail(view: BookDetailView) -> None:
    book = view.book
    if book is None:
        print("[yellow]Book not found[/yellow]")
        return
    print(f"[bold]{escape(book.title)}[/bold]")
    if book.author:
        print(f"- Author: {escape(book.author)}")
    if book.description:
        print(f"- Description: {escape(book.description)}")
    print(f"- Pages: {book.total_pages}")
    print(
        f"- Progress: {view.percent_complete}% "
        f"({view.progress.pages_read} / {book.total_pages} pages)"
    )
    print(f"- Reading goal: {view.progress.reading_goal}")


def books_show_cmd(*, book_id: int) -> None:
    """Show one book with your reading progress."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _load() -> BookDetailView:
        async with common.open_client(ctx) as client:
            view = BookDetailView(client, ctx.gate, book_id, notice_ttl_s=ctx.config.notice_ttl_s)
            await view.load()
            return view

    view = common.run(_load())
    common.exit_on_error(view)
    _print_book_detail(view)


def books_recommended_cmd() -> None:
    """List recommended books."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _load() -> RecommendationsView:
        async with common.open_client(ctx) as client:
            view = RecommendationsView(client, ctx.gate, notice_ttl_s=ctx.config.notice_ttl_s)
            await view.load()
            return view

    view = common.run(_load())
    common.exit_on_error(view)
    common.print_books(view.items, empty="No recommendations yet")


def progress_set_cmd(*, book_id: int, pages_read: int, reading_goal: int) -> None:
    """Record pages read and a reading goal for a book."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _update() -> BookDetailView:
        async with common.open_client(ctx) as client:
            view = BookDetailView(client, ctx.gate, book_id, notice_ttl_s=ctx.config.notice_ttl_s)
            await view.load()
            if view.book is not None:
                await view.update_progress(pages_read, reading_goal)
            return view

    view = common.run(_update())
    common.exit_on_error(view)
    _print_book_detail(view)
