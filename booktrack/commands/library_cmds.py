from __future__ import annotations

import typer

from booktrack.views import BookDetailView, LibraryView

from . import common


def library_list_cmd() -> None:
    """List the books in your library."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _load() -> LibraryView:
        async with common.open_client(ctx) as client:
            view = LibraryView(client, ctx.gate, notice_ttl_s=ctx.config.notice_ttl_s)
            await view.load()
            return view

    view = common.run(_load())
    common.exit_on_error(view)
    common.print_books(view.items, empty="Your library is empty")


def library_add_cmd(*, book_id: int) -> None:
    """Add a book to your library."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _add() -> BookDetailView:
        async with common.open_client(ctx) as client:
            view = BookDetailView(client, ctx.gate, book_id, notice_ttl_s=ctx.config.notice_ttl_s)
            await view.add_to_library()
            return view

    view = common.run(_add())
    common.exit_on_error(view)


def library_remove_cmd(*, book_id: int) -> None:
    """Remove a book from your library and show what is left."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _remove() -> LibraryView:
        async with common.open_client(ctx) as client:
            view = LibraryView(client, ctx.gate, notice_ttl_s=ctx.config.notice_ttl_s)
            await view.load()
            await view.remove(book_id)
            return view

    view = common.run(_remove())
    failed = common.report(view)
    common.print_books(view.items, empty="Your library is empty")
    if failed:
        raise typer.Exit(code=1)
