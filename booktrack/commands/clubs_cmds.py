from __future__ import annotations

import typer
from rich import print
from rich.markup import escape

from booktrack.context import AppContext
from booktrack.models import NewBookClub
from booktrack.views import BookClubDetailView, BookClubsView

from . import common


def _clubs_view(ctx: AppContext, client) -> BookClubsView:
    return BookClubsView(
        client,
        ctx.gate,
        probe_limit=ctx.config.club_probe_limit,
        notice_ttl_s=ctx.config.notice_ttl_s,
    )


def _detail_view(ctx: AppContext, client, club_id: int) -> BookClubDetailView:
    return BookClubDetailView(
        client,
        ctx.gate,
        club_id,
        probe_limit=ctx.config.post_probe_limit,
        notice_ttl_s=ctx.config.notice_ttl_s,
    )


def _print_club_detail(view: BookClubDetailView) -> None:
    club = view.club
    if club is None:
        print("[yellow]Book club not found[/yellow]")
        return
    print(f"[bold]{escape(club.name)}[/bold]")
    if club.book_title:
        print(f"- Reading: {escape(club.book_title)}")
    if club.description:
        print(f"- About: {escape(club.description)}")
    if not view.items:
        print("[yellow]No discussions yet[/yellow]")
        return
    print(f"- Discussions: {len(view.items)}")
    for post in view.items:
        print(common.format_post(post))


def clubs_list_cmd() -> None:
    """List book clubs."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _load() -> BookClubsView:
        async with common.open_client(ctx) as client:
            view = _clubs_view(ctx, client)
            await view.load()
            return view

    view = common.run(_load())
    common.exit_on_error(view)
    common.print_clubs(view.items)


def clubs_create_cmd(*, name: str, description: str, book_title: str) -> None:
    """Create a book club and show the updated list."""

    ctx = common.load_context()
    common.require_session(ctx)
    draft = NewBookClub(name=name, description=description, book_title=book_title)

    async def _create() -> BookClubsView:
        async with common.open_client(ctx) as client:
            view = _clubs_view(ctx, client)
            await view.load()
            await view.create(draft)
            return view

    view = common.run(_create())
    failed = common.report(view)
    common.print_clubs(view.items)
    if failed:
        raise typer.Exit(code=1)


def clubs_delete_cmd(*, club_id: int) -> None:
    """Delete a book club and show the updated list."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _delete() -> BookClubsView:
        async with common.open_client(ctx) as client:
            view = _clubs_view(ctx, client)
            await view.load()
            await view.delete(club_id)
            return view

    view = common.run(_delete())
    failed = common.report(view)
    common.print_clubs(view.items)
    if failed:
        raise typer.Exit(code=1)


def clubs_show_cmd(*, club_id: int) -> None:
    """Show a book club and its discussion."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _load() -> BookClubDetailView:
        async with common.open_client(ctx) as client:
            view = _detail_view(ctx, client, club_id)
            await view.load()
            return view

    view = common.run(_load())
    common.exit_on_error(view)
    _print_club_detail(view)


def posts_add_cmd(*, club_id: int, content: str) -> None:
    """Post to a club discussion."""

    if not content.strip():
        print("[red]Post content cannot be empty[/red]")
        raise typer.Exit(code=1)
    ctx = common.load_context()
    common.require_session(ctx)

    async def _post() -> BookClubDetailView:
        async with common.open_client(ctx) as client:
            view = _detail_view(ctx, client, club_id)
            await view.load()
            if view.club is not None:
                await view.post(content)
            return view

    view = common.run(_post())
    failed = common.report(view)
    _print_club_detail(view)
    if failed:
        raise typer.Exit(code=1)


def posts_delete_cmd(*, club_id: int, post_id: int) -> None:
    """Delete a post from a club discussion."""

    ctx = common.load_context()
    common.require_session(ctx)

    async def _delete() -> BookClubDetailView:
        async with common.open_client(ctx) as client:
            view = _detail_view(ctx, client, club_id)
            await view.load()
            if view.club is not None:
                await view.delete_post(post_id)
            return view

    view = common.run(_delete())
    failed = common.report(view)
    _print_club_detail(view)
    if failed:
        raise typer.Exit(code=1)
