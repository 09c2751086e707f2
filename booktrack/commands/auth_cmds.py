from __future__ import annotations

import typer
from rich import print
from rich.markup import escape

from booktrack import auth
from booktrack.errors import AuthFailure
from booktrack.models import Session

from . import common


def _authenticate(action) -> Session:
    try:
        return common.run(action)
    except AuthFailure as exc:
        print(f"[red]{escape(exc.message)}[/red]")
        raise typer.Exit(code=1) from exc


def login_cmd(*, email: str, password: str) -> None:
    """Sign in and remember the session."""

    ctx = common.load_context()

    async def _login() -> Session:
        async with common.open_client(ctx) as client:
            return await auth.login(client, ctx.store, email, password)

    session = _authenticate(_login())
    print(f"[green]Logged in as {escape(session.full_name)}[/green] ({escape(session.email)})")


def register_cmd(*, full_name: str, email: str, password: str) -> None:
    """Create an account and sign in with it."""

    ctx = common.load_context()

    async def _register() -> Session:
        async with common.open_client(ctx) as client:
            return await auth.register(client, ctx.store, full_name, email, password)

    session = _authenticate(_register())
    print(f"[green]Welcome, {escape(session.full_name)}![/green] You are now logged in.")


def logout_cmd() -> None:
    """Forget the stored session."""

    ctx = common.load_context()
    auth.logout(ctx.store)


def whoami_cmd() -> None:
    """Show the signed-in user."""

    ctx = common.load_context()
    session = common.require_session(ctx)
    print(f"{escape(session.full_name)} <{escape(session.email)}>")
    print(f"- User ID: {session.user_id}")
    print(f"- Server: {escape(ctx.config.api_url)}")
