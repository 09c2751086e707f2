from __future__ import annotations

import typer
from rich import print

from . import __version__
from .commands.auth_cmds import login_cmd, logout_cmd, register_cmd, whoami_cmd
from .commands.books_cmds import (
    books_add_cmd,
    books_delete_cmd,
    books_list_cmd,
    books_recommended_cmd,
    books_show_cmd,
    progress_set_cmd,
)
from .commands.clubs_cmds import (
    clubs_create_cmd,
    clubs_delete_cmd,
    clubs_list_cmd,
    clubs_show_cmd,
    posts_add_cmd,
    posts_delete_cmd,
)
from .commands.config_cmds import config_set_cmd, config_show_cmd
from .commands.library_cmds import library_add_cmd, library_list_cmd, library_remove_cmd

app = typer.Typer(help="booktrack: track books, reading progress and book clubs")
books_app = typer.Typer(help="Browse and add books")
library_app = typer.Typer(help="Manage your personal library")
progress_app = typer.Typer(help="Track reading progress")
clubs_app = typer.Typer(help="Book clubs")
posts_app = typer.Typer(help="Book club discussion posts")
config_app = typer.Typer(help="Client configuration")
app.add_typer(books_app, name="books")
app.add_typer(library_app, name="library")
app.add_typer(progress_app, name="progress")
app.add_typer(clubs_app, name="clubs")
app.add_typer(posts_app, name="posts")
app.add_typer(config_app, name="config")


@app.command()
def login(
    email: str = typer.Option(..., prompt=True, help="Account email"),
    password: str = typer.Option(..., prompt=True, hide_input=True, help="Account password"),
) -> None:
    """Sign in and remember the session."""
    login_cmd(email=email, password=password)


@app.command()
def register(
    full_name: str = typer.Option(..., prompt=True, help="Your full name"),
    email: str = typer.Option(..., prompt=True, help="Account email"),
    password: str = typer.Option(
        ..., prompt=True, hide_input=True, confirmation_prompt=True, help="Account password"
    ),
) -> None:
    """Create an account and sign in with it."""
    register_cmd(full_name=full_name, email=email, password=password)


@app.command()
def logout() -> None:
    """Forget the stored session."""
    logout_cmd()


@app.command()
def whoami() -> None:
    """Show the signed-in user."""
    whoami_cmd()


@books_app.command("list")
def books_list(
    search: str = typer.Option(None, "--search", "-s", help="Filter by title or author"),
) -> None:
    """List books."""
    books_list_cmd(search=search)


@books_app.command("show")
def books_show(book_id: int = typer.Argument(help="Book id")) -> None:
    """Show a book with your reading progress."""
    books_show_cmd(book_id=book_id)


@books_app.command("add")
def books_add(
    title: str = typer.Option(..., help="Book title"),
    author: str = typer.Option(..., help="Author name"),
    description: str = typer.Option("", help="Short description"),
    total_pages: int = typer.Option(0, min=0, help="Number of pages"),
) -> None:
    """Add a book."""
    books_add_cmd(title=title, author=author, description=description, total_pages=total_pages)


@books_app.command("delete")
def books_delete(book_id: int = typer.Argument(help="Book id")) -> None:
    """Delete a book."""
    books_delete_cmd(book_id=book_id)


@books_app.command("recommended")
def books_recommended() -> None:
    """List recommended books."""
    books_recommended_cmd()


@progress_app.command("set")
def progress_set(
    book_id: int = typer.Argument(help="Book id"),
    pages: int = typer.Option(..., min=0, help="Pages read so far"),
    goal: int = typer.Option(0, min=0, help="Reading goal in pages"),
) -> None:
    """Record pages read and a reading goal."""
    progress_set_cmd(book_id=book_id, pages_read=pages, reading_goal=goal)


@library_app.command("list")
def library_list() -> None:
    """List the books in your library."""
    library_list_cmd()


@library_app.command("add")
def library_add(book_id: int = typer.Argument(help="Book id")) -> None:
    """Add a book to your library."""
    library_add_cmd(book_id=book_id)


@library_app.command("remove")
def library_remove(book_id: int = typer.Argument(help="Book id")) -> None:
    """Remove a book from your library."""
    library_remove_cmd(book_id=book_id)


@clubs_app.command("list")
def clubs_list() -> None:
    """List book clubs."""
    clubs_list_cmd()


@clubs_app.command("create")
def clubs_create(
    name: str = typer.Option(..., help="Club name"),
    description: str = typer.Option(..., help="What the club is about"),
    book_title: str = typer.Option(..., help="Book the club is currently reading"),
) -> None:
    """Create a book club."""
    clubs_create_cmd(name=name, description=description, book_title=book_title)


@clubs_app.command("delete")
def clubs_delete(club_id: int = typer.Argument(help="Book club id")) -> None:
    """Delete a book club."""
    clubs_delete_cmd(club_id=club_id)


@clubs_app.command("show")
def clubs_show(club_id: int = typer.Argument(help="Book club id")) -> None:
    """Show a book club and its discussion."""
    clubs_show_cmd(club_id=club_id)


@posts_app.command("add")
def posts_add(
    club_id: int = typer.Argument(help="Book club id"),
    content: str = typer.Argument(help="Post text"),
) -> None:
    """Post to a club discussion."""
    posts_add_cmd(club_id=club_id, content=content)


@posts_app.command("delete")
def posts_delete(
    club_id: int = typer.Argument(help="Book club id"),
    post_id: int = typer.Argument(help="Post id"),
) -> None:
    """Delete a discussion post."""
    posts_delete_cmd(club_id=club_id, post_id=post_id)


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    config_show_cmd()


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key, e.g. api_url"),
    value: str = typer.Argument(help="New value"),
) -> None:
    """Write a configuration value."""
    config_set_cmd(key=key, value=value)


@app.command("version")
def version() -> None:
    """Print version."""

    print(__version__)


def main() -> None:
    app()
