from typer.testing import CliRunner

from booktrack import __version__
from booktrack.cli import app

runner = CliRunner()


def test_root_help_lists_namespaces() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for name in ("login", "register", "logout", "books", "library", "clubs", "posts", "config"):
        assert name in result.stdout


def test_books_help_shows_commands() -> None:
    result = runner.invoke(app, ["books", "--help"])
    assert result.exit_code == 0
    assert "list" in result.stdout
    assert "show" in result.stdout
    assert "recommended" in result.stdout
    assert "delete" in result.stdout


def test_clubs_help_shows_commands() -> None:
    result = runner.invoke(app, ["clubs", "--help"])
    assert result.exit_code == 0
    assert "create" in result.stdout
    assert "show" in result.stdout


def test_version_prints_package_version() -> None:
    result = runner.invoke(app, ["version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__
