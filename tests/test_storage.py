from __future__ import annotations

import json
import stat
from pathlib import Path

import pytest

from booktrack.storage import JsonFileStorage, MemoryStorage


def test_memory_storage_update_sets_and_removes() -> None:
    storage = MemoryStorage({"token": "abc", "other": "keep"})
    storage.update({"token": None, "user": "{}"})

    assert storage.snapshot() == {"other": "keep", "user": "{}"}
    assert storage.get("token") is None


def test_json_file_storage_missing_file_reads_empty(tmp_path: Path) -> None:
    storage = JsonFileStorage(tmp_path / "nested" / "session.json")
    assert storage.get("token") is None
    assert storage.snapshot() == {}


def test_json_file_storage_writes_all_keys_in_one_file(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "session.json"
    storage = JsonFileStorage(path)

    storage.update({"token": "abc", "user": '{"id": 1}'})

    assert json.loads(path.read_text()) == {"token": "abc", "user": '{"id": 1}'}
    assert stat.S_IMODE(path.stat().st_mode) == 0o600
    assert [item.name for item in path.parent.iterdir()] == ["session.json"]


def test_json_file_storage_removes_keys_with_none(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    storage = JsonFileStorage(path)
    storage.update({"token": "abc", "user": "{}"})

    storage.update({"token": None, "user": None})

    assert json.loads(path.read_text()) == {}


def test_json_file_storage_rejects_corrupt_file_on_read(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text("{not-json")
    storage = JsonFileStorage(path)

    with pytest.raises(ValueError, match="invalid session storage json"):
        storage.get("token")


def test_json_file_storage_update_replaces_corrupt_file(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text("[1, 2")
    storage = JsonFileStorage(path)

    storage.update({"token": "abc"})

    assert storage.get("token") == "abc"


def test_json_file_storage_ignores_non_string_values(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_text(json.dumps({"token": 42, "user": "{}"}))

    assert JsonFileStorage(path).snapshot() == {"user": "{}"}


def test_json_file_storage_cleans_up_temp_file_on_failure(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "session.json"
    storage = JsonFileStorage(path)

    def _fail(src, dst) -> None:
        raise OSError("disk full")

    monkeypatch.setattr("booktrack.storage.os.replace", _fail)

    with pytest.raises(OSError, match="disk full"):
        storage.update({"token": "abc"})

    assert list(tmp_path.iterdir()) == []


def test_json_file_storage_rejects_undecodable_file_on_read(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    path.write_bytes(b'{"token": "\xff\xfe"}')
    storage = JsonFileStorage(path)

    with pytest.raises(ValueError, match="invalid session storage encoding"):
        storage.read(["token"])

    storage.update({"token": "abc"})

    assert storage.get("token") == "abc"


def test_read_returns_requested_keys_from_one_load(tmp_path: Path) -> None:
    path = tmp_path / "session.json"
    storage = JsonFileStorage(path)
    storage.update({"token": "abc", "user": "{}", "theme": "dark"})

    assert storage.read(["token", "user", "missing"]) == {
        "token": "abc",
        "user": "{}",
        "missing": None,
    }
    assert MemoryStorage({"token": "abc"}).read(["token", "user"]) == {
        "token": "abc",
        "user": None,
    }
