from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from pagesmith.build_dir import reset_build_directory
from pagesmith.errors import FileSystemError


def test_reset_discards_previous_output(tmp_path: Path) -> None:
    build = tmp_path / "build"
    (build / "nested").mkdir(parents=True)
    (build / "old.html").write_text("stale", encoding="utf-8")
    (build / "nested" / "manual.txt").write_text("placed by hand", encoding="utf-8")

    asyncio.run(reset_build_directory(build))

    assert build.is_dir()
    assert list(build.iterdir()) == []
    assert sorted(path.name for path in tmp_path.iterdir()) == ["build"], "一時ディレクトリが残っています"


def test_reset_creates_missing_directory_and_parents(tmp_path: Path) -> None:
    build = tmp_path / "site" / "build"

    asyncio.run(reset_build_directory(build))

    assert build.is_dir()


def test_reset_is_idempotent(tmp_path: Path) -> None:
    build = tmp_path / "build"

    asyncio.run(reset_build_directory(build))
    asyncio.run(reset_build_directory(build))

    assert build.is_dir()
    assert list(build.iterdir()) == []


def test_reset_replaces_a_plain_file(tmp_path: Path) -> None:
    build = tmp_path / "build"
    build.write_text("not a directory", encoding="utf-8")

    asyncio.run(reset_build_directory(build))

    assert build.is_dir()


def test_reset_failure_is_reported_as_file_system_error(tmp_path: Path, monkeypatch) -> None:
    build = tmp_path / "build"
    build.mkdir()

    def refuse(self: Path, target: Path) -> Path:
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "rename", refuse)

    with pytest.raises(FileSystemError) as exc:
        asyncio.run(reset_build_directory(build))

    assert exc.value.operation == "reset"
    assert build.is_dir()
    assert [path.name for path in tmp_path.iterdir()] == ["build"]
