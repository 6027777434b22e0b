"""ブロッキングなファイル操作をイベントループ外で実行する非同期ラッパー。

すべての ``OSError`` は操作名とパスを保持した :class:`FileSystemError` に変換されます。
"""

from __future__ import annotations

import asyncio
import os
import shutil
from pathlib import Path
from typing import Callable, TypeVar

from .errors import FileSystemError

T = TypeVar("T")


async def _run(operation: str, path: Path, func: Callable[..., T], *args: object) -> T:
    try:
        return await asyncio.to_thread(func, *args)
    except OSError as exc:
        raise FileSystemError(operation, path, exc.strerror or str(exc)) from exc


async def list_directory(path: Path) -> list[str]:
    """ディレクトリ直下のエントリ名を名前順で返します (再帰しません)。"""

    names = await _run("list", path, os.listdir, path)
    return sorted(names)


async def stat(path: Path) -> os.stat_result:
    return await _run("stat", path, os.stat, path)


async def read_bytes(path: Path) -> bytes:
    return await _run("read", path, path.read_bytes)


async def write_text(path: Path, content: str) -> None:
    await _run("write", path, _write_text, path, content)


async def write_bytes(path: Path, data: bytes) -> None:
    await _run("write", path, path.write_bytes, data)


async def copy_file(source: Path, destination: Path) -> None:
    try:
        await asyncio.to_thread(shutil.copyfile, source, destination)
    except OSError as exc:
        # 読み込み側と書き込み側のどちらで失敗したかは exc.filename で判別する
        failed = Path(exc.filename) if exc.filename else source
        raise FileSystemError("copy", failed, exc.strerror or str(exc)) from exc


async def is_file(path: Path) -> bool:
    return await _run("stat", path, path.is_file)


def _write_text(path: Path, content: str) -> None:
    # newline="" で OS による改行変換を抑止し、出力をバイト単位で安定させる
    with path.open("w", encoding="utf-8", newline="") as stream:
        stream.write(content)
