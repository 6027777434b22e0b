"""出力ディレクトリを毎回まっさらな状態へ作り直す処理。"""

from __future__ import annotations

import asyncio
import logging
import shutil
import uuid
from pathlib import Path

from .errors import FileSystemError

logger = logging.getLogger(__name__)


async def reset_build_directory(build_dir: Path) -> None:
    """``build_dir`` を空のディレクトリとして作り直します。

    既存の内容は手動で置かれたファイルも含めて無条件に破棄されます。
    隣に作成した空の一時ディレクトリをリネームで差し替えるため、
    出力ディレクトリが存在しない時間はリネーム 2 回の間だけです。
    """

    try:
        await asyncio.to_thread(_replace_with_empty, build_dir)
    except OSError as exc:
        failed = Path(exc.filename) if exc.filename else build_dir
        raise FileSystemError("reset", failed, exc.strerror or str(exc)) from exc
    logger.info("出力ディレクトリを初期化しました: %s", build_dir)


def _replace_with_empty(build_dir: Path) -> None:
    parent = build_dir.parent
    parent.mkdir(parents=True, exist_ok=True)
    token = uuid.uuid4().hex
    staging = parent / f".{build_dir.name}.{token}.tmp"
    staging.mkdir()
    try:
        if build_dir.exists() or build_dir.is_symlink():
            stale = parent / f".{build_dir.name}.{token}.old"
            build_dir.rename(stale)
            staging.rename(build_dir)
            _remove(stale)
        else:
            staging.rename(build_dir)
    except OSError:
        if staging.exists():
            staging.rmdir()
        raise


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()
