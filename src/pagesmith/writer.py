"""ページ・インデックス・スタイルシート・静的ファイルを出力ディレクトリへ書き出します。"""

from __future__ import annotations

import logging
from functools import partial
from pathlib import Path
from typing import Iterable

from . import filesystem
from .compaction import Compactor
from .concurrency import gather_fail_fast, resolve_worker_count

INDEX_FILE_NAME = "index.html"
STYLESHEET_FILE_NAME = "style.css"


class OutputWriter:
    """出力ディレクトリへの書き込みを担当します。内部で失敗から復旧することはありません。"""

    def __init__(self, build_dir: Path, compactor: Compactor, *, max_workers: int | None = None) -> None:
        self.build_dir = build_dir
        self.compactor = compactor
        self.max_workers = max_workers
        self._logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    def page_path(self, slug: str) -> Path:
        return self.build_dir / f"{slug}.html"

    async def write_page(self, slug: str, markup: str) -> Path:
        path = self.page_path(slug)
        await filesystem.write_text(path, self.compactor.compact(markup))
        return path

    async def write_pages(self, pages: Iterable[tuple[str, str]]) -> list[Path]:
        """``(slug, markup)`` の組をまとめて並列に書き込みます。"""

        items = list(pages)
        limit = resolve_worker_count(len(items), self.max_workers)
        return await gather_fail_fast(
            [partial(self.write_page, slug, markup) for slug, markup in items],
            limit=limit,
        )

    async def write_index(self, markup: str) -> Path:
        path = self.build_dir / INDEX_FILE_NAME
        await filesystem.write_text(path, self.compactor.compact(markup))
        return path

    async def write_stylesheet(self, data: bytes) -> Path:
        path = self.build_dir / STYLESHEET_FILE_NAME
        await filesystem.write_bytes(path, data)
        return path

    async def mirror_static_assets(self, static_dir: Path) -> list[str]:
        """静的ファイルを変換せずにそのまま出力ディレクトリ直下へコピーします。"""

        names: list[str] = []
        for name in await filesystem.list_directory(static_dir):
            if not await filesystem.is_file(static_dir / name):
                self._logger.warning("ファイルではないためスキップします: %s", static_dir / name)
                continue
            names.append(name)
        self._logger.info("%d 件の静的ファイルを検出しました。", len(names))
        for name in names:
            self._logger.info("   %s", name)

        limit = resolve_worker_count(len(names), self.max_workers)
        await gather_fail_fast(
            [partial(filesystem.copy_file, static_dir / name, self.build_dir / name) for name in names],
            limit=limit,
        )
        return names
