"""ソースディレクトリを走査して文書集合を組み立てるローダー。"""

from __future__ import annotations

import logging
import os
from functools import partial
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

from charset_normalizer import from_bytes as detect_charset

from . import filesystem
from .concurrency import gather_fail_fast, resolve_worker_count
from .errors import MetadataError
from .metadata import MetadataExtractor
from .naming import slug_of, title_of


@dataclass(frozen=True, slots=True)
class SourceDocument:
    """読み込み済みのソース文書 1 件。生成後は変更されません。"""

    origin: str
    slug: str
    title: str
    body: str
    modified_at: datetime
    metadata: Mapping[str, Any] = field(default_factory=dict)


class SourceLoader:
    """ソースディレクトリ直下のファイルを並列に読み込みます。"""

    def __init__(self, extractor: MetadataExtractor, *, max_workers: int | None = None) -> None:
        self.extractor = extractor
        self.max_workers = max_workers
        self._logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    async def load_all(self, source_dir: Path) -> list[SourceDocument]:
        names = await self._list_source_files(source_dir)
        self._logger.info("%d 件のページを検出しました。", len(names))
        for name in names:
            self._logger.info("   %s", name)

        limit = resolve_worker_count(len(names), self.max_workers)
        return await gather_fail_fast(
            [partial(self._load_one, source_dir, name) for name in names],
            limit=limit,
        )

    async def _list_source_files(self, source_dir: Path) -> list[str]:
        names: list[str] = []
        for name in await filesystem.list_directory(source_dir):
            if not await filesystem.is_file(source_dir / name):
                self._logger.warning("ファイルではないためスキップします: %s", source_dir / name)
                continue
            names.append(name)
        return names

    async def _load_one(self, source_dir: Path, name: str) -> SourceDocument:
        path = source_dir / name
        stat_result = await filesystem.stat(path)
        modified_at = _modified_at(stat_result)
        text = _decode(await filesystem.read_bytes(path))
        try:
            extracted = self.extractor.extract(text)
        except MetadataError as exc:
            if exc.origin is not None:
                raise
            raise exc.with_origin(name) from exc
        return SourceDocument(
            origin=name,
            slug=slug_of(name),
            title=title_of(name),
            body=extracted.body,
            modified_at=modified_at,
            metadata=MappingProxyType(dict(extracted.metadata)),
        )


def _modified_at(stat_result: os.stat_result) -> datetime:
    try:
        return datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        return datetime.now(timezone.utc)


def _decode(data: bytes) -> str:
    if not data:
        return ""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        match = detect_charset(data).best()
    encoding = match.encoding if match is not None and match.encoding else "utf-8"
    try:
        return data.decode(encoding, errors="replace")
    except LookupError:
        return data.decode("utf-8", errors="replace")
