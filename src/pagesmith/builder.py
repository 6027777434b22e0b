"""ソース読み込みから出力までを統括するビルドオーケストレーター。"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

from . import filesystem
from .build_dir import reset_build_directory
from .compaction import Compactor, HtmlCompactor
from .concurrency import gather_fail_fast
from .config import BuildConfig, SiteConfig, read_site_config
from .errors import SlugCollisionError
from .loader import SourceDocument, SourceLoader
from .metadata import FrontmatterExtractor, MetadataExtractor
from .rendering import DEFAULT_STYLESHEET, SiteRenderer
from .writer import OutputWriter

RendererFactory = Callable[[SiteConfig], SiteRenderer]


@dataclass(slots=True)
class BuildResult:
    documents: list[SourceDocument]
    page_paths: list[Path]
    static_files: list[str]
    build_dir: Path


class SiteBuilder:
    """読み込み・初期化・描画・書き出しを順番に実行する高レベルパイプライン。

    出力ディレクトリの初期化はすべてのソースを読み終えた後、かつ最初の書き込みより前に行います。
    読み込みやメタデータ解析が失敗した場合、既存の出力ディレクトリには手を触れません。
    """

    def __init__(
        self,
        config: BuildConfig,
        *,
        extractor: MetadataExtractor | None = None,
        compactor: Compactor | None = None,
        renderer_factory: RendererFactory | None = None,
    ) -> None:
        self.config = config
        self.loader = SourceLoader(extractor or FrontmatterExtractor(), max_workers=config.max_workers)
        self.writer = OutputWriter(
            config.build_dir, compactor or HtmlCompactor(), max_workers=config.max_workers
        )
        self.renderer_factory = renderer_factory or SiteRenderer
        self._logger = logging.getLogger(self.__class__.__module__ + "." + self.__class__.__name__)

    async def build(self) -> BuildResult:
        site = await self._load_site_config()
        stylesheet = await self._load_stylesheet()
        documents = await self.loader.load_all(self.config.pages_dir)
        _ensure_unique_slugs(documents)

        await reset_build_directory(self.config.build_dir)

        renderer = self.renderer_factory(site)
        pages = [(document.slug, renderer.render_page(document)) for document in documents]
        index = renderer.render_index(documents)
        self._logger.info("ページの描画が完了しました (%d 件)。", len(pages))

        page_paths, _, _ = await gather_fail_fast(
            [
                lambda: self.writer.write_pages(pages),
                lambda: self.writer.write_index(index),
                lambda: self.writer.write_stylesheet(stylesheet),
            ]
        )
        self._logger.info("HTML を出力しました (%d 件 + index.html)。", len(page_paths))

        static_files: list[str] = []
        if self.config.static_dir is not None:
            static_files = await self.writer.mirror_static_assets(self.config.static_dir)
            self._logger.info("静的ファイルをコピーしました (%d 件)。", len(static_files))

        return BuildResult(
            documents=documents,
            page_paths=page_paths,
            static_files=static_files,
            build_dir=self.config.build_dir,
        )

    async def _load_site_config(self) -> SiteConfig:
        path = self.config.site_config
        if path is None:
            return SiteConfig()
        raw = await read_site_config(path)
        return SiteConfig.from_json(raw, path=path)

    async def _load_stylesheet(self) -> bytes:
        if self.config.stylesheet is None:
            return DEFAULT_STYLESHEET
        return await filesystem.read_bytes(self.config.stylesheet)


def _ensure_unique_slugs(documents: Sequence[SourceDocument]) -> None:
    origins_by_slug: dict[str, list[str]] = defaultdict(list)
    for document in documents:
        origins_by_slug[document.slug].append(document.origin)
    # index.html はインデックス用に予約されている
    if "index" in origins_by_slug:
        origins_by_slug["index"].append("<index.html>")
    collisions = {slug: origins for slug, origins in origins_by_slug.items() if len(origins) > 1}
    if collisions:
        raise SlugCollisionError(collisions=collisions)


def build_site(config: BuildConfig, **kwargs) -> BuildResult:
    builder = SiteBuilder(config, **kwargs)
    return asyncio.run(builder.build())
