"""pagesmith のビルド設定とサイト設定のモデル群。"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from . import filesystem
from .errors import SiteConfigError

DEFAULT_PAGES_DIR = Path("pages")
DEFAULT_STATIC_DIR = Path("static")
DEFAULT_BUILD_DIR = Path("build")
DEFAULT_SITE_CONFIG = Path("config.json")


@dataclass(slots=True)
class SiteConfig:
    """config.json に記述されたサイト全体の情報。"""

    title: str = "Site"
    description: str = ""
    language: str = "en"
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_json(cls, raw: str, *, path: Path | None = None) -> "SiteConfig":
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise SiteConfigError(
                f"JSON の解析に失敗しました ({exc.msg}, line {exc.lineno})", path=path
            ) from exc
        if not isinstance(parsed, dict):
            raise SiteConfigError("JSON オブジェクトを指定してください。", path=path)
        known = {"title", "description", "language"}
        values: dict[str, Any] = {}
        for key in known:
            if key not in parsed:
                continue
            value = parsed[key]
            if not isinstance(value, str):
                raise SiteConfigError(f"'{key}' には文字列を指定してください。", path=path)
            values[key] = value
        extra = {key: value for key, value in parsed.items() if key not in known}
        return cls(**values, extra=extra)


async def read_site_config(path: Path) -> str:
    """config.json を生のテキストとして読み込みます。"""

    data = await filesystem.read_bytes(path)
    return data.decode("utf-8-sig")


@dataclass(slots=True)
class BuildConfig:
    """サイト生成全体を束ねる設定。"""

    pages_dir: Path
    build_dir: Path
    static_dir: Path | None = None
    stylesheet: Path | None = None
    site_config: Path | None = None
    max_workers: int | None = None

    @classmethod
    def from_args(
        cls,
        pages_dir: Path = DEFAULT_PAGES_DIR,
        build_dir: Path = DEFAULT_BUILD_DIR,
        static_dir: Optional[Path] = DEFAULT_STATIC_DIR,
        stylesheet: Optional[Path] = None,
        site_config: Optional[Path] = None,
        max_workers: Optional[int] = None,
    ) -> "BuildConfig":
        # 明示されたパスは存在しなくてもそのまま使い、読み込み時にエラーとする
        if site_config is None and DEFAULT_SITE_CONFIG.is_file():
            site_config = DEFAULT_SITE_CONFIG
        return cls(
            pages_dir=pages_dir,
            build_dir=build_dir,
            static_dir=static_dir,
            stylesheet=stylesheet,
            site_config=site_config,
            max_workers=max(1, max_workers) if max_workers is not None else None,
        )
