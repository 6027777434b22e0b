"""ソース文書からフロントマター (メタデータヘッダー) を取り出すユーティリティ。"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

import yaml
from frontmatter.default_handlers import BaseHandler, YAMLHandler

from .errors import MetadataError


@dataclass(frozen=True, slots=True)
class ExtractedMetadata:
    """ヘッダーを取り除いた本文と構造化メタデータ。"""

    body: str
    metadata: dict[str, Any] = field(default_factory=dict)


class MetadataExtractor(Protocol):
    def extract(self, raw_text: str) -> ExtractedMetadata:
        ...


class FrontmatterExtractor:
    """``---`` で囲まれた YAML ヘッダーを python-frontmatter のハンドラーで解析します。

    ヘッダーがない文書は本文全体をそのまま返します。ヘッダーが YAML として
    解析できない場合や、キーと値の組になっていない場合は :class:`MetadataError` を送出します。
    """

    def __init__(self, handler: BaseHandler | None = None) -> None:
        self.handler = handler or YAMLHandler()

    def extract(self, raw_text: str) -> ExtractedMetadata:
        text = raw_text.strip()
        if not self.handler.detect(text):
            return ExtractedMetadata(body=text)
        try:
            header, body = self.handler.split(text)
        except ValueError:
            # 閉じ区切りがない場合はヘッダーとして扱わない
            return ExtractedMetadata(body=text)
        try:
            loaded = self.handler.load(header)
        except yaml.YAMLError as exc:
            raise MetadataError(_describe_yaml_error(exc)) from exc
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise MetadataError(
                f"ヘッダーはキーと値の組で記述してください (実際の型: {type(loaded).__name__})"
            )
        return ExtractedMetadata(body=body.strip(), metadata=dict(loaded))


def _describe_yaml_error(exc: yaml.YAMLError) -> str:
    mark = getattr(exc, "problem_mark", None)
    problem = getattr(exc, "problem", None) or str(exc)
    if mark is None:
        return problem
    return f"{problem} (line {mark.line + 1}, column {mark.column + 1})"
