"""ビルドパイプラインで送出される例外群。"""

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence


class BuildError(RuntimeError):
    """ビルドを中断させるすべての例外の基底クラス。"""


class FileSystemError(BuildError):
    """一覧・stat・読み込み・書き込み・コピー・削除・作成のいずれかが失敗した。"""

    def __init__(self, operation: str, path: Path | str, reason: str) -> None:
        self.operation = operation
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"ファイル操作に失敗しました ({operation}): {self.path}: {reason}")


class MetadataError(BuildError):
    """ソース文書のメタデータヘッダーを解析できなかった。"""

    def __init__(self, reason: str, *, origin: str | None = None) -> None:
        self.reason = reason
        self.origin = origin
        if origin is None:
            message = f"メタデータの解析に失敗しました: {reason}"
        else:
            message = f"メタデータの解析に失敗しました: {origin}: {reason}"
        super().__init__(message)

    def with_origin(self, origin: str) -> "MetadataError":
        return MetadataError(self.reason, origin=origin)


class SlugCollisionError(BuildError):
    """複数のソース文書が同じスラッグへ変換された。"""

    def __init__(self, *, collisions: Mapping[str, Sequence[str]]) -> None:
        self.collisions: dict[str, tuple[str, ...]] = {
            slug: tuple(origins) for slug, origins in collisions.items()
        }
        details = ", ".join(
            f"{slug}: {', '.join(origins)}" for slug, origins in self.collisions.items()
        )
        super().__init__("同じ出力ファイル名になるページがあります: " + details)


class SiteConfigError(BuildError):
    """config.json の内容をサイト設定として解釈できなかった。"""

    def __init__(self, reason: str, *, path: Path | None = None) -> None:
        self.reason = reason
        self.path = path
        location = f"{path}: " if path is not None else ""
        super().__init__(f"サイト設定を読み込めません: {location}{reason}")
