"""ソースファイル名からスラッグと表示タイトルを導出するユーティリティ。"""

from __future__ import annotations

import os


def _strip_extension(name: str) -> str:
    stem, _ = os.path.splitext(name)
    return stem


def slug_of(name: str) -> str:
    """最後の拡張子を取り除き、小文字化したスラッグを返します。

    ``Getting-Started.md`` は ``getting-started`` に、``a.b.md`` は ``a.b`` になります。
    拡張子を持たない名前はそのまま小文字化されます。
    """

    return _strip_extension(name).lower()


def title_of(name: str) -> str:
    """最後の拡張子を取り除き、``-`` を空白へ置き換えたタイトルを返します。"""

    return _strip_extension(name).replace("-", " ")
