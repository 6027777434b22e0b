"""HTML を描画結果を変えずに縮める圧縮処理。

html5lib で HTML5 の構文規則どおりに構文木へ変換し (省略された終了タグも補われます)、
以下の規則を適用してから再出力します。

* コメントを削除する
* ``pre`` / ``textarea`` / ``script`` / ``style`` 以外の連続空白を 1 文字へ畳み込み、
  ブロック要素の境界にある空白を削除する
* 既定値と同じ冗長な属性を削除する
* 真偽属性は値なしで、その他の属性値は常にダブルクォートで出力する
* DOCTYPE を最短の ``<!DOCTYPE html>`` にする
* ``class`` 属性のトークンを並べ替える

``html`` / ``head`` / ``body`` や DOCTYPE を含まない入力は断片として扱い、
補われた外枠を付けずに出力します。
出力を再度圧縮しても結果が変わらないこと (冪等性) を前提としています。
"""

from __future__ import annotations

import re
from typing import Protocol

from bs4 import BeautifulSoup, Comment, Doctype, NavigableString, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

# HTML の空白文字のみ。\xa0 (nbsp) は描画に影響するため対象外
_WHITESPACE = re.compile(r"[ \t\n\r\f]+")

_PRESERVE_WHITESPACE = frozenset({"pre", "textarea", "script", "style"})

_BLOCK_ELEMENTS = frozenset(
    {
        "[document]",
        "address",
        "article",
        "aside",
        "blockquote",
        "body",
        "dd",
        "details",
        "dialog",
        "div",
        "dl",
        "dt",
        "fieldset",
        "figcaption",
        "figure",
        "footer",
        "form",
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "head",
        "header",
        "hr",
        "html",
        "li",
        "link",
        "main",
        "meta",
        "nav",
        "ol",
        "p",
        "section",
        "summary",
        "table",
        "tbody",
        "td",
        "tfoot",
        "th",
        "thead",
        "title",
        "tr",
        "ul",
    }
)

_BOOLEAN_ATTRIBUTES = frozenset(
    {
        "allowfullscreen",
        "async",
        "autofocus",
        "autoplay",
        "checked",
        "controls",
        "default",
        "defer",
        "disabled",
        "formnovalidate",
        "hidden",
        "inert",
        "ismap",
        "itemscope",
        "loop",
        "multiple",
        "muted",
        "nomodule",
        "novalidate",
        "open",
        "playsinline",
        "readonly",
        "required",
        "reversed",
        "selected",
    }
)

# (要素名, 属性名) -> 削除してよい値 (小文字)。None は値に関係なく削除する。
_REDUNDANT_ATTRIBUTES: dict[tuple[str, str], frozenset[str] | None] = {
    ("script", "type"): frozenset({"text/javascript", "application/javascript"}),
    ("script", "language"): None,
    ("style", "type"): frozenset({"text/css"}),
    ("link", "type"): frozenset({"text/css"}),
    ("form", "method"): frozenset({"get"}),
    ("input", "type"): frozenset({"text"}),
    ("button", "type"): frozenset({"submit"}),
    ("area", "shape"): frozenset({"rect"}),
}

_FORMATTER = HTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
    empty_attributes_are_booleans=True,
)

SHORT_DOCTYPE = "<!DOCTYPE html>"

# これらを含む入力は文書全体として扱う
_DOCUMENT_MARKER = re.compile(r"<(?:!doctype|html|head|body)[\s/>]", re.IGNORECASE)

# 開始タグ直後の改行 1 つは構文解析で読み捨てられる
_LEADING_NEWLINE_ELEMENTS = ["pre", "textarea"]


class Compactor(Protocol):
    def compact(self, markup: str) -> str:
        ...


class HtmlCompactor:
    """BeautifulSoup (html5lib) を用いた HTML 圧縮器。"""

    def compact(self, markup: str) -> str:
        is_document = _DOCUMENT_MARKER.search(markup) is not None
        soup = BeautifulSoup(markup, "html5lib")
        self._drop_comments(soup)
        has_doctype = self._drop_doctype(soup)
        # コメント削除で隣接したテキストを結合してから空白を処理する
        soup.smooth()
        for tag in soup.find_all(True):
            self._normalize_attributes(tag)
        self._collapse_whitespace(soup)
        self._keep_leading_newlines(soup)
        if not is_document:
            return "".join(
                part.decode_contents(formatter=_FORMATTER)
                for part in (soup.head, soup.body)
                if part is not None
            )
        # DOCTYPE の出力形式は bs4 のバージョンで異なるため自前で書き出す
        html = soup.decode(formatter=_FORMATTER)
        return SHORT_DOCTYPE + html if has_doctype else html

    def _drop_comments(self, soup: BeautifulSoup) -> None:
        for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
            comment.extract()

    def _drop_doctype(self, soup: BeautifulSoup) -> bool:
        doctypes = soup.find_all(string=lambda node: isinstance(node, Doctype))
        for doctype in doctypes:
            doctype.extract()
        return bool(doctypes)

    def _normalize_attributes(self, tag: Tag) -> None:
        for name in list(tag.attrs):
            value = tag.attrs[name]
            key = (tag.name, name)
            if key in _REDUNDANT_ATTRIBUTES:
                removable = _REDUNDANT_ATTRIBUTES[key]
                if removable is None or _attribute_text(value).strip().lower() in removable:
                    del tag.attrs[name]
                    continue
            if name in _BOOLEAN_ATTRIBUTES:
                tag.attrs[name] = ""
            elif name == "class":
                tokens = value if isinstance(value, list) else _WHITESPACE.split(str(value))
                ordered = sorted(token for token in tokens if token)
                if ordered:
                    tag.attrs[name] = ordered
                else:
                    del tag.attrs[name]

    def _collapse_whitespace(self, soup: BeautifulSoup) -> None:
        strings = [
            node
            for node in soup.find_all(string=True)
            if type(node) is NavigableString and not _inside_preserved(node)
        ]
        for node in strings:
            text = str(node)
            if _WHITESPACE.fullmatch(text):
                if _at_block_edge(node):
                    node.extract()
                elif text != " ":
                    node.replace_with(" ")
                continue
            collapsed = _WHITESPACE.sub(" ", text)
            if _in_block(node):
                # ブロックの先頭と末尾の空白は描画されない
                if _is_block(node.previous_sibling):
                    collapsed = collapsed.lstrip(" ")
                if _is_block(node.next_sibling):
                    collapsed = collapsed.rstrip(" ")
            if collapsed != text:
                node.replace_with(collapsed)

    def _keep_leading_newlines(self, soup: BeautifulSoup) -> None:
        for tag in soup.find_all(_LEADING_NEWLINE_ELEMENTS):
            first = tag.contents[0] if tag.contents else None
            if type(first) is NavigableString and first.startswith("\n"):
                first.replace_with("\n" + str(first))


def _attribute_text(value: object) -> str:
    if isinstance(value, list):
        return " ".join(value)
    return str(value)


def _inside_preserved(node: NavigableString) -> bool:
    return any(parent.name in _PRESERVE_WHITESPACE for parent in node.parents)


def _is_block(node: object) -> bool:
    if node is None:
        return True
    return isinstance(node, Tag) and node.name in _BLOCK_ELEMENTS


def _in_block(node: NavigableString) -> bool:
    parent = node.parent
    return parent is not None and parent.name in _BLOCK_ELEMENTS


def _at_block_edge(node: NavigableString) -> bool:
    return _in_block(node) and (
        _is_block(node.previous_sibling) or _is_block(node.next_sibling)
    )


def compact_html(markup: str) -> str:
    return HtmlCompactor().compact(markup)
