from __future__ import annotations

import string

import pytest
from bs4 import BeautifulSoup, NavigableString
from hypothesis import given, settings
from hypothesis import strategies as st

from pagesmith.compaction import HtmlCompactor, compact_html


@pytest.mark.parametrize(
    ("markup", "expected"),
    [
        ("<p>a<!-- secret -->b</p>", "<p>ab</p>"),
        ("<div>\n  <p>Hello   world</p>\n</div>", "<div><p>Hello world</p></div>"),
        ("<p><em>a</em>   <strong>b</strong></p>", "<p><em>a</em> <strong>b</strong></p>"),
        ("<pre>  a\n    b</pre>", "<pre>  a\n    b</pre>"),
        ('<script type="text/javascript">var a = 1 < 2;</script>', "<script>var a = 1 < 2;</script>"),
        ('<link rel="stylesheet" type="text/css" href="style.css">', '<link href="style.css" rel="stylesheet">'),
        ('<input type="checkbox" checked="checked" disabled="">', '<input checked disabled type="checkbox">'),
        ('<input type="text" name="q">', '<input name="q">'),
        ('<form method="GET" action="/s"></form>', '<form action="/s"></form>'),
        ('<div class="zeta alpha  mid">x</div>', '<div class="alpha mid zeta">x</div>'),
        ("<a href='x.html'>x</a>", '<a href="x.html">x</a>'),
        ("<p>a<p>b", "<p>a</p><p>b</p>"),
        ("<ul><li>a<li>b</ul>", "<ul><li>a</li><li>b</li></ul>"),
        ("<div>\n  Hello <em>there</em>\n</div>", "<div>Hello <em>there</em></div>"),
    ],
)
def test_compaction_rules(markup: str, expected: str) -> None:
    assert compact_html(markup) == expected


def test_compaction_shortens_doctype_and_drops_structural_whitespace() -> None:
    markup = (
        '<!DOCTYPE html PUBLIC "-//W3C//DTD HTML 4.01//EN">\n'
        "<html>\n<head>\n  <title>T</title>\n</head>\n"
        "<body>\n  <!-- nav -->\n  <p>Hi</p>\n</body>\n</html>\n"
    )

    assert compact_html(markup) == "<!DOCTYPE html><html><head><title>T</title></head><body><p>Hi</p></body></html>"


def test_compaction_writes_doctype_without_trailing_newline() -> None:
    compacted = compact_html("<!doctype html>\n<p>x</p>")

    assert compacted == "<!DOCTYPE html><html><head></head><body><p>x</p></body></html>"
    assert compact_html(compacted) == compacted


def test_compaction_keeps_fragments_unwrapped() -> None:
    assert compact_html('  <link rel="stylesheet" href="a.css">\n<p>x</p>') == (
        '<link href="a.css" rel="stylesheet"><p>x</p>'
    )
    assert compact_html("") == ""


def test_compaction_keeps_newline_after_pre_start_tag() -> None:
    compacted = compact_html("<pre>\n\nx</pre>")

    assert compacted == "<pre>\n\nx</pre>"
    assert compact_html(compacted) == compacted


def test_compaction_keeps_non_breaking_space() -> None:
    assert "a\xa0b" in compact_html("<p>a&nbsp;b</p>")


def test_compaction_keeps_escaped_text() -> None:
    compacted = compact_html("<p>1 &lt; 2 &amp;&amp; 3 &gt; 2</p>")

    assert compacted == "<p>1 &lt; 2 &amp;&amp; 3 &gt; 2</p>"
    assert compact_html(compacted) == compacted


_TAGS = ["div", "p", "section", "ul", "li", "span", "em", "strong", "a", "code"]
_TEXT = st.text(alphabet=string.ascii_letters + "   \n\t", max_size=12)
_CLASSES = st.lists(st.sampled_from(["b", "a", "c", "item"]), max_size=3)


def _element(tag: str, classes: list[str], hidden: bool, children: list[str]) -> str:
    attributes = ""
    if classes:
        attributes += f' class="{" ".join(classes)}"'
    if hidden:
        attributes += ' hidden="hidden"'
    return f"<{tag}{attributes}>{''.join(children)}</{tag}>"


def _markup(leaves: st.SearchStrategy[str]) -> st.SearchStrategy[str]:
    return st.recursive(
        leaves,
        lambda children: st.builds(
            _element,
            st.sampled_from(_TAGS),
            _CLASSES,
            st.booleans(),
            st.lists(children, max_size=4),
        ),
        max_leaves=20,
    )


def _visible_text(markup: str) -> list[str]:
    soup = BeautifulSoup(markup, "html.parser")
    return [
        " ".join(node.split())
        for node in soup.find_all(string=True)
        if type(node) is NavigableString and node.strip()
    ]


@settings(max_examples=150)
@given(_markup(_TEXT | st.just("<!-- note -->") | st.just("<br>")))
def test_compaction_is_idempotent(markup: str) -> None:
    compactor = HtmlCompactor()
    once = compactor.compact(markup)

    assert compactor.compact(once) == once


@settings(max_examples=150)
@given(_markup(_TEXT))
def test_compaction_preserves_visible_text(markup: str) -> None:
    assert _visible_text(compact_html(markup)) == _visible_text(markup)
