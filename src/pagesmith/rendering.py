"""Markdown 本文を HTML ページとインデックスへ描画するユーティリティ。"""

from __future__ import annotations

from datetime import datetime
from typing import Sequence

import markdown
from jinja2 import DictLoader, Environment, select_autoescape
from markupsafe import Markup

from .config import SiteConfig
from .loader import SourceDocument

DATE_FORMAT = "%Y-%m-%d"

_MARKDOWN_EXTENSIONS = ("extra", "sane_lists")

_BASE_TEMPLATE = """<!DOCTYPE html>
<html lang="{{ site.language }}">
  <head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    {% if description %}<meta name="description" content="{{ description }}">{% endif %}
    <title>{% block title %}{{ site.title }}{% endblock %}</title>
    <link rel="stylesheet" type="text/css" href="style.css">
  </head>
  <body>
    <header class="site-header">
      <a class="site-title" href="index.html">{{ site.title }}</a>
    </header>
    <main>
      {% block content %}{% endblock %}
    </main>
  </body>
</html>
"""

_PAGE_TEMPLATE = """{% extends "base.html" %}
{% block title %}{{ document.title }} | {{ site.title }}{% endblock %}
{% block content %}
      <article class="page">
        <h1>{{ document.title }}</h1>
        <p class="page-meta">
          <time datetime="{{ modified }}">{{ modified }}</time>
        </p>
        {{ body }}
      </article>
{% endblock %}
"""

_INDEX_TEMPLATE = """{% extends "base.html" %}
{% block content %}
      <h1>{{ site.title }}</h1>
      {% if site.description %}<p class="site-description">{{ site.description }}</p>{% endif %}
      <ul class="page-list">
      {% for document in documents %}
        <li><a href="{{ document.slug }}.html">{{ document.title }}</a></li>
      {% endfor %}
      </ul>
{% endblock %}
"""

DEFAULT_STYLESHEET = b"""body {
  margin: 0 auto;
  max-width: 46rem;
  padding: 1.5rem;
  font-family: system-ui, -apple-system, "Segoe UI", sans-serif;
  line-height: 1.6;
  color: #222;
}
.site-header {
  margin-bottom: 2rem;
}
.site-title {
  font-weight: bold;
  text-decoration: none;
}
.page-meta {
  color: #666;
  font-size: 0.9rem;
}
pre {
  overflow-x: auto;
  padding: 0.75rem;
  background: #f5f5f5;
}
"""


class SiteRenderer:
    """Jinja2 テンプレートを用いてページとインデックスの HTML を生成します。"""

    def __init__(self, site: SiteConfig) -> None:
        self.site = site
        self._env = Environment(
            loader=DictLoader(
                {
                    "base.html": _BASE_TEMPLATE,
                    "page.html": _PAGE_TEMPLATE,
                    "index.html": _INDEX_TEMPLATE,
                }
            ),
            autoescape=select_autoescape(["html"]),
        )

    def render_body(self, body: str) -> str:
        return markdown.markdown(body, extensions=list(_MARKDOWN_EXTENSIONS))

    def render_page(self, document: SourceDocument) -> str:
        description = document.metadata.get("description")
        return self._env.get_template("page.html").render(
            site=self.site,
            document=document,
            body=Markup(self.render_body(document.body)),
            modified=_format_date(document.modified_at),
            description=description if isinstance(description, str) else "",
        )

    def render_index(self, documents: Sequence[SourceDocument]) -> str:
        return self._env.get_template("index.html").render(
            site=self.site,
            documents=documents,
            description=self.site.description,
        )


def _format_date(value: datetime) -> str:
    return value.strftime(DATE_FORMAT)
