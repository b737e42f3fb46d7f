"""Site templates and the markdown renderer.

Templates are looked up in the site's templates root first and fall back to
the built-in defaults below, so a site only needs to ship the files it wants
to change. Two kinds coexist:

- ``defaultTags.html``, ``header.html`` and ``footer.html`` are plain text
  with ``@@key@@`` placeholders (see metadata.replace_placeholders).
- ``postHeader.html``, ``postFooter.html``, ``day.html``, ``article.html``,
  ``indexFooter.html`` and the ``*Listing.html`` pages are Jinja2 templates
  rendered with a metadata map or a page context.

Autoescaping is off: every value flowing through these templates is HTML
produced by the markdown renderer or written by the site author.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from jinja2 import (
    ChoiceLoader,
    DictLoader,
    Environment,
    FileSystemLoader,
    Template,
    TemplateNotFound,
)
from markdown_it import MarkdownIt
from mdit_py_plugins.footnote import footnote_plugin

from dromedary.dates import (
    date_link,
    format_day_heading,
    format_iso_date,
    format_listing_day,
    format_post_date,
    format_short_date,
)

if TYPE_CHECKING:
    from pathlib import Path

log = structlog.get_logger()

DEFAULT_TEMPLATES: dict[str, str] = {
    "defaultTags.html": "@@SiteTitle=Dromedary\n@@BodyClass=page\n",
    "header.html": (
        "<!DOCTYPE html>\n"
        '<html lang="en">\n<head>\n<meta charset="utf-8" />\n'
        "<title>@@title@@@@SiteTitle@@</title>\n"
        '<link rel="alternate" type="application/rss+xml" href="/rss" />\n'
        '</head>\n<body class="@@BodyClass@@">\n'
    ),
    "footer.html": "</body>\n</html>\n",
    "postHeader.html": (
        '<article class="{{ linked }}">\n'
        '<h1><a href="{{ relativeLink }}">{{ Title }}</a></h1>\n'
        "{% if Date %}"
        '<time datetime="{{ Date | iso_date }}">{{ Date | post_date }}</time>\n'
        "{% endif %}"
    ),
    "postFooter.html": (
        '{% if linked == "linked" %}<p class="permalink"><a href="{{ permalink }}">&#8734;</a></p>\n'
        "{% endif %}</article>\n"
    ),
    "day.html": (
        '<section class="day">\n'
        '<div class="date"><a href="{{ day.date | date_link }}">{{ day.date | day_heading }}</a></div>\n'
        '{% for article in day.articles %}{% include "article.html" %}{% endfor %}'
        "</section>\n"
    ),
    "article.html": "{{ article.header }}{{ article.body }}{{ article.footer }}",
    "indexFooter.html": (
        '<nav class="pagination">'
        '{% if prevPage %}<a class="newer" href="/?p={{ prevPage }}">Newer</a>{% endif %}'
        '{% if nextPage %}<a class="older" href="/?p={{ nextPage }}">Older</a>{% endif %}'
        "</nav>\n"
    ),
    "dayListing.html": (
        "<h1>Posts from {{ day | listing_day }}</h1>\n<ul>\n"
        '{% for post in posts %}<li><a href="{{ post.relativeLink }}">{{ post.Title }}</a></li>\n'
        "{% endfor %}</ul>\n"
    ),
    "monthListing.html": (
        "{% for day in days %}<h1>{{ day.date | listing_day }}</h1>\n<ul>\n"
        '{% for post in day.posts %}<li><a href="{{ post.relativeLink }}">{{ post.Title }}</a></li>\n'
        "{% endfor %}</ul>\n{% endfor %}"
    ),
    "yearListing.html": (
        "<h1>Posts for the year {{ year }}</h1>\n"
        '{% for month in months %}<h2><a href="/{{ year }}/{{ month.number }}/">{{ month.name }}</a></h2>\n'
        "<ul>\n"
        '{% for post in month.posts %}<li><a href="{{ post.relativeLink }}">{{ post.Title }}</a></li>\n'
        "{% endfor %}</ul>\n{% endfor %}"
    ),
}


def build_markdown() -> MarkdownIt:
    """CommonMark + raw HTML, XHTML output, typographer, tables, strikethrough, footnotes.

    Footnotes render as ``fn<N>`` anchors and ``fnref<N>`` back-references.
    """
    md = MarkdownIt("commonmark", {"html": True, "xhtmlOut": True, "typographer": True})
    md.enable(["replacements", "smartquotes", "table", "strikethrough"])
    md.use(footnote_plugin)
    return md


def build_environment(root: Path | None) -> Environment:
    loaders = []
    if root is not None:
        loaders.append(FileSystemLoader(str(root), encoding="utf-8"))
    loaders.append(DictLoader(DEFAULT_TEMPLATES))
    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=False,
        keep_trailing_newline=True,
    )
    env.filters.update(
        post_date=format_post_date,
        short_date=format_short_date,
        iso_date=format_iso_date,
        day_heading=format_day_heading,
        listing_day=format_listing_day,
        date_link=date_link,
    )
    return env


def _source(env: Environment, name: str) -> str:
    if env.loader is None:
        raise TemplateNotFound(name)
    source, _filename, _uptodate = env.loader.get_source(env, name)
    return source


@dataclass
class SiteTemplates:
    """Loaded site templates. Created once at startup."""

    env: Environment
    default_tags: str
    header: str
    footer: str
    post_header: Template
    post_footer: Template

    @classmethod
    def load(cls, root: Path | None) -> SiteTemplates:
        env = build_environment(root if root is not None and root.is_dir() else None)
        if root is not None and not root.is_dir():
            log.warning("templates_root_missing", root=str(root))
        templates = cls(
            env=env,
            default_tags=_source(env, "defaultTags.html"),
            header=_source(env, "header.html"),
            footer=_source(env, "footer.html"),
            post_header=env.get_template("postHeader.html"),
            post_footer=env.get_template("postFooter.html"),
        )
        log.info("templates_loaded", root=str(root) if root is not None else None)
        return templates

    def compile(self, source: str) -> Template:
        """Compile an inline template source (e.g. from document metadata)."""
        return self.env.from_string(source)

    def get(self, name: str) -> Template:
        return self.env.get_template(name)
