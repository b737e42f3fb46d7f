"""Handler for the paginated home page.

Each page composes the articles of its day groups with the ``day.html``
template (or the ``DayTemplate`` source from the ``index`` document's
metadata) and runs every article body through a fresh footnote
disambiguator so footnote identifiers stay unique on the page. Rendered pages
are cached under ``/?p=<n>``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import structlog

from dromedary.chronology import load_chronological_index, paginate
from dromedary.documents import load_document
from dromedary.errors import DromedaryError, ErrorCode
from dromedary.footnotes import FootnoteDisambiguator
from dromedary.metadata import replace_placeholders
from dromedary.models.content import IndexPage, Page, Redirect

if TYPE_CHECKING:
    from collections.abc import Mapping

    from dromedary.models.cache import CacheEntry
    from dromedary.renderer import DocumentRenderer
    from dromedary.state import AppState

INDEX_IDENTIFIER = "index"

_TITLE_RE = re.compile(r"(<title>).*?(</title>)", re.IGNORECASE | re.DOTALL)


def page_cache_key(page: int) -> str:
    return f"/?p={page}"


async def handle(page: int, state: AppState) -> IndexPage | Redirect:
    """Handle a home page request for ``page`` (1-based)."""
    log = structlog.get_logger().bind(handler="get_index_page", page=page)
    log.info("handler_called")

    key = page_cache_key(page)
    cached = state.cache.get(key)
    if cached is not None:
        log.info("cache_hit")
        return _index_page(cached, page)

    days = await load_chronological_index(state)
    pages = paginate(days, state.settings.content.posts_per_page)

    # An empty archive still has a (blank) first page.
    if not 1 <= page <= max(len(pages), 1):
        location = page_cache_key(len(pages)) if len(pages) > 1 else "/"
        log.info("page_out_of_range", total_pages=len(pages), location=location)
        return Redirect(status_code=302, location=location)

    current = pages[page - 1] if pages else Page(number=1)
    index_metadata = await _index_metadata(state)
    html = compose_index_page(
        current,
        total_pages=len(pages),
        index_metadata=index_metadata,
        renderer=state.renderer,
    )

    navigation: dict[str, str] = {"page": str(page)}
    if page > 1:
        navigation["prevPage"] = str(page - 1)
    if len(pages) > page:
        navigation["nextPage"] = str(page + 1)

    entry = state.cache.put(key, body=html, metadata=navigation)
    log.info("index_page_rendered", total_pages=len(pages), articles=current.article_count)
    return _index_page(entry, page)


def _index_page(entry: CacheEntry, page: int) -> IndexPage:
    return IndexPage(
        html=entry.body,
        page=page,
        has_prev="prevPage" in entry.metadata,
        has_next="nextPage" in entry.metadata,
    )


async def _index_metadata(state: AppState) -> dict[str, str]:
    """Metadata of the ``index`` document, or the site defaults if there is none."""
    try:
        return (await load_document(INDEX_IDENTIFIER, state)).metadata
    except DromedaryError as exc:
        if exc.code != ErrorCode.DOCUMENT_NOT_FOUND:
            raise
        return dict(state.renderer.site_metadata)


def compose_index_page(
    page: Page,
    *,
    total_pages: int,
    index_metadata: Mapping[str, str],
    renderer: DocumentRenderer,
) -> str:
    templates = renderer.templates
    day_source = index_metadata.get("DayTemplate")
    footer_source = index_metadata.get("FooterTemplate")
    day_template = (
        renderer.compile_template(day_source) if day_source else templates.get("day.html")
    )
    footer_template = (
        renderer.compile_template(footer_source)
        if footer_source
        else templates.get("indexFooter.html")
    )

    disambiguate = FootnoteDisambiguator()
    body_parts: list[str] = []
    for day in page.days:
        articles = [
            {
                "identifier": article.identifier,
                "metadata": article.metadata,
                "header": article.metadata.get("header", ""),
                "footer": article.metadata.get("footer", ""),
                "body": disambiguate(article.unwrapped_body),
                "relative_link": article.metadata.get("relativeLink", ""),
            }
            for article in day.articles
        ]
        body_parts.append(
            renderer.render_template(day_template, {"day": {"date": day.date, "articles": articles}})
        )

    footer_context: dict[str, int] = {}
    if page.number > 1:
        footer_context["prevPage"] = page.number - 1
    if total_pages > page.number:
        footer_context["nextPage"] = page.number + 1

    marker = renderer.marker
    header = replace_placeholders(index_metadata, templates.header, marker)
    # The home page title shows the site title alone.
    site_title = index_metadata.get("SiteTitle", "")
    header = _TITLE_RE.sub(lambda m: m.group(1) + site_title + m.group(2), header, count=1)
    body = replace_placeholders(index_metadata, "".join(body_parts), marker)
    footer = replace_placeholders(index_metadata, templates.footer, marker)
    return header + body + renderer.render_template(footer_template, footer_context) + footer
