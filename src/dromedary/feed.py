"""RSS 2.0 feed built from the most recent articles of the chronological index.

The payload is cached in the content cache's feed slot with its own expiry
(``feed.ttl_seconds``), independent of the periodic cache reset.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from email.utils import format_datetime
from itertools import islice
from typing import TYPE_CHECKING

import structlog
from lxml import etree

from dromedary import __version__
from dromedary.chronology import article_timestamp, iter_articles, load_chronological_index
from dromedary.store import external_link

if TYPE_CHECKING:
    from collections.abc import Iterable

    from dromedary.config import FeedSettings
    from dromedary.models.cache import CacheEntry
    from dromedary.state import AppState

log = structlog.get_logger()

ATOM_NS = "http://www.w3.org/2005/Atom"
DC_NS = "http://purl.org/dc/elements/1.1/"

_SCRIPT_RE = re.compile(r"<script[\s\S]*?</script>", re.IGNORECASE)


def strip_scripts(html: str) -> str:
    return _SCRIPT_RE.sub("", html)


def _absolute(site_url: str, link: str) -> str:
    if link.startswith(("http://", "https://")):
        return link
    return site_url + link


def _text(parent: etree._Element, tag: str, text: str) -> etree._Element:
    element = etree.SubElement(parent, tag)
    element.text = text
    return element


def build_feed(
    articles: Iterable[CacheEntry],
    *,
    settings: FeedSettings,
    site_title: str,
    now: datetime | None = None,
) -> str:
    """Serialise the first ``settings.max_items`` articles as RSS 2.0 XML."""
    now = now or datetime.now(UTC)
    site_url = settings.site_url.rstrip("/")

    rss = etree.Element("rss", nsmap={"atom": ATOM_NS, "dc": DC_NS})
    rss.set("version", "2.0")
    channel = etree.SubElement(rss, "channel")
    _text(channel, "title", site_title)
    _text(channel, "description", f"Posts to {site_title}")
    _text(channel, "link", site_url)
    if settings.image_url:
        image = etree.SubElement(channel, "image")
        _text(image, "url", settings.image_url)
        _text(image, "title", site_title)
        _text(image, "link", site_url)
    _text(channel, "generator", f"Dromedary {__version__}")
    _text(channel, "lastBuildDate", format_datetime(now))
    etree.SubElement(
        channel,
        f"{{{ATOM_NS}}}link",
        href=site_url + settings.feed_path,
        rel="self",
        type="application/rss+xml",
    )
    if settings.author:
        _text(channel, "managingEditor", settings.author)
        _text(channel, "webMaster", settings.author)
    if settings.copyright:
        _text(channel, "copyright", settings.copyright)
    _text(channel, "language", settings.language)
    _text(channel, "pubDate", format_datetime(now))
    _text(channel, "ttl", str(settings.ttl_seconds // 60))

    for article in islice(articles, settings.max_items):
        link = _absolute(site_url, article.metadata.get("permalink") or external_link(article.identifier))
        item = etree.SubElement(channel, "item")
        _text(item, "title", article.metadata.get("Title", ""))
        description = strip_scripts(article.unwrapped_body)
        # A CDATA section cannot contain its own terminator.
        etree.SubElement(item, "description").text = (
            etree.CDATA(description) if "]]>" not in description else description
        )
        _text(item, "link", link)
        _text(item, "guid", link).set("isPermaLink", "true")
        if settings.author:
            _text(item, f"{{{DC_NS}}}creator", settings.author)
        _text(item, "pubDate", format_datetime(article_timestamp(article, settings.utc_offset_hours)))

    return etree.tostring(rss, xml_declaration=True, encoding="UTF-8", pretty_print=True).decode(
        "utf-8"
    )


async def load_feed(state: AppState) -> str:
    """Return the cached feed XML, rebuilding it when missing or expired."""
    feed_settings = state.settings.feed
    cached = state.cache.get_feed(feed_settings.ttl_seconds)
    if cached is not None:
        log.debug("feed_cache_hit")
        return cached

    days = await load_chronological_index(state)
    xml = build_feed(
        iter_articles(days),
        settings=feed_settings,
        site_title=state.renderer.site_metadata.get("SiteTitle", ""),
    )
    state.cache.set_feed(xml)
    log.info("feed_built", max_items=feed_settings.max_items)
    return xml
