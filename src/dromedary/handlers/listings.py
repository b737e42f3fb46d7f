"""Handlers for the year, month and day archive listings.

Each returns a full HTML page: the site header and footer (titled for the
listing) around a Jinja2 listing template.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import TYPE_CHECKING

import structlog

from dromedary.chronology import group_by_day, load_chronological_index
from dromedary.dates import format_listing_day
from dromedary.documents import load_document
from dromedary.errors import DromedaryError, ErrorCode

if TYPE_CHECKING:
    from dromedary.models.cache import CacheEntry
    from dromedary.state import AppState


@dataclass
class _Month:
    number: int
    name: str
    posts: list[dict[str, str]] = field(default_factory=list)


def _invalid_date(*parts: int) -> DromedaryError:
    return DromedaryError(
        code=ErrorCode.INVALID_INPUT,
        message=f"Not a calendar date: {'/'.join(str(p) for p in parts)}",
        suggestion="Use /<year>/<month>/<day> with a real date.",
    )


async def _load_posts(subpath: str, state: AppState) -> list[tuple[date, CacheEntry]]:
    refs = await state.store.list_documents(subpath)
    return [(ref.day, await load_document(ref.identifier, state)) for ref in refs if not ref.redirect]


async def handle_day(year: int, month: int, day: int, state: AppState) -> str:
    """Posts of one day, oldest first."""
    log = structlog.get_logger().bind(handler="day_listing", year=year, month=month, day=day)
    log.info("handler_called")
    try:
        published = date(year, month, day)
    except (ValueError, OverflowError) as exc:
        raise _invalid_date(year, month, day) from exc

    pairs = await _load_posts(f"{year}/{month}/{day}", state)
    groups = group_by_day(
        pairs, utc_offset_hours=state.settings.feed.utc_offset_hours, newest_first=False
    )
    posts = [article.metadata for group in groups for article in group.articles]

    renderer = state.renderer
    body = renderer.render_template(
        renderer.templates.get("dayListing.html"), {"day": published, "posts": posts}
    )
    return renderer.render_listing(format_listing_day(published), body)


async def handle_month(year: int, month: int, state: AppState) -> str:
    """Posts of one month grouped by day, newest day first."""
    log = structlog.get_logger().bind(handler="month_listing", year=year, month=month)
    log.info("handler_called")
    try:
        first = date(year, month, 1)
    except (ValueError, OverflowError) as exc:
        raise _invalid_date(year, month) from exc

    pairs = await _load_posts(f"{year}/{month}", state)
    groups = group_by_day(pairs, utc_offset_hours=state.settings.feed.utc_offset_hours)
    days = [
        {"date": group.date, "posts": [article.metadata for article in group.articles]}
        for group in groups
    ]

    renderer = state.renderer
    body = renderer.render_template(renderer.templates.get("monthListing.html"), {"days": days})
    return renderer.render_listing(f"{first:%B} {year}", body)


async def handle_year(year: int, state: AppState) -> str:
    """Posts of one year from the chronological index, under month headings."""
    log = structlog.get_logger().bind(handler="year_listing", year=year)
    log.info("handler_called")

    months: list[_Month] = []
    for day in await load_chronological_index(state):
        if day.date.year != year:
            continue
        if not months or months[-1].number != day.date.month:
            months.append(_Month(number=day.date.month, name=f"{day.date:%B}"))
        months[-1].posts.extend(article.metadata for article in day.articles)

    renderer = state.renderer
    body = renderer.render_template(
        renderer.templates.get("yearListing.html"), {"year": year, "months": months}
    )
    return renderer.render_listing(f"Posts for {year}", body)
