"""Chronological index: discovery, grouping by calendar day, pagination.

The index is an ordered list of DayGroup, newest day first, articles within a
day newest first. It is built once per cache epoch and cached as a whole.

Pagination accumulates whole days until the running article count reaches
``posts_per_page``, so a page can hold more articles than that but a day is
never split::

    days of 5, 4, 3 articles, posts_per_page=5  →  [5], [4 + 3]
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime
from typing import TYPE_CHECKING

import structlog

from dromedary.dates import localize, parse_timestamp
from dromedary.documents import load_document
from dromedary.models.content import DayGroup, Page

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from dromedary.models.cache import CacheEntry
    from dromedary.state import AppState

log = structlog.get_logger()

POSTS_PER_PAGE = 5
_EPOCH = datetime(1970, 1, 1)


def _path_date(identifier: str) -> datetime | None:
    parts = identifier.split("/")
    try:
        return datetime(int(parts[0]), int(parts[1]), int(parts[2]))
    except (IndexError, ValueError):
        return None


def article_timestamp(article: CacheEntry, utc_offset_hours: int = 0) -> datetime:
    """Full publication timestamp: ``Date`` metadata, else the path date."""
    moment = parse_timestamp(article.metadata.get("Date"))
    if moment is None:
        moment = _path_date(article.identifier) or _EPOCH
    return localize(moment, utc_offset_hours)


def group_by_day(
    articles: Iterable[tuple[date, CacheEntry]],
    *,
    utc_offset_hours: int = 0,
    newest_first: bool = True,
) -> list[DayGroup]:
    """Group ``(day, article)`` pairs by day, days descending, articles sorted by timestamp."""
    grouped: dict[date, list[CacheEntry]] = defaultdict(list)
    for day, article in articles:
        grouped[day].append(article)

    return [
        DayGroup(
            date=day,
            articles=sorted(
                grouped[day],
                key=lambda a: article_timestamp(a, utc_offset_hours),
                reverse=newest_first,
            ),
        )
        for day in sorted(grouped, reverse=True)
    ]


def paginate(days: Iterable[DayGroup], posts_per_page: int = POSTS_PER_PAGE) -> list[Page]:
    pages: list[Page] = []
    current: list[DayGroup] = []
    count = 0
    for day in days:
        count += len(day.articles)
        current.append(day)
        if count >= posts_per_page:
            pages.append(Page(number=len(pages) + 1, days=current))
            current = []
            count = 0

    if current:
        pages.append(Page(number=len(pages) + 1, days=current))
    return pages


def iter_articles(days: Iterable[DayGroup]) -> Iterator[CacheEntry]:
    """Flatten the index, newest first."""
    for day in days:
        yield from day.articles


async def load_chronological_index(state: AppState) -> list[DayGroup]:
    """Return the cached index, building it from the document store on a miss."""
    cached = state.cache.get_index()
    if cached is not None:
        return cached

    pairs: list[tuple[date, CacheEntry]] = []
    for ref in await state.store.list_documents():
        if ref.redirect:
            continue
        pairs.append((ref.day, await load_document(ref.identifier, state)))

    days = group_by_day(pairs, utc_offset_hours=state.settings.feed.utc_offset_hours)
    state.cache.set_index(days)
    log.info("chronological_index_built", days=len(days), articles=len(pairs))
    return days
