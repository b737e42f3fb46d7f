"""Administrative handlers: cache flush and archive statistics."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from dromedary.chronology import load_chronological_index

if TYPE_CHECKING:
    from dromedary.state import AppState


def flush(state: AppState) -> None:
    """Empty the content cache, index and feed. Idempotent."""
    log = structlog.get_logger().bind(handler="flush_cache")
    log.info("handler_called")
    state.cache.flush()


async def count(state: AppState) -> tuple[int, int]:
    """Return ``(articles, days with at least one article)``."""
    log = structlog.get_logger().bind(handler="count")
    log.info("handler_called")
    days = await load_chronological_index(state)
    return sum(len(day.articles) for day in days), len(days)
