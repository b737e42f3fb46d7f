"""Handler for the RSS feed."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from dromedary.feed import load_feed

if TYPE_CHECKING:
    from dromedary.state import AppState


async def handle(state: AppState) -> str:
    """Return the RSS XML, cached for ``feed.ttl_seconds``."""
    log = structlog.get_logger().bind(handler="get_feed")
    log.info("handler_called")
    return await load_feed(state)
