"""Background scheduler coroutine for the periodic cache reset."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from dromedary.state import AppState

log = structlog.get_logger()


async def run_cache_reset_scheduler(state: AppState) -> None:
    """Flush the whole content cache every ``reset_interval_seconds``.

    Runs until cancelled. The flush is unconditional: size and activity do
    not matter.
    """
    interval_seconds = state.settings.cache.reset_interval_seconds
    while True:
        await asyncio.sleep(interval_seconds)
        log.info("cache_reset_due", interval_seconds=interval_seconds)
        state.cache.flush()
