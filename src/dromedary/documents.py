"""Cache-through document loading shared by every handler."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from dromedary.models.cache import CacheEntry
    from dromedary.state import AppState

log = structlog.get_logger()


async def load_document(identifier: str, state: AppState) -> CacheEntry:
    """Return the rendered document, rendering and caching it on a miss.

    Raises ``DromedaryError(DOCUMENT_NOT_FOUND)`` when no ``<id>.md`` exists
    and ``DromedaryError(RENDER_FAILED)`` when rendering fails; nothing is
    cached in either case.
    """
    cached = state.cache.get(identifier)
    if cached is not None:
        log.debug("cache_hit", key=identifier)
        return cached

    log.debug("cache_miss", key=identifier)
    source = await state.store.read_source(identifier)
    rendered = state.renderer.render(identifier, source)
    return state.cache.put(
        identifier,
        body=rendered.body,
        metadata=rendered.metadata,
        unwrapped_body=rendered.unwrapped_body,
    )
