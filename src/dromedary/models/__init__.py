from __future__ import annotations

from dromedary.models.cache import CacheEntry
from dromedary.models.content import (
    DayGroup,
    DocumentPage,
    DocumentRef,
    DocumentSource,
    IndexPage,
    Page,
    Redirect,
    RenderedDocument,
)

__all__ = [
    # cache
    "CacheEntry",
    # content
    "DocumentSource",
    "DocumentRef",
    "Redirect",
    "RenderedDocument",
    "DocumentPage",
    "IndexPage",
    "DayGroup",
    "Page",
]
