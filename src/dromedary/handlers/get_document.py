"""Handler for single-document requests (posts and standalone pages).

Receives AppState, goes through the content cache, falls back to a
``.redirect`` marker when no markdown source exists, and returns either the
rendered page or a redirect instruction. No Starlette imports; server.py
handles the HTTP wiring.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog

from dromedary.documents import load_document
from dromedary.errors import DromedaryError, ErrorCode
from dromedary.models.content import DocumentPage, Redirect
from dromedary.store import normalize_identifier

if TYPE_CHECKING:
    from dromedary.state import AppState


def _identifier(path: str, state: AppState) -> str:
    identifier = normalize_identifier(path, state.settings.content.posts_root)
    if not identifier:
        raise DromedaryError(
            code=ErrorCode.INVALID_INPUT,
            message=f"Empty document identifier for path {path!r}",
            suggestion="Request a document path such as /about or /2014/3/17/slug.",
        )
    return identifier


async def handle(path: str, state: AppState) -> DocumentPage | Redirect:
    """Handle a document request."""
    identifier = _identifier(path, state)
    log = structlog.get_logger().bind(handler="get_document", identifier=identifier)
    log.info("handler_called")

    cached = identifier in state.cache
    try:
        entry = await load_document(identifier, state)
    except DromedaryError as exc:
        if exc.code != ErrorCode.DOCUMENT_NOT_FOUND:
            raise
        # No markdown source: maybe a redirect marker. Raises NotFound if not.
        redirect = await state.store.read_redirect(identifier)
        log.info("document_redirect", status_code=redirect.status_code, location=redirect.location)
        return redirect

    log.info("document_served", cached=cached)
    return DocumentPage(identifier=identifier, html=entry.body, metadata=entry.metadata, cached=cached)


async def handle_source(path: str, state: AppState) -> str:
    """Return the raw markdown source of a document, uncached."""
    identifier = _identifier(path, state)
    log = structlog.get_logger().bind(handler="get_document_source", identifier=identifier)
    log.info("handler_called")
    return await state.store.read_raw(identifier)
