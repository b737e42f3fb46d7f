"""Protocol interfaces for swappable components.

Handlers and AppState reference these protocols, not the concrete
implementations. Tests can use lightweight in-memory stores, and a different
content backend can be swapped in without touching handler code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from dromedary.models.content import DocumentRef, DocumentSource, Redirect


class DocumentStoreProtocol(Protocol):
    """Read-only access to the document archive.

    Every method raises ``DromedaryError(DOCUMENT_NOT_FOUND)`` when the
    requested item is absent.
    """

    async def read_source(self, identifier: str) -> DocumentSource: ...

    async def read_raw(self, identifier: str) -> str: ...

    async def read_redirect(self, identifier: str) -> Redirect: ...

    async def list_documents(self, subpath: str = "") -> list[DocumentRef]: ...
