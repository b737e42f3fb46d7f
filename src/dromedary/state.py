"""Application state container.

AppState is created once at startup (see server.build_state) and passed to
every handler. The content cache is the only shared mutable state; it is
touched from the event loop thread only, so no lock is needed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dromedary.cache import ContentCache
    from dromedary.config import Settings
    from dromedary.protocols import DocumentStoreProtocol
    from dromedary.renderer import DocumentRenderer


@dataclass
class AppState:
    """Holds all shared runtime state. Passed to every handler."""

    settings: Settings
    store: DocumentStoreProtocol
    cache: ContentCache
    renderer: DocumentRenderer
