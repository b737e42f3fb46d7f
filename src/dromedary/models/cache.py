from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class CacheEntry(BaseModel):
    """A rendered document held by the content cache."""

    identifier: str  # Normalized document identifier, e.g. "2014/3/17/birthday"
    body: str  # Full page HTML: site header + post header + body + post footer + site footer
    metadata: dict[str, str] = {}
    unwrapped_body: str = ""  # Markdown output with placeholders, no header/footer
    inserted_at: datetime
