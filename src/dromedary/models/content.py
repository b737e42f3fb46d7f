from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from pydantic import BaseModel

from dromedary.models.cache import CacheEntry


class DocumentSource(BaseModel):
    """Raw source of one document, split into metadata lines and body text."""

    metadata_lines: list[str] = []
    body: str = ""


class DocumentRef(BaseModel):
    """A document discovered under the posts root."""

    identifier: str
    day: date  # Calendar date taken from the YYYY/M/D path
    redirect: bool = False


class Redirect(BaseModel):
    """Structured redirect instruction returned instead of HTML."""

    status_code: int = 302
    location: str


class RenderedDocument(BaseModel):
    """Output of a document render, before it enters the cache."""

    body: str
    metadata: dict[str, str]
    unwrapped_body: str


class DocumentPage(BaseModel):
    """A rendered document as returned to the routing layer."""

    identifier: str
    html: str
    metadata: dict[str, str]
    cached: bool = False


class IndexPage(BaseModel):
    html: str
    page: int
    has_prev: bool
    has_next: bool


@dataclass
class DayGroup:
    """All articles published on one calendar date."""

    date: date
    articles: list[CacheEntry] = field(default_factory=list)


@dataclass
class Page:
    """One page of the paginated index. Days are never split across pages."""

    number: int
    days: list[DayGroup] = field(default_factory=list)

    @property
    def article_count(self) -> int:
        return sum(len(day.articles) for day in self.days)
