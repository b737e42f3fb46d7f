"""Footnote identifier disambiguation for pages that compose several documents.

Footnotes are numbered from 1 in every document (``fn1`` / ``fnref1``), so two
documents on the same index page would collide. Each document composed onto a
page gets its own suffix, applied uniformly to all of its footnote anchors and
back-references, which keeps links inside a document consistent::

    document 0:  href="#fn1"  id="fnref1"   →  href="#fn1-0"  id="fnref1-0"
    document 1:  href="#fn1"  id="fnref1"   →  href="#fn1-1"  id="fnref1-1"

Only identifiers in attribute position (right after ``#`` or ``"``) are
rewritten. Input must be HTML that already went through the markdown renderer.
"""

from __future__ import annotations

import re

_FOOTNOTE_ANCHOR_RE = re.compile(r'(?<=[#"])fn\d+(?!\d)')
_FOOTNOTE_REF_RE = re.compile(r'(?<=[#"])fnref\d+(?!\d)')

SUFFIX_SEPARATOR = "-"


def offset_footnotes(html: str, offset: int) -> str:
    """Append ``-<offset>`` to every footnote anchor and back-reference in ``html``."""
    suffix = f"{SUFFIX_SEPARATOR}{offset}"
    html = _FOOTNOTE_ANCHOR_RE.sub(lambda m: m.group(0) + suffix, html)
    return _FOOTNOTE_REF_RE.sub(lambda m: m.group(0) + suffix, html)


class FootnoteDisambiguator:
    """Per-page counter; call once per composed document, in page order."""

    def __init__(self) -> None:
        self.counter = 0

    def __call__(self, html: str) -> str:
        result = offset_footnotes(html, self.counter)
        self.counter += 1
        return result
