"""Document metadata: extraction, merging with site defaults, placeholder substitution.

Metadata lines start with the marker (``@@`` by default) and hold
``Key=Value`` pairs::

    @@Title=Birthday
    @@Date=2014-03-17 10:30 PM

The same marker delimits placeholders (``@@Title@@``) substituted into rendered
HTML. Malformed metadata lines are skipped, never fatal.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import TYPE_CHECKING

import structlog

from dromedary.models.content import DocumentSource

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

log = structlog.get_logger()

DEFAULT_MARKER = "@@"


def split_source(text: str, marker: str = DEFAULT_MARKER) -> DocumentSource:
    """Separate metadata lines from the body of a raw document."""
    metadata_lines: list[str] = []
    body_lines: list[str] = []
    for line in text.splitlines():
        if line.startswith(marker):
            metadata_lines.append(line)
        else:
            body_lines.append(line)
    return DocumentSource(metadata_lines=metadata_lines, body="\n".join(body_lines))


def parse_metadata(lines: Iterable[str], marker: str = DEFAULT_MARKER) -> dict[str, str]:
    """Parse ``Key=Value`` metadata lines into a map.

    The first marker occurrence is removed and runs of whitespace collapse to
    one space. Only the first ``=`` splits; the value may itself contain ``=``
    and may be empty. Lines without ``=`` are ignored.
    """
    metadata: dict[str, str] = {}
    for raw in lines:
        line = " ".join(raw.replace(marker, "", 1).split())
        key, sep, value = line.partition("=")
        if not sep:
            if line:
                log.debug("metadata_line_malformed", line=raw)
            continue
        metadata[key] = value
    return metadata


def merge_metadata(document: Mapping[str, str], defaults: Mapping[str, str]) -> dict[str, str]:
    """Merge document metadata over site defaults. Document values always win."""
    merged = dict(defaults)
    for key, value in document.items():
        if key in defaults:
            log.debug("metadata_override", key=key, default=defaults[key], value=value)
        merged[key] = value
    return merged


@lru_cache(maxsize=256)
def _placeholder_re(marker: str, keys: tuple[str, ...]) -> re.Pattern[str]:
    alternatives = "|".join(re.escape(key) for key in keys)
    quoted = re.escape(marker)
    return re.compile(f"{quoted}({alternatives}){quoted}")


def replace_placeholders(
    metadata: Mapping[str, str], text: str, marker: str = DEFAULT_MARKER
) -> str:
    """Replace every ``@@key@@`` occurrence whose key is in ``metadata``.

    Single global pass; unknown keys are left verbatim and substituted values
    are not rescanned. Keys may contain spaces (``@@Site Title@@``).
    """
    keys = tuple(sorted((key for key in metadata if key), key=lambda k: (-len(k), k)))
    if not keys:
        return text

    return _placeholder_re(marker, keys).sub(lambda m: metadata[m.group(1)], text)
