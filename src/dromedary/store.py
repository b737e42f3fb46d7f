"""Filesystem document store and identifier helpers.

Documents live under the posts root as ``<id>.md`` (rendered posts and pages)
or ``<id>.redirect`` (status code on the first line, target URL on the
second). Dated posts follow ``YYYY/M/D/slug``.

Blocking file I/O runs in a worker thread so a slow read only suspends the
request that issued it.
"""

from __future__ import annotations

import asyncio
import re
from datetime import date
from pathlib import Path, PurePosixPath

import structlog

from dromedary.errors import not_found
from dromedary.metadata import DEFAULT_MARKER, split_source
from dromedary.models.content import DocumentRef, DocumentSource, Redirect

log = structlog.get_logger()

POST_IDENTIFIER_RE = re.compile(r"^\d{4}/\d{1,2}/\d{1,2}/[\w-]+$")
_DOCUMENT_FILE_RE = re.compile(r"^(\d{4})/(\d{1,2})/(\d{1,2})/[\w-]+\.(md|redirect)$")


def normalize_identifier(path: str, posts_root: str = "posts") -> str:
    """Reduce a request path or file name to its document identifier.

    ``./posts/2014/3/17/x.md``, ``posts/2014/3/17/x``, ``/2014/3/17/x`` and
    ``2014/3/17/x`` all become ``2014/3/17/x``. The root prefix may be the
    configured ``posts_root`` as written (relative or absolute) or just its
    last path component.
    """
    identifier = path.replace("\\", "/").removeprefix("./").lstrip("/")
    root = posts_root.replace("\\", "/").removeprefix("./").strip("/")
    for prefix in (root, PurePosixPath(root).name):
        if prefix and (identifier == prefix or identifier.startswith(prefix + "/")):
            identifier = identifier[len(prefix) :].lstrip("/")
            break
    return identifier.removesuffix(".md")


def external_link(identifier: str) -> str:
    """Site-relative URL of a document: ``2014/3/17/x`` → ``/2014/3/17/x``."""
    return "/" + identifier


def is_post(identifier: str) -> bool:
    return POST_IDENTIFIER_RE.match(identifier) is not None


class FileDocumentStore:
    """Document store backed by a directory tree. Implements DocumentStoreProtocol."""

    def __init__(self, root: Path, *, marker: str = DEFAULT_MARKER) -> None:
        self.root = root
        self._marker = marker

    def _path(self, identifier: str, suffix: str = "") -> Path:
        root = self.root.resolve()
        path = (root / f"{identifier}{suffix}").resolve()
        if not path.is_relative_to(root):
            log.warning("document_path_outside_root", identifier=identifier)
            raise not_found(identifier)
        return path

    async def _read(self, identifier: str, suffix: str) -> str:
        path = self._path(identifier, suffix)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as exc:
            raise not_found(identifier) from exc

    async def read_source(self, identifier: str) -> DocumentSource:
        text = await self._read(identifier, ".md")
        return split_source(text, self._marker)

    async def read_raw(self, identifier: str) -> str:
        return await self._read(identifier, ".md")

    async def read_redirect(self, identifier: str) -> Redirect:
        text = await self._read(identifier, ".redirect")
        lines = text.splitlines()
        try:
            status_code = int(lines[0].strip())
            location = lines[1].strip()
        except (IndexError, ValueError):
            log.warning("redirect_file_malformed", identifier=identifier)
            raise not_found(identifier) from None
        if not location:
            log.warning("redirect_file_malformed", identifier=identifier)
            raise not_found(identifier)
        return Redirect(status_code=status_code, location=location)

    async def list_documents(self, subpath: str = "") -> list[DocumentRef]:
        """Discover dated documents (posts and redirect markers) under ``subpath``."""
        base = self._path(subpath) if subpath else self.root.resolve()
        root = self.root.resolve()

        def _scan() -> list[DocumentRef]:
            if not base.is_dir():
                if subpath:
                    raise not_found(subpath)
                return []
            refs: list[DocumentRef] = []
            for path in sorted(base.rglob("*")):
                if not path.is_file():
                    continue
                relative = path.relative_to(root).as_posix()
                match = _DOCUMENT_FILE_RE.match(relative)
                if match is None:
                    continue
                year, month, day, extension = match.groups()
                try:
                    published = date(int(year), int(month), int(day))
                except ValueError:
                    log.warning("document_path_invalid_date", path=relative)
                    continue
                refs.append(
                    DocumentRef(
                        identifier=relative.rsplit(".", 1)[0],
                        day=published,
                        redirect=extension == "redirect",
                    )
                )
            return refs

        return await asyncio.to_thread(_scan)
