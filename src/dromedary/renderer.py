"""Document rendering: metadata derivation, markdown, header/footer composition.

A rendered page is the concatenation::

    site header + post header + body + post footer + site footer

with ``@@key@@`` placeholders substituted in the body, site header and site
footer from the document's merged metadata. The body alone (after
substitution) is kept as the *unwrapped body* for the feed and index pages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from jinja2 import TemplateError

from dromedary.errors import DromedaryError, ErrorCode
from dromedary.metadata import DEFAULT_MARKER, merge_metadata, parse_metadata, replace_placeholders
from dromedary.models.content import RenderedDocument
from dromedary.store import external_link, is_post
from dromedary.templates import build_markdown

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from jinja2 import Template
    from markdown_it import MarkdownIt

    from dromedary.models.content import DocumentSource
    from dromedary.templates import SiteTemplates

log = structlog.get_logger()

TITLE_SUFFIX = " &mdash; "
POST_BODY_CLASS = "post"


class DocumentRenderer:
    """Turns document sources into final HTML using the site templates."""

    def __init__(
        self,
        templates: SiteTemplates,
        *,
        marker: str = DEFAULT_MARKER,
        markdown: MarkdownIt | None = None,
    ) -> None:
        self.templates = templates
        self.marker = marker
        self._md = markdown if markdown is not None else build_markdown()
        self.site_metadata = parse_metadata(templates.default_tags.splitlines(), marker)

    # ------------------------------------------------------------------
    # External calls (markdown, templates)
    # ------------------------------------------------------------------

    def render_markdown(self, text: str) -> str:
        try:
            return self._md.render(text)
        except Exception as exc:
            raise DromedaryError(
                code=ErrorCode.RENDER_FAILED,
                message=f"Markdown rendering failed: {exc}",
                suggestion="Check the document body for malformed markdown.",
            ) from exc

    def compile_template(self, source: str) -> Template:
        try:
            return self.templates.compile(source)
        except TemplateError as exc:
            raise DromedaryError(
                code=ErrorCode.RENDER_FAILED,
                message=f"Template compilation failed: {exc}",
                suggestion="Check the inline template source in the document metadata.",
            ) from exc

    def render_template(self, template: Template, context: Mapping[str, object]) -> str:
        try:
            return template.render(context)
        except TemplateError as exc:
            raise DromedaryError(
                code=ErrorCode.RENDER_FAILED,
                message=f"Template rendering failed in {template.name or '<inline>'}: {exc}",
                suggestion="Check the site templates for syntax errors.",
            ) from exc

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def build_metadata(self, identifier: str, metadata_lines: Iterable[str]) -> dict[str, str]:
        """Parse, merge with site defaults and add the derived keys."""
        metadata = merge_metadata(parse_metadata(metadata_lines, self.marker), self.site_metadata)

        link = external_link(identifier)
        if metadata.get("Linked") == "Yes":
            metadata["relativeLink"] = metadata.get("Link") or link
            metadata["permalink"] = link
            metadata["linked"] = "linked"
        else:
            metadata["relativeLink"] = link
            metadata["permalink"] = link
            metadata["linked"] = "notLinked"

        title = metadata.get("Title", "")
        metadata["title"] = f"{title}{TITLE_SUFFIX}" if title else ""

        if is_post(identifier):
            metadata["BodyClass"] = POST_BODY_CLASS

        metadata["header"] = self.render_template(self.templates.post_header, metadata)
        metadata["footer"] = self.render_template(self.templates.post_footer, metadata)
        return metadata

    def render_body(self, body: str, metadata: Mapping[str, str]) -> str:
        """Markdown body with placeholders substituted, without header/footer."""
        return replace_placeholders(metadata, self.render_markdown(body), self.marker)

    def wrap(self, body_html: str, metadata: Mapping[str, str]) -> str:
        header = replace_placeholders(metadata, self.templates.header, self.marker)
        footer = replace_placeholders(metadata, self.templates.footer, self.marker)
        return header + metadata.get("header", "") + body_html + metadata.get("footer", "") + footer

    def render(self, identifier: str, source: DocumentSource) -> RenderedDocument:
        metadata = self.build_metadata(identifier, source.metadata_lines)
        unwrapped_body = self.render_body(source.body, metadata)
        log.debug("document_rendered", identifier=identifier, title=metadata.get("Title", ""))
        return RenderedDocument(
            body=self.wrap(unwrapped_body, metadata),
            metadata=metadata,
            unwrapped_body=unwrapped_body,
        )

    # ------------------------------------------------------------------
    # Generated pages (listings)
    # ------------------------------------------------------------------

    def listing_metadata(self, title: str) -> dict[str, str]:
        return {
            **self.site_metadata,
            "Title": title,
            "title": f"{title}{TITLE_SUFFIX}" if title else "",
        }

    def render_listing(self, title: str, body_html: str) -> str:
        """Site header and footer around generated HTML, titled ``title``."""
        metadata = self.listing_metadata(title)
        header = replace_placeholders(metadata, self.templates.header, self.marker)
        footer = replace_placeholders(metadata, self.templates.footer, self.marker)
        return header + body_html + footer
