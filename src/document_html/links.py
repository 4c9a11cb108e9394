from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import assert_never

from .models import (
    BookmarkAnchor,
    DocumentLink,
    ExternalUrl,
    HeadingAnchor,
    KnownDocumentRegistry,
    LinkTarget,
)
from .slugs import SlugRegistry

DOCUMENT_URL_RE = re.compile(r"https?://docs\.google\.com/document/(?:u/\d+/)?d/([a-zA-Z0-9_-]+)")
HEADING_FRAGMENT_RE = re.compile(r"#heading=(.+)")
BOOKMARK_FRAGMENT_RE = re.compile(r"#bookmark=(.+)")

EXTERNAL_ATTRIBUTES = {"target": "_blank", "rel": "noopener noreferrer"}
MODAL_ATTRIBUTES = {"data-modal": "true"}

UNKNOWN_DOCUMENT_LINK = "UNKNOWN_DOCUMENT_LINK"
UNRESOLVED_HEADING_LINK = "UNRESOLVED_HEADING_LINK"
UNRESOLVED_BOOKMARK_LINK = "UNRESOLVED_BOOKMARK_LINK"


@dataclass(slots=True)
class ResolvedLink:
    href: str
    attributes: dict[str, str] = field(default_factory=dict)
    warning: str | None = None


def classify_url(url: str) -> LinkTarget:
    """Classify a raw link URL by its shape."""

    candidate = url.strip()
    heading = HEADING_FRAGMENT_RE.fullmatch(candidate)
    if heading:
        return HeadingAnchor(heading.group(1))
    bookmark = BOOKMARK_FRAGMENT_RE.fullmatch(candidate)
    if bookmark:
        return BookmarkAnchor(bookmark.group(1))
    document = DOCUMENT_URL_RE.search(candidate)
    if document:
        return DocumentLink(document_id=document.group(1), url=candidate)
    return ExternalUrl(candidate)


def extract_document_id(url: str) -> str | None:
    match = DOCUMENT_URL_RE.search(url)
    return match.group(1) if match else None


def resolve_link(
    target: LinkTarget,
    registry: SlugRegistry,
    known_documents: KnownDocumentRegistry,
    link_text: str = "",
) -> ResolvedLink:
    if isinstance(target, ExternalUrl):
        return ResolvedLink(href=target.uri, attributes=dict(EXTERNAL_ATTRIBUTES))
    if isinstance(target, DocumentLink):
        known = known_documents.get(target.document_id)
        if known is None:
            return ResolvedLink(
                href=target.url,
                attributes=dict(EXTERNAL_ATTRIBUTES),
                warning=UNKNOWN_DOCUMENT_LINK,
            )
        return ResolvedLink(href=known.route, attributes=dict(MODAL_ATTRIBUTES))
    if isinstance(target, HeadingAnchor):
        slug = registry.headings.get(target.heading_id) or registry.heading_for_text(link_text)
        if slug is None:
            return ResolvedLink(href=f"#{target.heading_id}", warning=UNRESOLVED_HEADING_LINK)
        return ResolvedLink(href=f"#{slug}")
    if isinstance(target, BookmarkAnchor):
        assigned = registry.bookmarks.get(target.bookmark_id)
        if assigned is None:
            return ResolvedLink(href=f"#{target.bookmark_id}", warning=UNRESOLVED_BOOKMARK_LINK)
        return ResolvedLink(href=f"#{assigned}")
    assert_never(target)


__all__ = [
    "DOCUMENT_URL_RE",
    "ResolvedLink",
    "UNKNOWN_DOCUMENT_LINK",
    "UNRESOLVED_BOOKMARK_LINK",
    "UNRESOLVED_HEADING_LINK",
    "classify_url",
    "extract_document_id",
    "resolve_link",
]
