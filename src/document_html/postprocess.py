"""Clean up documents the authoring service already exported as HTML."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Tag
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

from .links import extract_document_id
from .models import EMPTY_REGISTRY, KnownDocumentRegistry
from .slugs import SlugRegistry, slugify

HEADING_TAG_RE = re.compile(r"^h[1-6]$")
BOOKMARK_TAGS = ("span", "a")
EXPORTED_ID_PREFIX = "h."
PARSER = "html.parser"


class SourceOrderFormatter(HTMLFormatter):
    """Minimal escaping, attributes written in the order they were set."""

    def __init__(self) -> None:
        super().__init__(entity_substitution=EntitySubstitution.substitute_xml)

    def attributes(self, tag: Tag):
        return list(tag.attrs.items())


FORMATTER = SourceOrderFormatter()


def process_exported_html(raw_html: str, known_documents: KnownDocumentRegistry | None = None) -> str:
    """Return the body of an exported page with site routes and readable anchors."""

    soup = BeautifulSoup(raw_html, PARSER)
    root: Tag = soup.body or soup
    _rewrite_document_links(root, known_documents if known_documents is not None else EMPTY_REGISTRY)
    _assign_readable_ids(root)
    if soup.body is None:
        return soup.decode(formatter=FORMATTER).strip()
    return soup.body.decode_contents(formatter=FORMATTER).strip()


def _rewrite_document_links(root: Tag, known_documents: KnownDocumentRegistry) -> None:
    for anchor in root.find_all("a", href=True):
        document_id = extract_document_id(anchor["href"])
        if document_id is None:
            continue
        known = known_documents.get(document_id)
        if known is not None:
            anchor["href"] = known.route


def _assign_readable_ids(root: Tag) -> None:
    registry = SlugRegistry()
    id_map: dict[str, str] = {}

    for heading in root.find_all(HEADING_TAG_RE, id=True):
        original = heading["id"]
        new_id = slugify(heading.get_text(), registry)
        id_map[original] = new_id
        heading["id"] = new_id
        heading["data-original-id"] = original

    for bookmark in root.find_all(BOOKMARK_TAGS, id=True):
        if bookmark.contents or bookmark.has_attr("data-original-id"):
            continue
        original = bookmark["id"]
        link = root.find("a", href=f"#{original}")
        link_text = link.get_text().strip() if link is not None else ""
        if link_text:
            new_id = slugify(link_text, registry)
        else:
            new_id = registry.claim(original.removeprefix(EXPORTED_ID_PREFIX))
        id_map[original] = new_id
        bookmark["id"] = new_id
        bookmark["data-original-id"] = original

    for anchor in root.find_all("a", href=True):
        href = anchor["href"]
        if href.startswith("#") and href[1:] in id_map:
            anchor["href"] = f"#{id_map[href[1:]]}"


__all__ = ["SourceOrderFormatter", "process_exported_html"]
