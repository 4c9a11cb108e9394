"""Human-readable anchor ids for headings and bookmarks.

Slugs are derived from visible text so that links survive re-exports of the
source document, whose own heading and bookmark ids change on every edit.
"""

from __future__ import annotations

import html
import re
import unicodedata
from dataclasses import dataclass, field

FALLBACK_SLUG = "section"

_TAG_RE = re.compile(r"<[^>]+>")
_INVALID_RE = re.compile(r"[^a-z0-9\s.-]")
_WHITESPACE_RE = re.compile(r"\s+")
_HYPHENS_RE = re.compile(r"-+")


@dataclass(slots=True)
class SlugRegistry:
    """Slugs handed out during one conversion run."""

    used: set[str] = field(default_factory=set)
    headings: dict[str, str] = field(default_factory=dict)
    heading_texts: dict[str, str] = field(default_factory=dict)
    bookmarks: dict[str, str] = field(default_factory=dict)

    def claim(self, base: str) -> str:
        candidate = base
        counter = 1
        while candidate in self.used:
            candidate = f"{base}-{counter}"
            counter += 1
        self.used.add(candidate)
        return candidate

    def register_heading(self, text: str, heading_id: str | None = None) -> str:
        slug = slugify(text, self)
        if heading_id:
            self.headings.setdefault(heading_id, slug)
        self.heading_texts.setdefault(_text_key(text), slug)
        return slug

    def register_bookmark(self, bookmark_id: str, link_text: str | None = None) -> str:
        if bookmark_id in self.bookmarks:
            return self.bookmarks[bookmark_id]
        if link_text and link_text.strip():
            assigned = slugify(link_text, self)
        else:
            assigned = self.claim(bookmark_id)
        self.bookmarks[bookmark_id] = assigned
        return assigned

    def heading_for_text(self, text: str) -> str | None:
        """Find a heading slug by its text, accepting a trailing match.

        Authors often link "Annual Meeting" to a heading titled
        "Section 10.3 Annual Meeting".
        """

        key = _text_key(text)
        if not key:
            return None
        if key in self.heading_texts:
            return self.heading_texts[key]
        for heading_text, slug in self.heading_texts.items():
            if heading_text.endswith(" " + key):
                return slug
        return None


def _text_key(text: str) -> str:
    return _WHITESPACE_RE.sub(" ", html.unescape(_TAG_RE.sub("", text))).strip().casefold()


def slugify(text: str, registry: SlugRegistry | None = None) -> str:
    """Turn heading text into a URL-safe id, unique within *registry* if given."""

    plain = html.unescape(_TAG_RE.sub("", text))
    plain = unicodedata.normalize("NFKD", plain).lower()
    plain = _INVALID_RE.sub("", plain)
    plain = _WHITESPACE_RE.sub("-", plain.strip())
    plain = _HYPHENS_RE.sub("-", plain).strip("-")
    base = plain or FALLBACK_SLUG
    if registry is None:
        return base
    return registry.claim(base)


__all__ = ["FALLBACK_SLUG", "SlugRegistry", "slugify"]
