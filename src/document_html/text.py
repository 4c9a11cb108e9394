from __future__ import annotations

TYPOGRAPHIC_REFERENCES: dict[str, str] = {
    "\u2018": "&#8216;",  # left single quotation mark
    "\u2019": "&#8217;",  # right single quotation mark
    "\u201c": "&#8220;",  # left double quotation mark
    "\u201d": "&#8221;",  # right double quotation mark
    "\u2013": "&#8211;",  # en dash
    "\u2014": "&#8212;",  # em dash
    "\u2026": "&#8230;",  # horizontal ellipsis
}

HTML_ESCAPES: dict[str, str] = {
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
}

# Single-pass translation: references inserted for typography are never
# rescanned, so their own "&" is not escaped a second time.
_TEXT_TABLE = str.maketrans({**TYPOGRAPHIC_REFERENCES, **HTML_ESCAPES})
_ATTRIBUTE_TABLE = str.maketrans({**HTML_ESCAPES, "'": "&#39;"})


def normalize_text(text: str) -> str:
    """Return *text* with smart typography as numeric references and HTML escaped."""

    if not text:
        return text
    return text.translate(_TEXT_TABLE)


def escape_attribute(value: str) -> str:
    return value.translate(_ATTRIBUTE_TABLE)


__all__ = ["HTML_ESCAPES", "TYPOGRAPHIC_REFERENCES", "escape_attribute", "normalize_text"]
