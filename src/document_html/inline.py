from __future__ import annotations

from dataclasses import dataclass, field
from itertools import groupby
from typing import Sequence

from .links import resolve_link
from .models import EMPTY_REGISTRY, KnownDocumentRegistry, TextRun
from .slugs import SlugRegistry
from .text import escape_attribute, normalize_text


@dataclass(slots=True)
class InlineContext:
    registry: SlugRegistry = field(default_factory=SlugRegistry)
    known_documents: KnownDocumentRegistry = field(default_factory=lambda: EMPTY_REGISTRY)
    warnings: list[str] = field(default_factory=list)


def apply_text_formatting(html: str, run: TextRun) -> str:
    style = run.style
    if style.bold:
        html = f"<strong>{html}</strong>"
    if style.italic:
        html = f"<em>{html}</em>"
    if style.underline:
        html = f"<u>{html}</u>"
    return html


def render_run(run: TextRun, context: InlineContext, link_text: str | None = None) -> str:
    """Render one text run; *link_text* is the full text of the link it belongs to."""

    html = apply_text_formatting(normalize_text(run.text), run)
    link = run.style.link
    if link is None:
        return html
    resolved = resolve_link(
        link,
        context.registry,
        context.known_documents,
        link_text if link_text is not None else run.text,
    )
    if resolved.warning:
        context.warnings.append(resolved.warning)
    attributes = "".join(
        f" {name}='{escape_attribute(value)}'" for name, value in resolved.attributes.items()
    )
    return f"<a href='{escape_attribute(resolved.href)}'{attributes}>{html}</a>"


def render_runs(runs: Sequence[TextRun], context: InlineContext) -> str:
    parts: list[str] = []
    for link, group in groupby(runs, key=lambda run: run.style.link):
        grouped = list(group)
        link_text = "".join(run.text for run in grouped) if link is not None else None
        parts.extend(render_run(run, context, link_text) for run in grouped)
    return "".join(parts)


def render_bookmarks(bookmark_ids: Sequence[str], registry: SlugRegistry) -> str:
    parts: list[str] = []
    for bookmark_id in bookmark_ids:
        assigned = registry.bookmarks.get(bookmark_id, bookmark_id)
        parts.append(
            f"<a id='{escape_attribute(assigned)}' "
            f"data-original-id='{escape_attribute(bookmark_id)}'></a>"
        )
    return "".join(parts)


__all__ = ["InlineContext", "apply_text_formatting", "render_bookmarks", "render_run", "render_runs"]
