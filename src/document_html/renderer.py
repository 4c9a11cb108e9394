"""Render a :class:`~document_html.models.Document` to publish-ready HTML.

Rendering happens in two passes over the blocks. The first pass hands out
heading slugs and bookmark ids in document order, so links can point at
headings that appear further down. The second pass writes the markup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import groupby
from typing import Iterator, assert_never

from .inline import InlineContext, render_bookmarks, render_runs
from .lists import ListStateMachine
from .models import (
    EMPTY_REGISTRY,
    Block,
    BookmarkAnchor,
    Document,
    KnownDocumentRegistry,
    Paragraph,
    RenderResult,
    Table,
    TableCell,
)
from .slugs import SlugRegistry
from .tables import render_indented_table, render_table, split_tab_cells

CELL_PARAGRAPH_SEPARATOR = "<br>"


@dataclass(slots=True)
class _RenderState:
    context: InlineContext
    lists: ListStateMachine
    heading_slugs: dict[int, str] = field(default_factory=dict)
    parts: list[str] = field(default_factory=list)


class DocumentRenderer:
    def __init__(self, known_documents: KnownDocumentRegistry | None = None) -> None:
        self._known_documents = known_documents if known_documents is not None else EMPTY_REGISTRY

    def convert(self, document: Document) -> str:
        return self.render(document).html

    def render(self, document: Document) -> RenderResult:
        if not document.blocks:
            return RenderResult(html="")
        state = _RenderState(
            context=InlineContext(registry=SlugRegistry(), known_documents=self._known_documents),
            lists=ListStateMachine(document.lists),
        )
        self._register_anchors(document, state)

        blocks = document.blocks
        index = 0
        while index < len(blocks):
            block = blocks[index]
            if isinstance(block, Table):
                state.parts.append(state.lists.interrupt())
                state.parts.append(self._render_table(block, state))
                index += 1
            elif isinstance(block, Paragraph):
                index = self._render_paragraph_block(block, blocks, index, state)
            else:
                assert_never(block)
        state.parts.append(state.lists.interrupt())
        return RenderResult(html="".join(state.parts), warnings=list(state.context.warnings))

    def _register_anchors(self, document: Document, state: _RenderState) -> None:
        registry = state.context.registry
        link_texts = _bookmark_link_texts(document.blocks)
        for index, block in enumerate(document.blocks):
            for paragraph in _paragraphs(block):
                if block is paragraph and paragraph.heading_level is not None:
                    state.heading_slugs[index] = registry.register_heading(
                        paragraph.plain_text, paragraph.heading_id
                    )
                for bookmark_id in paragraph.bookmark_ids:
                    registry.register_bookmark(bookmark_id, link_texts.get(bookmark_id))

    def _render_paragraph_block(
        self, paragraph: Paragraph, blocks: tuple[Block, ...], index: int, state: _RenderState
    ) -> int:
        membership = paragraph.list_membership
        if paragraph.heading_level is not None or membership is None:
            state.parts.append(state.lists.interrupt())
            state.parts.append(self._render_paragraph(paragraph, index, state))
            return index + 1

        if "\t" not in paragraph.plain_text:
            content = self._render_content(paragraph, state)
            state.parts.append(state.lists.add_item(membership, content))
            return index + 1

        rows: list[Paragraph] = [paragraph]
        lookahead = index + 1
        while lookahead < len(blocks):
            candidate = blocks[lookahead]
            if not (
                isinstance(candidate, Paragraph)
                and candidate.heading_level is None
                and candidate.list_membership == membership
                and "\t" in candidate.plain_text
            ):
                break
            rows.append(candidate)
            lookahead += 1
        state.parts.append(state.lists.skip_items(membership, len(rows)))
        rendered_rows = [
            [render_runs(cell, state.context) for cell in split_tab_cells(row.runs)]
            for row in rows
        ]
        state.parts.append(render_indented_table(rendered_rows, membership.nesting_level))
        return lookahead

    def _render_paragraph(self, paragraph: Paragraph, index: int, state: _RenderState) -> str:
        content = self._render_content(paragraph, state)
        if paragraph.heading_level is None:
            return f"<p>{content}</p>\n"
        level = min(max(paragraph.heading_level, 1), 6)
        slug = state.heading_slugs[index]
        return f"<h{level} id='{slug}'>{content}</h{level}>\n"

    def _render_content(self, paragraph: Paragraph, state: _RenderState) -> str:
        bookmarks = render_bookmarks(paragraph.bookmark_ids, state.context.registry)
        return bookmarks + render_runs(paragraph.runs, state.context)

    def _render_table(self, table: Table, state: _RenderState) -> str:
        rows = [[self._render_cell(cell, state) for cell in row.cells] for row in table.rows]
        return render_table(rows)

    def _render_cell(self, cell: TableCell, state: _RenderState) -> str:
        parts: list[str] = []
        for block in cell.blocks:
            if isinstance(block, Paragraph):
                parts.append(self._render_content(block, state))
            elif isinstance(block, Table):
                parts.append(self._render_table(block, state).rstrip("\n"))
            else:
                assert_never(block)
        return CELL_PARAGRAPH_SEPARATOR.join(parts)


def _paragraphs(block: Block) -> Iterator[Paragraph]:
    if isinstance(block, Paragraph):
        yield block
    elif isinstance(block, Table):
        for row in block.rows:
            for cell in row.cells:
                for nested in cell.blocks:
                    yield from _paragraphs(nested)
    else:
        assert_never(block)


def _bookmark_link_texts(blocks: tuple[Block, ...]) -> dict[str, str]:
    """Map each bookmark id to the text of the first link pointing at it."""

    texts: dict[str, str] = {}
    for block in blocks:
        for paragraph in _paragraphs(block):
            for link, group in groupby(paragraph.runs, key=lambda run: run.style.link):
                if isinstance(link, BookmarkAnchor) and link.bookmark_id not in texts:
                    text = "".join(run.text for run in group).strip()
                    if text:
                        texts[link.bookmark_id] = text
    return texts


def convert(document: Document, known_documents: KnownDocumentRegistry | None = None) -> str:
    """Convert *document* to HTML in one call."""

    return DocumentRenderer(known_documents).convert(document)


__all__ = ["DocumentRenderer", "convert"]
