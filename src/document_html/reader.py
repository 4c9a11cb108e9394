"""Read the authoring service's exported JSON into a :class:`Document`."""

from __future__ import annotations

import json
from typing import Any, Mapping

from .links import classify_url
from .models import (
    Block,
    BookmarkAnchor,
    Document,
    GlyphKind,
    HeadingAnchor,
    LinkTarget,
    ListDefinition,
    ListMembership,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    TextRun,
    TextStyle,
)

HEADING_STYLES = {f"HEADING_{level}": level for level in range(1, 7)}
UNSPECIFIED_GLYPH = "GLYPH_TYPE_UNSPECIFIED"


class DocumentParseError(ValueError):
    """Raised when exported document JSON does not have the expected shape."""


def parse_document(payload: str | bytes) -> Document:
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise DocumentParseError(f"Document is not valid JSON: {exc.msg}") from exc
    return document_from_dict(data)


def document_from_dict(data: Any) -> Document:
    if not isinstance(data, Mapping):
        raise DocumentParseError("Document must be a JSON object")
    body = _object(data.get("body"), "Document body")
    content = _array(body.get("content"), "Document body content")
    return Document(blocks=_read_blocks(content), lists=_read_lists(data.get("lists")))


def _object(value: Any, what: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise DocumentParseError(f"{what} must be an object, got {type(value).__name__}")
    return value


def _array(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise DocumentParseError(f"{what} must be a list, got {type(value).__name__}")
    return value


def _integer(value: Any, what: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise DocumentParseError(f"{what} must be an integer, got {value!r}") from exc


def _read_blocks(elements: list[Any]) -> tuple[Block, ...]:
    blocks: list[Block] = []
    for element in elements:
        if not isinstance(element, Mapping):
            raise DocumentParseError(f"Unsupported structural element: {element!r}")
        if "paragraph" in element:
            blocks.append(_read_paragraph(element["paragraph"]))
        elif "table" in element:
            blocks.append(_read_table(element["table"]))
        # section breaks and tables of contents carry no renderable text
    return tuple(blocks)


def _read_paragraph(data: Any) -> Paragraph:
    if not isinstance(data, Mapping):
        raise DocumentParseError("Paragraph must be an object")
    style = _object(data.get("paragraphStyle"), "Paragraph style")
    runs = _read_runs(_array(data.get("elements"), "Paragraph elements"))
    bullet = _object(data.get("bullet"), "Paragraph bullet")
    membership = None
    if bullet.get("listId"):
        membership = ListMembership(
            list_id=str(bullet["listId"]),
            nesting_level=_integer(bullet.get("nestingLevel") or 0, "Bullet nesting level"),
        )
    heading_id = style.get("headingId")
    return Paragraph(
        runs=runs,
        heading_level=HEADING_STYLES.get(str(style.get("namedStyleType") or "")),
        list_membership=membership,
        heading_id=str(heading_id) if heading_id is not None else None,
    )


def _read_runs(elements: list[Any]) -> tuple[TextRun, ...]:
    runs: list[TextRun] = []
    for element in elements:
        if not isinstance(element, Mapping):
            raise DocumentParseError(f"Unsupported paragraph element: {element!r}")
        text_run = _object(element.get("textRun"), "Text run")
        if text_run.get("content") is None:
            continue
        style = _read_style(_object(text_run.get("textStyle"), "Text style"))
        runs.append(TextRun(text=str(text_run["content"]), style=style))
    if runs and runs[-1].text.endswith("\n"):
        last = runs.pop()
        text = last.text[:-1]
        if text:
            runs.append(TextRun(text=text, style=last.style))
    return tuple(runs)


def _read_style(data: Mapping[str, Any]) -> TextStyle:
    return TextStyle(
        bold=bool(data.get("bold")),
        italic=bool(data.get("italic")),
        underline=bool(data.get("underline")),
        link=_read_link(_object(data.get("link"), "Link")),
    )


def _read_link(data: Mapping[str, Any]) -> LinkTarget | None:
    heading_id = data.get("headingId") or _object(data.get("heading"), "Heading link").get("id")
    if heading_id:
        return HeadingAnchor(str(heading_id))
    bookmark_id = data.get("bookmarkId") or _object(data.get("bookmark"), "Bookmark link").get("id")
    if bookmark_id:
        return BookmarkAnchor(str(bookmark_id))
    url = data.get("url")
    if url:
        return classify_url(str(url))
    return None


def _read_table(data: Any) -> Table:
    if not isinstance(data, Mapping):
        raise DocumentParseError("Table must be an object")
    rows = []
    for row in _array(data.get("tableRows"), "Table rows"):
        cells = _array(_object(row, "Table row").get("tableCells"), "Table cells")
        rows.append(TableRow(cells=tuple(_read_cell(cell) for cell in cells)))
    return Table(rows=tuple(rows))


def _read_cell(data: Any) -> TableCell:
    content = _array(_object(data, "Table cell").get("content"), "Table cell content")
    return TableCell(blocks=_read_blocks(content))


def _read_lists(data: Any) -> dict[tuple[str, int], ListDefinition]:
    definitions: dict[tuple[str, int], ListDefinition] = {}
    for list_id, entry in _object(data, "Document lists").items():
        properties = _object(_object(entry, f"List {list_id}").get("listProperties"), "List properties")
        levels = _array(properties.get("nestingLevels"), "List nesting levels")
        for level, props in enumerate(levels):
            definitions[(list_id, level)] = _read_level(_object(props, "List nesting level"))
    return definitions


def _read_level(props: Mapping[str, Any]) -> ListDefinition:
    glyph_type = props.get("glyphType")
    if glyph_type is not None and not isinstance(glyph_type, str):
        raise DocumentParseError(f"List glyph type must be a string, got {glyph_type!r}")
    ordered = (
        glyph_type is not None
        and glyph_type != UNSPECIFIED_GLYPH
        and "BULLET" not in glyph_type.upper()
    )
    if not ordered:
        return ListDefinition()
    start = props.get("startNumber")
    return ListDefinition(
        kind=GlyphKind.ORDERED,
        start_number=_integer(start, "List start number") if start is not None else None,
        glyph_type=glyph_type,
    )


__all__ = ["DocumentParseError", "document_from_dict", "parse_document"]
