"""Domain models for document rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Iterable, Mapping, Union

from .logging import BatchSummary


@dataclass(frozen=True, slots=True)
class ExternalUrl:
    uri: str


@dataclass(frozen=True, slots=True)
class DocumentLink:
    """Link to another authored document, identified from its URL."""

    document_id: str
    url: str


@dataclass(frozen=True, slots=True)
class HeadingAnchor:
    heading_id: str


@dataclass(frozen=True, slots=True)
class BookmarkAnchor:
    bookmark_id: str


LinkTarget = Union[ExternalUrl, DocumentLink, HeadingAnchor, BookmarkAnchor]


@dataclass(frozen=True, slots=True)
class TextStyle:
    bold: bool = False
    italic: bool = False
    underline: bool = False
    link: LinkTarget | None = None


@dataclass(frozen=True, slots=True)
class TextRun:
    text: str
    style: TextStyle = field(default_factory=TextStyle)


@dataclass(frozen=True, slots=True)
class ListMembership:
    list_id: str
    nesting_level: int = 0

    @property
    def key(self) -> tuple[str, int]:
        return (self.list_id, self.nesting_level)


class GlyphKind(str, Enum):
    BULLET = "bullet"
    ORDERED = "ordered"


@dataclass(frozen=True, slots=True)
class ListDefinition:
    kind: GlyphKind = GlyphKind.BULLET
    start_number: int | None = None
    glyph_type: str | None = None

    @property
    def ordered(self) -> bool:
        return self.kind is GlyphKind.ORDERED


@dataclass(frozen=True, slots=True)
class Paragraph:
    runs: tuple[TextRun, ...] = ()
    heading_level: int | None = None
    list_membership: ListMembership | None = None
    heading_id: str | None = None
    bookmark_ids: tuple[str, ...] = ()

    @property
    def plain_text(self) -> str:
        return "".join(run.text for run in self.runs)


@dataclass(frozen=True, slots=True)
class TableCell:
    blocks: tuple["Block", ...] = ()


@dataclass(frozen=True, slots=True)
class TableRow:
    cells: tuple[TableCell, ...] = ()


@dataclass(frozen=True, slots=True)
class Table:
    rows: tuple[TableRow, ...] = ()


Block = Union[Paragraph, Table]


@dataclass(frozen=True, slots=True)
class Document:
    blocks: tuple[Block, ...] = ()
    lists: Mapping[tuple[str, int], ListDefinition] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class KnownDocument:
    """A document the site publishes, addressable by its authoring id."""

    name: str
    document_id: str
    route: str


KnownDocumentRegistry = Mapping[str, KnownDocument]


def build_registry(documents: Iterable[KnownDocument]) -> KnownDocumentRegistry:
    """Index documents by id into a read-only mapping."""

    return MappingProxyType({document.document_id: document for document in documents})


EMPTY_REGISTRY: KnownDocumentRegistry = MappingProxyType({})


@dataclass(slots=True)
class RenderResult:
    html: str
    warnings: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ConversionResult:
    """Result metadata for an individual conversion."""

    run_id: str
    output_path: Path
    source_type: str
    warnings: list[str]
    summary: str


@dataclass(slots=True)
class BatchConversionResult:
    """Aggregate results for a batch conversion request."""

    runs: list[ConversionResult]
    summary: BatchSummary


__all__ = [
    "Block",
    "BookmarkAnchor",
    "BatchConversionResult",
    "ConversionResult",
    "Document",
    "DocumentLink",
    "EMPTY_REGISTRY",
    "ExternalUrl",
    "GlyphKind",
    "HeadingAnchor",
    "KnownDocument",
    "KnownDocumentRegistry",
    "LinkTarget",
    "ListDefinition",
    "ListMembership",
    "Paragraph",
    "RenderResult",
    "Table",
    "TableCell",
    "TableRow",
    "TextRun",
    "TextStyle",
    "build_registry",
]
