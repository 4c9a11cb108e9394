from __future__ import annotations

from document_html.inline import InlineContext
from document_html.links import UNKNOWN_DOCUMENT_LINK, UNRESOLVED_HEADING_LINK
from document_html.models import (
    BookmarkAnchor,
    Document,
    DocumentLink,
    ExternalUrl,
    GlyphKind,
    HeadingAnchor,
    KnownDocument,
    ListDefinition,
    ListMembership,
    Paragraph,
    Table,
    TableCell,
    TableRow,
    TextRun,
    TextStyle,
    build_registry,
)
from document_html.renderer import DocumentRenderer, convert

KNOWN = build_registry(
    [
        KnownDocument(name="bylaws", document_id="bylaws-doc", route="/bylaws"),
        KnownDocument(name="tournament-rules", document_id="rules-doc", route="/tournaments/rules"),
    ]
)
DECIMAL = ListDefinition(kind=GlyphKind.ORDERED, glyph_type="DECIMAL")


def para(text: str, **kwargs) -> Paragraph:
    return Paragraph(runs=(TextRun(text),), **kwargs)


def link(text: str, target) -> Paragraph:
    return Paragraph(runs=(TextRun(text, TextStyle(link=target)),))


def item(text: str, list_id: str, level: int = 0) -> Paragraph:
    return para(text, list_membership=ListMembership(list_id, level))


def render(*blocks, lists=None) -> str:
    return convert(Document(blocks=blocks, lists=lists or {}), KNOWN)


def test_empty_document_renders_nothing() -> None:
    result = DocumentRenderer().render(Document())
    assert result.html == ""
    assert result.warnings == []


def test_plain_paragraph() -> None:
    assert render(para("Hello world")) == "<p>Hello world</p>\n"


def test_heading_gets_slug_id() -> None:
    assert render(para("Tournament Rules", heading_level=2)) == (
        "<h2 id='tournament-rules'>Tournament Rules</h2>\n"
    )


def test_heading_with_typography() -> None:
    assert render(para("Player’s Guide", heading_level=2)) == (
        "<h2 id='players-guide'>Player&#8217;s Guide</h2>\n"
    )


def test_duplicate_headings_get_unique_ids() -> None:
    html = render(para("Rules", heading_level=1), para("Rules", heading_level=2))
    assert html == "<h1 id='rules'>Rules</h1>\n<h2 id='rules-1'>Rules</h2>\n"


def test_inline_formatting_nesting_order() -> None:
    style = TextStyle(bold=True, italic=True, underline=True)
    html = render(Paragraph(runs=(TextRun("Hi", style),)))
    assert html == "<p><u><em><strong>Hi</strong></em></u></p>\n"


def test_adjacent_runs_are_not_merged() -> None:
    bold = TextStyle(bold=True)
    html = render(Paragraph(runs=(TextRun("This year", bold), TextRun("’s best", bold))))
    assert html == "<p><strong>This year</strong><strong>&#8217;s best</strong></p>\n"


def test_external_link() -> None:
    html = render(link("NEBA", ExternalUrl("https://example.com/")))
    assert html == (
        "<p><a href='https://example.com/' target='_blank' rel='noopener noreferrer'>NEBA</a></p>\n"
    )


def test_external_link_query_string_is_escaped() -> None:
    html = render(link("Scores", ExternalUrl("https://example.com/scores?year=2024&league=a")))
    assert html == (
        "<p><a href='https://example.com/scores?year=2024&amp;league=a' "
        "target='_blank' rel='noopener noreferrer'>Scores</a></p>\n"
    )


def test_link_text_normalized_but_url_kept() -> None:
    html = render(link("Player’s Guide", ExternalUrl("https://example.com/guide")))
    assert html == (
        "<p><a href='https://example.com/guide' target='_blank' rel='noopener noreferrer'>"
        "Player&#8217;s Guide</a></p>\n"
    )


def test_link_wraps_inline_formatting() -> None:
    style = TextStyle(bold=True, link=ExternalUrl("https://example.com/"))
    html = render(Paragraph(runs=(TextRun("Go", style),)))
    assert "<a href='https://example.com/' target='_blank' rel='noopener noreferrer'><strong>Go</strong></a>" in html


def test_cross_document_link_maps_to_route() -> None:
    url = "https://docs.google.com/document/d/bylaws-doc/edit"
    html = render(link("Bylaws", DocumentLink(document_id="bylaws-doc", url=url)))
    assert html == "<p><a href='/bylaws' data-modal='true'>Bylaws</a></p>\n"


def test_unknown_document_link_is_kept_and_reported() -> None:
    url = "https://docs.google.com/document/d/other/edit"
    document = Document(blocks=(link("Other", DocumentLink(document_id="other", url=url)),))
    result = DocumentRenderer(KNOWN).render(document)
    assert f"<a href='{url}' target='_blank' rel='noopener noreferrer'>Other</a>" in result.html
    assert result.warnings == [UNKNOWN_DOCUMENT_LINK]


def test_bookmark_link_without_target_uses_raw_id() -> None:
    html = render(link("Jump", BookmarkAnchor("bookmark-1")))
    assert html == "<p><a href='#bookmark-1'>Jump</a></p>\n"


def test_heading_link_matches_heading_id() -> None:
    html = render(
        para("Section 1", heading_level=3, heading_id="h.abc"),
        link("Section 1", HeadingAnchor("h.abc")),
    )
    assert "<h3 id='section-1'>Section 1</h3>\n" in html
    assert "<p><a href='#section-1'>Section 1</a></p>\n" in html


def test_heading_link_resolves_forward_reference() -> None:
    html = render(
        link("See below", HeadingAnchor("h.later")),
        para("Scoring", heading_level=2, heading_id="h.later"),
    )
    assert html == "<p><a href='#scoring'>See below</a></p>\n<h2 id='scoring'>Scoring</h2>\n"


def test_partial_heading_text_link() -> None:
    html = render(
        para("Section 10.3 Annual Meeting", heading_level=3),
        link("Annual Meeting", HeadingAnchor("h.unknown")),
    )
    assert "<h3 id='section-10.3-annual-meeting'>Section 10.3 Annual Meeting</h3>\n" in html
    assert "<p><a href='#section-10.3-annual-meeting'>Annual Meeting</a></p>\n" in html


def test_partial_article_heading_link() -> None:
    html = render(
        para("ARTICLE VII - HALL OF FAME COMMITTEE", heading_level=2),
        link("Hall of Fame Committee", HeadingAnchor("h.unknown")),
    )
    assert "<a href='#article-vii-hall-of-fame-committee'>Hall of Fame Committee</a>" in html


def test_unresolved_heading_link_warns() -> None:
    result = DocumentRenderer().render(Document(blocks=(link("Nowhere", HeadingAnchor("h.gone")),)))
    assert result.html == "<p><a href='#h.gone'>Nowhere</a></p>\n"
    assert result.warnings == [UNRESOLVED_HEADING_LINK]


def test_bookmark_takes_slug_of_link_text() -> None:
    html = render(
        Paragraph(runs=(TextRun("Strikes count double."),), bookmark_ids=("id.scoring",)),
        link("Scoring Rules", BookmarkAnchor("id.scoring")),
    )
    assert html == (
        "<p><a id='scoring-rules' data-original-id='id.scoring'></a>Strikes count double.</p>\n"
        "<p><a href='#scoring-rules'>Scoring Rules</a></p>\n"
    )


def test_bookmark_without_link_keeps_raw_id() -> None:
    html = render(Paragraph(runs=(TextRun("Text"),), bookmark_ids=("id.orphan",)))
    assert html == "<p><a id='id.orphan' data-original-id='id.orphan'></a>Text</p>\n"


def test_table_block() -> None:
    table = Table(
        rows=(
            TableRow(cells=(TableCell(blocks=(para("A1"),)), TableCell(blocks=(para("B1"),)))),
            TableRow(cells=(TableCell(blocks=(para("A2"),)), TableCell(blocks=(para("B2"),)))),
        )
    )
    assert render(table) == (
        "<table border='1' style='border-collapse: collapse;'>\n"
        "  <tr>\n"
        "    <td>A1</td>\n"
        "    <td>B1</td>\n"
        "  </tr>\n"
        "  <tr>\n"
        "    <td>A2</td>\n"
        "    <td>B2</td>\n"
        "  </tr>\n"
        "</table>\n"
    )


def test_table_cell_paragraphs_joined_with_line_breaks() -> None:
    cell = TableCell(blocks=(para("Line one"), para("Line & two")))
    html = render(Table(rows=(TableRow(cells=(cell,)),)))
    assert "    <td>Line one<br>Line &amp; two</td>\n" in html


def test_unordered_list() -> None:
    html = render(item("One", "bullets"), item("Two", "bullets"))
    assert html == "<ul>\n  <li>One</li>\n  <li>Two</li>\n</ul>\n"


def test_ordered_list_with_start_number() -> None:
    definition = ListDefinition(kind=GlyphKind.ORDERED, start_number=3, glyph_type="DECIMAL")
    html = render(item("Third", "steps"), item("Fourth", "steps"), lists={("steps", 0): definition})
    assert html == "<ol type='1' start='3'>\n  <li>Third</li>\n  <li>Fourth</li>\n</ol>\n"


def test_list_counter_resets_after_non_list_block() -> None:
    html = render(
        item("One", "steps"),
        para("Break"),
        item("One-again", "steps"),
        lists={("steps", 0): DECIMAL},
    )
    assert html == (
        "<ol type='1'>\n  <li>One</li>\n</ol>\n"
        "<p>Break</p>\n"
        "<ol type='1'>\n  <li>One-again</li>\n</ol>\n"
    )
    assert len(html.split("</ol>\n")) == 3


def test_table_interrupts_list() -> None:
    table = Table(rows=(TableRow(cells=(TableCell(blocks=(para("X"),)),)),))
    html = render(item("A", "bullets"), table, item("B", "bullets"))
    assert html.count("<ul>\n") == 2
    assert html.index("</ul>\n") < html.index("<table")


def test_heading_inside_list_closes_list() -> None:
    heading = para("Rules", heading_level=2, list_membership=ListMembership("bullets"))
    html = render(item("A", "bullets"), heading)
    assert html == "<ul>\n  <li>A</li>\n</ul>\n<h2 id='rules'>Rules</h2>\n"


def test_nested_unordered_list() -> None:
    html = render(
        item("Parent", "outline", 0),
        item("Child", "outline", 1),
        item("Sibling", "outline", 0),
    )
    assert html == (
        "<ul>\n"
        "  <li>Parent\n"
        "  <ul>\n"
        "    <li>Child</li>\n"
        "  </ul>\n"
        "  </li>\n"
        "  <li>Sibling</li>\n"
        "</ul>\n"
    )


def test_list_items_are_normalized() -> None:
    html = render(item("First item’s content", "bullets"), item("Second item — with dash", "bullets"))
    assert "  <li>First item&#8217;s content</li>\n" in html
    assert "  <li>Second item &#8212; with dash</li>\n" in html


def test_tab_separated_list_items_become_indented_table() -> None:
    html = render(
        item("Col1\tCol2", "list-tabs", 1),
        item("A\tB", "list-tabs", 1),
        para("After"),
        lists={("list-tabs", 1): ListDefinition()},
    )
    assert html == (
        "<table style='margin-left: 40px;'>\n"
        "  <tr>\n"
        "    <td>Col1</td>\n"
        "    <td>Col2</td>\n"
        "  </tr>\n"
        "  <tr>\n"
        "    <td>A</td>\n"
        "    <td>B</td>\n"
        "  </tr>\n"
        "</table>\n"
        "<p>After</p>\n"
    )
    assert "<li>" not in html
    assert "\t" not in html


def test_numbering_after_tab_rows_counts_only_the_rows() -> None:
    html = render(
        item("Intro", "steps"),
        item("Name\tScore", "steps"),
        item("Next", "steps"),
        lists={("steps", 0): DECIMAL},
    )
    assert html.startswith("<ol type='1'>\n  <li>Intro</li>\n</ol>\n<table>\n")
    assert html.endswith("<ol type='1' start='2'>\n  <li>Next</li>\n</ol>\n")


def test_numbering_restarts_when_paragraph_follows_tab_rows() -> None:
    html = render(
        item("A\tB", "steps"),
        item("C\tD", "steps"),
        para("Break"),
        item("Fresh", "steps"),
        lists={("steps", 0): DECIMAL},
    )
    assert html.endswith("</table>\n<p>Break</p>\n<ol type='1'>\n  <li>Fresh</li>\n</ol>\n")


def test_numbering_restarts_when_table_follows_tab_rows() -> None:
    table = Table(rows=(TableRow(cells=(TableCell(blocks=(para("X"),)),)),))
    html = render(
        item("A\tB", "steps"),
        table,
        item("Fresh", "steps"),
        lists={("steps", 0): DECIMAL},
    )
    assert html.endswith("</table>\n<ol type='1'>\n  <li>Fresh</li>\n</ol>\n")
    assert "start=" not in html


def test_inline_context_defaults_to_no_known_documents() -> None:
    context = InlineContext()
    assert context.known_documents == {}
    assert context.warnings == []


def test_renderer_is_reusable_across_documents() -> None:
    renderer = DocumentRenderer(KNOWN)
    document = Document(blocks=(para("Rules", heading_level=1),))
    assert renderer.convert(document) == renderer.convert(document) == "<h1 id='rules'>Rules</h1>\n"
