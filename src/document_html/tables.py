from __future__ import annotations

from dataclasses import replace
from typing import Sequence

from .models import TextRun

TABLE_OPEN = "<table border='1' style='border-collapse: collapse;'>\n"
ROW_OPEN = "  <tr>\n"
ROW_CLOSE = "  </tr>\n"
CELL_INDENT = "    "
INDENT_STEP_PX = 40


def render_table(rows: Sequence[Sequence[str]]) -> str:
    """Render a bordered table from already rendered cell markup."""

    return TABLE_OPEN + _render_rows(rows) + "</table>\n"


def render_indented_table(rows: Sequence[Sequence[str]], nesting_level: int = 0) -> str:
    """Render tab-separated list content as an unbordered, indented table."""

    indent_px = max(nesting_level, 0) * INDENT_STEP_PX
    style = f" style='margin-left: {indent_px}px;'" if indent_px > 0 else ""
    return f"<table{style}>\n" + _render_rows(rows) + "</table>\n"


def _render_rows(rows: Sequence[Sequence[str]]) -> str:
    parts: list[str] = []
    for row in rows:
        parts.append(ROW_OPEN)
        for cell in row:
            parts.append(f"{CELL_INDENT}<td>{cell}</td>\n")
        parts.append(ROW_CLOSE)
    return "".join(parts)


def split_tab_cells(runs: Sequence[TextRun]) -> list[tuple[TextRun, ...]]:
    """Split styled runs into cells at tab characters.

    Whitespace at the edges of a cell is trimmed and cells left empty are
    dropped, so runs of tabs used for alignment do not produce blank columns.
    """

    cells: list[list[TextRun]] = [[]]
    for run in runs:
        pieces = run.text.split("\t")
        for position, piece in enumerate(pieces):
            if position:
                cells.append([])
            if piece:
                cells[-1].append(replace(run, text=piece))
    trimmed: list[tuple[TextRun, ...]] = []
    for cell in cells:
        runs_in_cell = _trim_cell(cell)
        if runs_in_cell:
            trimmed.append(runs_in_cell)
    return trimmed


def _trim_cell(cell: list[TextRun]) -> tuple[TextRun, ...]:
    runs = list(cell)
    while runs and not runs[0].text.strip():
        runs.pop(0)
    while runs and not runs[-1].text.strip():
        runs.pop()
    if not runs:
        return ()
    runs[0] = replace(runs[0], text=runs[0].text.lstrip())
    runs[-1] = replace(runs[-1], text=runs[-1].text.rstrip())
    return tuple(runs)


__all__ = ["render_indented_table", "render_table", "split_tab_cells"]
