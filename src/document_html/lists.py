"""Open/close bookkeeping for bulleted and numbered lists.

A list item is written without its closing tag; the next event decides whether
the item is closed or receives a nested list first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .models import ListDefinition, ListMembership

INDENT = "  "

GLYPH_TYPE_ATTRIBUTES: dict[str, str] = {
    "DECIMAL": "1",
    "ZERO_DECIMAL": "1",
    "ALPHA": "a",
    "UPPER_ALPHA": "A",
    "ROMAN": "i",
    "UPPER_ROMAN": "I",
}


@dataclass(slots=True)
class _OpenList:
    list_id: str
    level: int
    ordered: bool
    item_open: bool = False
    item_has_children: bool = False

    @property
    def key(self) -> tuple[str, int]:
        return (self.list_id, self.level)

    @property
    def tag(self) -> str:
        return "ol" if self.ordered else "ul"


class ListStateMachine:
    def __init__(self, definitions: Mapping[tuple[str, int], ListDefinition]) -> None:
        self._definitions = definitions
        self._stack: list[_OpenList] = []
        # counters only exist for frames on the stack
        self._counters: dict[tuple[str, int], int] = {}
        # items already counted by a pseudo-table, claimed by the next item of that key
        self._pending: tuple[tuple[str, int], int] | None = None

    @property
    def idle(self) -> bool:
        return not self._stack

    @property
    def depth(self) -> int:
        return len(self._stack)

    def counter(self, membership: ListMembership) -> int | None:
        if membership.key in self._counters:
            return self._counters[membership.key]
        if self._pending is not None and self._pending[0] == membership.key:
            return self._pending[1]
        return None

    def definition(self, membership: ListMembership) -> ListDefinition:
        return self._definitions.get(membership.key, ListDefinition())

    def add_item(self, membership: ListMembership, content: str) -> str:
        """Emit markup for one list item and return it."""

        pending, self._pending = self._pending, None
        if pending is not None and pending[0] == membership.key:
            self._counters[membership.key] = pending[1]

        parts: list[str] = []
        self._unwind_to(membership, parts)
        top = self._stack[-1] if self._stack else None
        if top is not None and top.key == membership.key:
            parts.append(self._close_item(top, len(self._stack) - 1))
            self._advance(membership)
        else:
            if top is not None and not top.item_has_children:
                parts.append("\n")
                top.item_has_children = True
            number = self._advance(membership)
            parts.append(self._open_list(membership, number))
        current = self._stack[-1]
        current.item_open = True
        current.item_has_children = False
        parts.append(f"{INDENT * len(self._stack)}<li>{content}")
        return "".join(parts)

    def interrupt(self) -> str:
        """Close every open list; their numbering starts over next time."""

        parts: list[str] = []
        while self._stack:
            parts.append(self._pop())
        self._pending = None
        return "".join(parts)

    def skip_items(self, membership: ListMembership, count: int) -> str:
        """Close all lists and count *count* items rendered outside of them.

        The count only carries over when the very next list item belongs to
        the same list and level. Any other block or list drops it.
        """

        closing = self.interrupt()
        definition = self.definition(membership)
        start = definition.start_number if definition.start_number is not None else 1
        self._pending = (membership.key, start - 1 + count)
        return closing

    def _unwind_to(self, membership: ListMembership, parts: list[str]) -> None:
        while self._stack:
            top = self._stack[-1]
            if top.list_id == membership.list_id and top.level <= membership.nesting_level:
                return
            parts.append(self._pop())

    def _pop(self) -> str:
        index = len(self._stack) - 1
        frame = self._stack.pop()
        self._counters.pop(frame.key, None)
        return self._close_item(frame, index) + f"{INDENT * index}</{frame.tag}>\n"

    def _close_item(self, frame: _OpenList, index: int) -> str:
        if not frame.item_open:
            return ""
        frame.item_open = False
        if frame.item_has_children:
            return f"{INDENT * (index + 1)}</li>\n"
        return "</li>\n"

    def _advance(self, membership: ListMembership) -> int:
        definition = self.definition(membership)
        start = definition.start_number if definition.start_number is not None else 1
        number = self._counters.get(membership.key, start - 1) + 1
        self._counters[membership.key] = number
        return number

    def _open_list(self, membership: ListMembership, number: int) -> str:
        definition = self.definition(membership)
        indent = INDENT * len(self._stack)
        self._stack.append(
            _OpenList(
                list_id=membership.list_id,
                level=membership.nesting_level,
                ordered=definition.ordered,
            )
        )
        if not definition.ordered:
            return f"{indent}<ul>\n"
        type_attr = ""
        glyph = GLYPH_TYPE_ATTRIBUTES.get(definition.glyph_type or "")
        if glyph:
            type_attr = f" type='{glyph}'"
        start_attr = f" start='{number}'" if number != 1 else ""
        return f"{indent}<ol{type_attr}{start_attr}>\n"


__all__ = ["GLYPH_TYPE_ATTRIBUTES", "INDENT", "ListStateMachine"]
