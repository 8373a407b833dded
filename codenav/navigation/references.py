"""Filterable, cursor-navigable list of symbol references.

The list keeps every reference in insertion order and a separate view of
positions into that sequence. Filtering rebuilds the view; it never
re-queries the server or reorders references.
"""

from __future__ import annotations

from typing import Iterable, Iterator

from codenav.navigation.glob import path_matches
from codenav.types.core import SymbolReference


class ReferenceList:
    """References to one symbol, with a glob filter and a cursor.

    ``cursor`` indexes the filtered view, not the full sequence, and stays
    within ``[0, visible_count() - 1]`` (0 when nothing is visible).
    """

    def __init__(self, symbol_name: str) -> None:
        self.symbol_name = symbol_name
        self._references: list[SymbolReference] = []
        self._filtered: list[int] = []
        self.filter_pattern: str | None = None
        self.cursor = 0
        self.scroll_offset = 0

    @classmethod
    def from_references(
        cls, symbol_name: str, references: Iterable[SymbolReference]
    ) -> ReferenceList:
        ref_list = cls(symbol_name)
        for ref in references:
            ref_list.add_reference(ref)
        return ref_list

    def __len__(self) -> int:
        return len(self._references)

    @property
    def references(self) -> tuple[SymbolReference, ...]:
        """Every reference in insertion order, ignoring the filter."""
        return tuple(self._references)

    @property
    def filtered_indices(self) -> tuple[int, ...]:
        return tuple(self._filtered)

    @property
    def is_filtered(self) -> bool:
        return self.filter_pattern is not None

    def add_reference(self, ref: SymbolReference) -> None:
        """Append a reference; it is visible immediately when no filter is active."""
        self._references.append(ref)
        if self.filter_pattern is None:
            self._filtered.append(len(self._references) - 1)

    def apply_filter(self, pattern: str) -> None:
        """Show only references whose file path matches *pattern*.

        A leading ``!`` shows the references that do not match instead.
        """
        self.filter_pattern = pattern
        self._filtered = [
            i for i, ref in enumerate(self._references) if path_matches(ref.file_path, pattern)
        ]
        self._clamp_cursor()

    def clear_filter(self) -> None:
        self.filter_pattern = None
        self._filtered = list(range(len(self._references)))
        self._clamp_cursor()

    def visible_count(self) -> int:
        return len(self._filtered)

    def get_visible(self, visible_index: int) -> SymbolReference | None:
        """Reference at a position in the filtered view, or None if out of range."""
        if visible_index < 0 or visible_index >= len(self._filtered):
            return None
        return self._references[self._filtered[visible_index]]

    def get_current(self) -> SymbolReference | None:
        return self.get_visible(self.cursor)

    def visible(self) -> Iterator[SymbolReference]:
        for index in self._filtered:
            yield self._references[index]

    def move_down(self) -> None:
        if self.cursor + 1 < len(self._filtered):
            self.cursor += 1

    def move_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def scroll_to_cursor(self, height: int) -> int:
        """Adjust ``scroll_offset`` so the cursor row fits a viewport of *height* rows.

        Returns the new offset.
        """
        if height <= 0:
            self.scroll_offset = 0
            return 0
        if self.cursor < self.scroll_offset:
            self.scroll_offset = self.cursor
        elif self.cursor >= self.scroll_offset + height:
            self.scroll_offset = self.cursor - height + 1
        self.scroll_offset = max(0, min(self.scroll_offset, max(0, len(self._filtered) - height)))
        return self.scroll_offset

    def _clamp_cursor(self) -> None:
        if not self._filtered:
            self.cursor = 0
        elif self.cursor >= len(self._filtered):
            self.cursor = len(self._filtered) - 1
        self.scroll_offset = min(self.scroll_offset, self.cursor)
