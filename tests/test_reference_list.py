"""
Tests for ReferenceList filtering and cursor behaviour.
"""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from codenav.navigation.references import ReferenceList
from codenav.types import SymbolReference

file_names = st.sampled_from(
    ["src/main.zig", "src/parser.zig", "lib/util.zig", "build.zig", "test/main_test.zig", "README.md"]
)
references = st.lists(
    st.builds(
        SymbolReference,
        file_path=file_names,
        line=st.integers(min_value=0, max_value=500),
        column=st.integers(min_value=0, max_value=120),
    ),
    max_size=25,
)
patterns = st.sampled_from(["*.zig", "src/**", "!*.zig", "!src/**", "main.zig", "*.md", "nothing"])


@pytest.fixture
def ref_list(make_ref):
    """Four references across three files."""
    return ReferenceList.from_references(
        "parse",
        [
            make_ref("src/main.zig", 4, 4),
            make_ref("src/parser.zig", 0, 7),
            make_ref("lib/util.c", 10, 2),
            make_ref("src/parser.zig", 20, 1),
        ],
    )


class TestConstruction:
    def test_empty(self):
        refs = ReferenceList("parse")
        assert refs.symbol_name == "parse"
        assert len(refs) == 0
        assert refs.visible_count() == 0
        assert refs.get_current() is None
        assert not refs.is_filtered

    def test_add_reference_visible_without_filter(self, make_ref):
        refs = ReferenceList("x")
        refs.add_reference(make_ref("a.zig"))
        assert refs.visible_count() == 1
        assert refs.get_visible(0).file_path == "a.zig"

    def test_add_reference_hidden_while_filtered(self, ref_list, make_ref):
        """References added under a filter appear once the filter is cleared."""
        ref_list.apply_filter("*.c")
        ref_list.add_reference(make_ref("src/new.zig"))
        assert len(ref_list) == 5
        assert ref_list.visible_count() == 1
        ref_list.clear_filter()
        assert ref_list.visible_count() == 5
        assert ref_list.get_visible(4).file_path == "src/new.zig"


class TestFiltering:
    def test_apply_filter(self, ref_list):
        ref_list.apply_filter("*.zig")
        assert ref_list.is_filtered
        assert ref_list.filter_pattern == "*.zig"
        assert ref_list.filtered_indices == (0, 1, 3)
        assert [r.file_path for r in ref_list.visible()] == [
            "src/main.zig",
            "src/parser.zig",
            "src/parser.zig",
        ]

    def test_exclusion_filter(self, ref_list):
        ref_list.apply_filter("!*.zig")
        assert [r.file_path for r in ref_list.visible()] == ["lib/util.c"]

    def test_path_filter(self, ref_list):
        ref_list.apply_filter("src/parser.zig")
        assert ref_list.visible_count() == 2

    def test_filter_replaces_previous(self, ref_list):
        ref_list.apply_filter("*.c")
        ref_list.apply_filter("src/**")
        assert ref_list.filtered_indices == (0, 1, 3)

    def test_filter_matching_nothing(self, ref_list):
        ref_list.apply_filter("*.rs")
        assert ref_list.visible_count() == 0
        assert ref_list.cursor == 0
        assert ref_list.get_current() is None

    def test_clear_filter(self, ref_list):
        ref_list.apply_filter("*.c")
        ref_list.clear_filter()
        assert not ref_list.is_filtered
        assert ref_list.filtered_indices == (0, 1, 2, 3)

    def test_filter_does_not_touch_references(self, ref_list):
        before = ref_list.references
        ref_list.apply_filter("*.c")
        assert ref_list.references == before


class TestCursor:
    def test_get_visible_out_of_range(self, ref_list):
        assert ref_list.get_visible(4) is None
        assert ref_list.get_visible(-1) is None

    def test_move_within_bounds(self, ref_list):
        ref_list.move_up()
        assert ref_list.cursor == 0
        for _ in range(10):
            ref_list.move_down()
        assert ref_list.cursor == 3
        assert ref_list.get_current().line == 20
        ref_list.move_up()
        assert ref_list.cursor == 2

    def test_filter_clamps_cursor(self, ref_list):
        ref_list.cursor = 3
        ref_list.apply_filter("*.c")
        assert ref_list.cursor == 0
        assert ref_list.get_current().file_path == "lib/util.c"

    def test_scroll_follows_cursor(self, make_ref):
        refs = ReferenceList.from_references("x", [make_ref(f"f{i}.zig", i) for i in range(10)])
        for _ in range(6):
            refs.move_down()
        assert refs.scroll_to_cursor(4) == 3
        for _ in range(6):
            refs.move_up()
        assert refs.scroll_to_cursor(4) == 0

    def test_scroll_zero_height(self, ref_list):
        ref_list.move_down()
        assert ref_list.scroll_to_cursor(0) == 0


class TestProperties:
    """Invariants that hold for any references and filter."""

    @given(refs=references)
    def test_insertion_order_preserved(self, refs):
        ref_list = ReferenceList.from_references("sym", refs)
        assert list(ref_list.references) == refs
        assert list(ref_list.visible()) == refs

    @given(refs=references, pattern=patterns)
    def test_filtered_indices_sorted_and_valid(self, refs, pattern):
        ref_list = ReferenceList.from_references("sym", refs)
        ref_list.apply_filter(pattern)
        indices = ref_list.filtered_indices
        assert list(indices) == sorted(set(indices))
        assert all(0 <= i < len(refs) for i in indices)

    @given(refs=references, pattern=patterns, moves=st.lists(st.booleans(), max_size=40))
    def test_cursor_stays_in_range(self, refs, pattern, moves):
        ref_list = ReferenceList.from_references("sym", refs)
        half = len(moves) // 2
        for i, down in enumerate(moves):
            if i == half:
                ref_list.apply_filter(pattern)
            if down:
                ref_list.move_down()
            else:
                ref_list.move_up()
        if not moves:
            ref_list.apply_filter(pattern)

        count = ref_list.visible_count()
        if count == 0:
            assert ref_list.cursor == 0
        else:
            assert 0 <= ref_list.cursor < count
            assert ref_list.get_current() is not None

    @given(refs=references, pattern=patterns)
    def test_filter_then_clear_restores_all(self, refs, pattern):
        ref_list = ReferenceList.from_references("sym", refs)
        ref_list.apply_filter(pattern)
        ref_list.clear_filter()
        assert ref_list.visible_count() == len(refs)

    @given(refs=references, pattern=patterns)
    def test_exclusion_complements(self, refs, pattern):
        if pattern.startswith("!"):
            pattern = pattern[1:]
        included = ReferenceList.from_references("sym", refs)
        included.apply_filter(pattern)
        excluded = ReferenceList.from_references("sym", refs)
        excluded.apply_filter("!" + pattern)
        assert included.visible_count() + excluded.visible_count() == len(refs)


class TestFilterExamples:
    def test_extension_filter(self, make_ref):
        refs = ReferenceList.from_references("x", [make_ref("src/main.zig"), make_ref("README.md")])
        refs.apply_filter("*.zig")
        assert [r.file_path for r in refs.visible()] == ["src/main.zig"]

    def test_directory_filter_and_complement(self, make_ref):
        paths = ["src/a.zig", "src/sub/b.zig", "lib/c.zig"]
        refs = ReferenceList.from_references("x", [make_ref(p) for p in paths])
        refs.apply_filter("src/**")
        assert [r.file_path for r in refs.visible()] == ["src/a.zig", "src/sub/b.zig"]
        refs.apply_filter("!src/**")
        assert [r.file_path for r in refs.visible()] == ["lib/c.zig"]
