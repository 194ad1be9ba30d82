"""Unit tests for record id matching and merge rules."""

from __future__ import annotations

import pytest

from docstore.domain.entities import find_index, get_record_id, ids_equal, merge


@pytest.mark.unit
class TestIdsEqual:
    """Tests for JSON-style id equality."""

    @pytest.mark.parametrize(
        "left, right",
        [(1, 1), ("a", "a"), (1, 1.0), (None, None), (True, True), ([1, 2], [1, 2])],
    )
    def test_equal(self, left: object, right: object) -> None:
        """Same JSON values are equal."""
        assert ids_equal(left, right)

    @pytest.mark.parametrize(
        "left, right",
        [(1, "1"), (True, 1), (1, True), (False, 0), (0, None), ([1], (1,)), (1, 2)],
    )
    def test_not_equal(self, left: object, right: object) -> None:
        """Different JSON values, including bool vs number, are not equal."""
        assert not ids_equal(left, right)


@pytest.mark.unit
class TestFindIndex:
    """Tests for find_index."""

    def test_first_match_wins(self) -> None:
        """With duplicate ids the first record is found."""
        records = [{"id": 1, "n": "a"}, {"id": 2}, {"id": 1, "n": "b"}]
        assert find_index(records, 1) == 0

    def test_no_match(self) -> None:
        """A missing id gives -1."""
        assert find_index([{"id": 1}], 2) == -1
        assert find_index([], 1) == -1

    def test_records_without_id_never_match(self) -> None:
        """A missing id field does not match a None id."""
        records = [{"name": "no id"}, {"id": None}]
        assert find_index(records, None) == 1

    def test_bool_does_not_match_int(self) -> None:
        """True is not treated as id 1."""
        records = [{"id": True}, {"id": 1}]
        assert find_index(records, 1) == 1


@pytest.mark.unit
class TestMerge:
    """Tests for merge."""

    def test_patch_wins(self) -> None:
        """Patch fields overwrite, others are preserved."""
        record = {"id": 7, "a": 0, "b": 2}
        assert merge(record, {"a": 1}) == {"id": 7, "a": 1, "b": 2}

    def test_new_fields_appended(self) -> None:
        """New fields are added after existing ones."""
        merged = merge({"id": 1, "a": 0}, {"c": 3})
        assert list(merged) == ["id", "a", "c"]

    def test_input_untouched(self) -> None:
        """Merging does not modify the input record."""
        record = {"id": 1, "a": 0}
        merge(record, {"a": 1})
        assert record == {"id": 1, "a": 0}

    def test_get_record_id(self) -> None:
        """get_record_id returns the id or None."""
        assert get_record_id({"id": "x"}) == "x"
        assert get_record_id({}) is None
