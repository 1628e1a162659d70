"""Tests for candidate ordering by sequence suffix"""

import random

import pytest

from zk_trylock.core.exceptions import InvalidNodeNameError
from zk_trylock.lock.ordering import child_floor, sequence_suffix, sort_by_sequence_suffix


class TestSequenceSuffix:
    """Test extraction and validation of the sequence suffix"""

    def test_returns_ten_digit_suffix(self):
        assert sequence_suffix("x-000000000000001f-0000000042") == "0000000042"

    def test_uses_text_after_last_separator(self):
        """Session ids may not contain the separator, but the prefix can"""
        assert sequence_suffix("x-a-b-c-0000000007") == "0000000007"

    @pytest.mark.parametrize(
        "name",
        [
            "lock",
            "x-000000000000001f-42",
            "x-000000000000001f-00000000ab",
            "x-000000000000001f-00000000001",
            "x-000000000000001f-",
            "x-000000000000001f-٠١٢٣٤٥٦٧٨٩",
        ],
    )
    def test_rejects_malformed_names(self, name):
        with pytest.raises(InvalidNodeNameError) as exc_info:
            sequence_suffix(name)
        assert exc_info.value.name == name

    def test_custom_width(self):
        assert sequence_suffix("x-abc-0042", width=4) == "0042"


class TestSortBySequenceSuffix:
    """Test ordering of lock directory listings"""

    def test_orders_by_sequence_not_session(self):
        """A later registration from a lower session id still sorts later"""
        children = [
            "x-0000000000000001-0000000001",
            "x-ffffffffffffffff-0000000000",
        ]
        assert sort_by_sequence_suffix(children) == [
            "x-ffffffffffffffff-0000000000",
            "x-0000000000000001-0000000001",
        ]

    def test_padding_keeps_numeric_order(self):
        children = ["x-b-0000000010", "x-a-0000000009", "x-c-0000000100"]
        assert sort_by_sequence_suffix(children) == ["x-a-0000000009", "x-b-0000000010", "x-c-0000000100"]

    def test_lexicographic_order_matches_numeric_order(self):
        """Every fixed-width suffix in range sorts the same as its number"""
        numbers = list(range(1000))
        random.Random(7).shuffle(numbers)
        children = [f"x-{n % 5}-{n:03d}" for n in numbers]

        ordered = sort_by_sequence_suffix(children, width=3)

        assert [int(sequence_suffix(name, width=3)) for name in ordered] == list(range(1000))

    def test_empty_listing(self):
        assert sort_by_sequence_suffix([]) == []

    def test_invalid_child_aborts_sort(self):
        with pytest.raises(InvalidNodeNameError):
            sort_by_sequence_suffix(["x-a-0000000001", "stray-node"])


class TestChildFloor:
    """Test predecessor lookup"""

    ORDERED = ["x-a-0000000001", "x-b-0000000004", "x-c-0000000009"]

    def test_lowest_has_no_floor(self):
        assert child_floor(self.ORDERED, "x-a-0000000001") is None

    def test_returns_immediate_predecessor(self):
        assert child_floor(self.ORDERED, "x-c-0000000009") == "x-b-0000000004"
        assert child_floor(self.ORDERED, "x-b-0000000004") == "x-a-0000000001"

    def test_target_missing_from_listing(self):
        """Floor is defined by suffix, so the target need not be listed"""
        assert child_floor(self.ORDERED, "x-d-0000000005") == "x-b-0000000004"
        assert child_floor(self.ORDERED, "x-d-0000000000") is None

    def test_single_winner(self):
        """Exactly one member of a listing has no predecessor"""
        winners = [name for name in self.ORDERED if child_floor(self.ORDERED, name) is None]
        assert winners == ["x-a-0000000001"]

    def test_invalid_target(self):
        with pytest.raises(InvalidNodeNameError):
            child_floor(self.ORDERED, "x-d")
