"""Tests for grouping and edge instruction contracts."""

import pytest

from streamwire.contracts import ComponentName, EdgeInstruction, Grouping, GroupingType, StreamId


class TestGrouping:
    def test_shuffle_factory(self) -> None:
        grouping = Grouping.shuffle()

        assert grouping.type == GroupingType.SHUFFLE
        assert grouping.field is None
        assert grouping.describe() == "shuffle"

    def test_fields_factory(self) -> None:
        grouping = Grouping.fields("userId")

        assert grouping.type == GroupingType.FIELDS
        assert grouping.field == "userId"
        assert grouping.describe() == "fields(userId)"

    def test_fields_requires_field(self) -> None:
        with pytest.raises(ValueError, match="requires a field"):
            Grouping(GroupingType.FIELDS)

    def test_shuffle_forbids_field(self) -> None:
        with pytest.raises(ValueError, match="cannot name a field"):
            Grouping(GroupingType.SHUFFLE, "userId")

    def test_groupings_compare_by_value(self) -> None:
        assert Grouping.fields("userId") == Grouping.fields("userId")
        assert Grouping.fields("userId") != Grouping.fields("amount")
        assert Grouping.shuffle() != Grouping.fields("userId")


def test_edge_instruction_key() -> None:
    edge = EdgeInstruction(
        producer=ComponentName("A"),
        consumer=ComponentName("B"),
        stream=StreamId("s1"),
        grouping=Grouping.shuffle(),
    )

    assert edge.key == ("A", "B", "s1")
