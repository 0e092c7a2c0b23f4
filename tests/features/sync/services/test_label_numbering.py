"""Unit tests for the label numbering strategies."""

import pytest

from prodsync.features.sync.services.label_numbering import (
    PairNumbering,
    TypeCodeNumbering,
    parse_label,
)
from tests.utils.factories import make_entity


@pytest.mark.parametrize(
    "label,expected",
    [
        ("FOH 2", ("FOH", 2)),
        ("foh2", ("FOH", 2)),
        ("  BSM 10 ", ("BSM", 10)),
        ("Stage Left", None),
        ("", None),
    ],
)
def test_parse_label(label, expected) -> None:
    assert parse_label(label) == expected


class TestTypeCodeNumbering:
    """Tests for per-type-code labels."""

    def test_relabel_numbers_each_code_independently(self) -> None:
        numbering = TypeCodeNumbering()
        rows = numbering.rows(
            [
                make_entity("b", "FOH 2"),
                make_entity("a", "FOH 1"),
                make_entity("c", "BSM 1"),
            ]
        )

        labelled = numbering.relabel(rows)

        assert [(entry.uuid, label) for entry, label in labelled] == [
            ("b", "FOH 1"),
            ("a", "FOH 2"),
            ("c", "BSM 1"),
        ]

    def test_label_without_code_uses_default(self) -> None:
        numbering = TypeCodeNumbering(default_code="mon")
        rows = numbering.rows([make_entity("a", "Downstage wedge")])

        assert numbering.relabel(rows)[0][1] == "MON 1"

    def test_sort_key_follows_type_order_then_ordinal(self) -> None:
        numbering = TypeCodeNumbering(type_order=("FOH", "BSM"))
        entities = [
            make_entity("1", "Wedge"),
            make_entity("2", "ZED 1"),
            make_entity("3", "BSM 1"),
            make_entity("4", "FOH 10"),
            make_entity("5", "AUX 1"),
            make_entity("6", "FOH 2"),
        ]

        ordered = sorted(entities, key=numbering.sort_key)

        assert [e.id for e in ordered] == [
            "FOH 2",
            "FOH 10",
            "BSM 1",
            "AUX 1",
            "ZED 1",
            "Wedge",
        ]

    def test_patch_writes_display_label(self) -> None:
        assert TypeCodeNumbering().patch_for("FOH 3") == {"id": "FOH 3"}


class TestPairNumbering:
    """Tests for main/backup pair numbering."""

    def test_rows_group_pairs_and_isolate_unpaired(self) -> None:
        numbering = PairNumbering()
        rows = numbering.rows(
            [
                make_entity("m2", "MS 2 Main", pairNumber=2),
                make_entity("b1", "MS 1 Backup", pairNumber=1),
                make_entity("solo", "Spare"),
                make_entity("m1", "MS 1 Main", pairNumber=1),
            ]
        )

        assert [[entry.uuid for entry in row] for row in rows] == [
            ["b1", "m1"],
            ["m2"],
            ["solo"],
        ]
        assert rows[2][0].label == ""

    def test_relabel_gives_both_members_the_row_number(self) -> None:
        numbering = PairNumbering()
        rows = numbering.rows(
            [
                make_entity("a", "A", pairNumber=1),
                make_entity("b", "B", pairNumber=1),
                make_entity("c", "C", pairNumber=2),
            ]
        )

        labelled = numbering.relabel(list(reversed(rows)))

        assert [(entry.uuid, label) for entry, label in labelled] == [
            ("c", "1"),
            ("a", "2"),
            ("b", "2"),
        ]

    def test_non_numeric_pair_number_is_unpaired(self) -> None:
        numbering = PairNumbering()

        assert numbering.pair_number(make_entity("a", pairNumber="x")) is None
        assert numbering.pair_number(make_entity("a", pairNumber=True)) is None
        assert numbering.pair_number(make_entity("a", pairNumber="3")) == 3

    def test_patch_writes_integer_pair_number(self) -> None:
        assert PairNumbering().patch_for("4") == {"pairNumber": 4}
