import pytest
from edotuner.errors import InvalidPitchClass
from edotuner.pitch import (
    SIMPLE_NAMES, FIELD_ORDER, FIELD_TO_INDEX, fields_to_fifths, fifths_to_fields,
    from_index, index_name, parse_index, parse_spelling, tpc_from_step, tpc_name, to_index,
)


def test_simple_names_follow_fifths():
    assert SIMPLE_NAMES[:8] == ["Fb", "Cb", "Gb", "Db", "Ab", "Eb", "Bb", "F"]
    assert SIMPLE_NAMES[8] == "C"
    assert SIMPLE_NAMES[11] == "A"
    assert SIMPLE_NAMES[20] == "B#"
    assert [index_name(i) for i in range(21)] == SIMPLE_NAMES


def test_tpc_numbering():
    assert tpc_from_step("C") == 14
    assert tpc_from_step("A") == 17
    assert tpc_from_step("F", -2) == -1
    assert tpc_from_step("B", 2) == 33
    assert tpc_name(-1) == "Fbb"
    assert tpc_name(33) == "B##"
    assert to_index(14) == 8
    assert from_index(0) == 6


def test_parse_spelling():
    assert parse_spelling("F#") == 20
    assert parse_spelling("Ebb") == 4
    assert parse_spelling("Cx") == 28
    with pytest.raises(InvalidPitchClass):
        parse_spelling("H")
    with pytest.raises(InvalidPitchClass):
        parse_spelling("C#b")


def test_out_of_range_is_rejected():
    with pytest.raises(InvalidPitchClass):
        tpc_from_step("B", 3)
    with pytest.raises(InvalidPitchClass):
        tpc_name(34)
    with pytest.raises(InvalidPitchClass):
        to_index(27)
    with pytest.raises(InvalidPitchClass):
        from_index(21)


def test_parse_index_accepts_numbers_and_names():
    assert parse_index("10") == 10
    assert parse_index("D") == 10
    assert parse_index("Bb") == 6
    with pytest.raises(InvalidPitchClass):
        parse_index("21")
    with pytest.raises(InvalidPitchClass):
        parse_index("F##")


def test_field_order_mapping():
    assert len(FIELD_ORDER) == 21
    assert sorted(FIELD_TO_INDEX) == list(range(21))
    assert FIELD_TO_INDEX[:3] == [1, 8, 15]       # Cb C C#
    fifths = list(range(21))
    fields = fifths_to_fields(fifths)
    assert fields[FIELD_ORDER.index("A")] == 11
    assert fields_to_fifths(fields) == fifths
