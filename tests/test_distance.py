import pytest

from foursome.distance import format_feet_inches, parse_feet_inches


@pytest.mark.parametrize("note, expected", [
    ("3' 7\"", ("3", "7")),
    ("12'", ("12", "")),
    ("3 ft 7 in", ("3", "7")),
    ("4 feet", ("4", "")),
    ("3 7", ("3", "7")),
    ("about 3-7", ("3", "7")),
    ("12", ("12", "")),
    ("", ("", "")),
    (None, ("", "")),
    ("close", ("", "")),
])
def test_parse_feet_inches(note, expected):
    assert parse_feet_inches(note) == expected


def test_format_normalizes_overflow_inches():
    assert format_feet_inches("3", "14") == "4' 2\""
    assert format_feet_inches("0", "25") == "2' 1\""


def test_format_blank_and_partial():
    assert format_feet_inches("", "") == ""
    assert format_feet_inches("  ", None) == ""
    assert format_feet_inches("5", "") == "5' 0\""
    assert format_feet_inches("", "9") == "0' 9\""
    assert format_feet_inches("abc", "2") == ""


def test_parse_recovers_formatted_distance():
    for feet in (0, 1, 7, 30):
        for inches in (0, 5, 11):
            note = format_feet_inches(str(feet), str(inches))
            assert parse_feet_inches(note) == (str(feet), str(inches))
