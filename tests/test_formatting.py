import pytest

from src.utils.formatting import format_record_count, pretty_format_number


@pytest.mark.parametrize(
    "num, expected",
    [(0, "0"), (999, "999"), (1000, "1,000"), (1234567, "1,234,567")],
)
def test_pretty_format_number(num, expected):
    assert pretty_format_number(num) == expected


def test_format_record_count_pluralizes():
    assert format_record_count(1) == "1 record"
    assert format_record_count(0) == "0 records"
    assert format_record_count(2500) == "2,500 records"
