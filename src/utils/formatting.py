import re

_THOUSANDS = re.compile(r"\B(?=(\d{3})+(?!\d))")


def pretty_format_number(num: int) -> str:
    """Insert thousands separators, e.g. 1234567 -> '1,234,567'."""
    return _THOUSANDS.sub(",", str(num))


def format_record_count(count: int) -> str:
    noun = "record" if count == 1 else "records"
    return f"{pretty_format_number(count)} {noun}"
