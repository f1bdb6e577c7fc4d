"""Conversion of iCalendar DATE / DATE-TIME tokens to datetimes."""
from datetime import datetime


TIME_SEPARATOR = 'T'


class InvalidDateToken(ValueError):
    """Raised when a date token cannot be turned into a datetime."""


def normalize_date_token(token: str) -> datetime:
    """
    Convert a raw date token to a naive local datetime.

    Date-time tokens (``YYYYMMDDTHHMMSS``) are read by fixed position. A
    trailing ``Z`` is not honoured, the value is taken as local time.
    Date-only tokens (``YYYYMMDD``) give local midnight.

    Args:
        token: Raw DTSTART/DTEND value

    Returns:
        Naive datetime

    Raises:
        InvalidDateToken: If the fields are missing or out of range
    """
    token = (token or '').strip()

    if TIME_SEPARATOR in token:
        fields = (
            token[0:4], token[4:6], token[6:8],
            token[9:11], token[11:13], token[13:15]
        )
    else:
        fields = (token[0:4], token[4:6], token[6:8])

    widths = (4, 2, 2, 2, 2, 2)[:len(fields)]
    if not all(len(part) == width and part.isdigit()
               for part, width in zip(fields, widths)):
        raise InvalidDateToken(f"Malformed date token: {token!r}")

    try:
        return datetime(*(int(part) for part in fields))
    except ValueError as e:
        raise InvalidDateToken(f"Invalid date token {token!r}: {e}") from e
