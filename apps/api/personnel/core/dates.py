from datetime import date, datetime
from typing import Optional, Union

# Far-future end dates older rows use for "still active"; stored as NULL here
OPEN_END_SENTINEL = "9999-12-31"
OPEN_END_MARKERS = {"", OPEN_END_SENTINEL, "9999-01-01"}

DateInput = Union[date, str, None]


def parse_date(value: DateInput) -> Optional[date]:
    """Parse a YYYY-MM-DD value, returning None for anything unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        return None


def normalize_end_date(value: DateInput) -> Optional[date]:
    """Map the sentinel spellings of an open end to None."""
    if value is None:
        return None
    if isinstance(value, str):
        if value.strip() in OPEN_END_MARKERS:
            return None
        parsed = parse_date(value)
        if parsed is None:
            raise ValueError(f"invalid date: {value!r}")
        return parsed
    if not isinstance(value, date):
        raise ValueError(f"invalid date: {value!r}")
    parsed = parse_date(value)
    if parsed is not None and parsed.isoformat() in OPEN_END_MARKERS:
        return None
    return parsed


def is_current(to_date: Optional[date], today: Optional[date] = None) -> bool:
    """A tenure row is current while its end is open or still in the future."""
    if to_date is None:
        return True
    return to_date > (today or date.today())


def today() -> date:
    # Wrapped so tests can patch it
    return date.today()
