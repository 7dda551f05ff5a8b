"""Date and filename formatting shared by the document generators."""
import re
from datetime import date, datetime
from typing import Optional, Union

DateLike = Union[date, str, None]


def _coerce_date(value: DateLike) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.strptime(text[:10], "%Y-%m-%d").date()
    except ValueError:
        return None


def format_long_date(value: DateLike) -> str:
    """Format as 'd MMMM yyyy', e.g. '3 September 2025'.

    Empty values render as "" and strings that are not ISO dates are
    returned unchanged.
    """
    d = _coerce_date(value)
    if d is None:
        return "" if value is None else str(value).strip()
    return f"{d.day} {d.strftime('%B %Y')}"


def format_short_date(value: DateLike) -> str:
    """Format as 'd-MMM-yy', e.g. '13-Sep-25'."""
    d = _coerce_date(value)
    if d is None:
        return "" if value is None else str(value).strip()
    return f"{d.day}-{d.strftime('%b-%y')}"


def document_filename(kind: str, *parts: str, extension: str = "txt") -> str:
    """Build '<Kind>_<part>_<part>.<ext>' with whitespace runs as underscores."""
    pieces = [kind] + [str(p) for p in parts]
    name = "_".join(re.sub(r"\s+", "_", p.strip()) for p in pieces)
    return f"{name}.{extension}"
