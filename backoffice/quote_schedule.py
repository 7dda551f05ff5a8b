"""Quote schedule spreadsheet import/export.

Converts between ``.xlsx`` workbooks and QuoteScheduleRow records.

Import reads the first sheet only. Row 1 is the header; when it carries all
fourteen known column names the columns are located by name, otherwise the
fixed column order is used. Malformed cells fall back to defaults, except
dates: a date cell that cannot be read aborts the whole import with a
RowParseError so that a schedule is never partially imported.
"""
import logging
import math
import re
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from io import BytesIO
from typing import Any, Dict, List, Optional, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter
from openpyxl.utils.datetime import from_excel

from .errors import ParseError, RowParseError, ValidationError
from .models import QuoteScheduleRow

logger = logging.getLogger(__name__)

SHEET_TITLE = "Quote Schedule"

HEADERS = (
    "Quote Number", "Client Name", "Agent Name", "Tour Type", "Departure Date",
    "Return Date", "Pax Count", "Quote Date", "Valid Until", "Status",
    "Total Amount", "Currency", "Consultant", "Notes",
)

# Row field for each column, in the fixed positional order
FIELDS = (
    "quote_number", "client_name", "agent_name", "tour_type", "departure_date",
    "return_date", "pax_count", "quote_date", "valid_until", "status",
    "total_amount", "currency", "consultant", "notes",
)

DATE_FIELDS = {"departure_date", "return_date", "quote_date", "valid_until"}

DATE_FORMATS = ("%d.%m.%Y", "%d/%m/%Y", "%Y/%m/%d")

COLUMN_WIDTHS = (14, 24, 20, 10, 15, 13, 10, 13, 13, 18, 14, 10, 18, 40)

CENT = Decimal("0.01")

_INT_RE = re.compile(r"\s*([+-]?\d+)")
_DECIMAL_RE = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _normalize_header(value: Any) -> str:
    return " ".join(str(value or "").split()).lower()


def detect_columns(header_row: Sequence[Any]) -> Dict[str, int]:
    """Map row fields to column indexes.

    Uses the header names when all of them are present, otherwise the fixed
    positional order.
    """
    positions = {_normalize_header(v): i for i, v in enumerate(header_row) if v is not None}
    wanted = [_normalize_header(h) for h in HEADERS]

    if all(h in positions for h in wanted):
        mapping = {f: positions[h] for f, h in zip(FIELDS, wanted)}
        if list(mapping.values()) != list(range(len(FIELDS))):
            logger.info(f"Quote schedule columns located by header name: {mapping}")
        return mapping

    logger.info("Quote schedule header not recognised, using positional columns")
    return {f: i for i, f in enumerate(FIELDS)}


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def parse_date_cell(value: Any) -> str:
    """Normalize a date cell to 'YYYY-MM-DD' ("" for empty cells).

    Raises ValueError if the cell holds something that is not a date.
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # Excel serial date in a cell without date formatting
        return from_excel(value).date().isoformat()

    text = str(value).strip()
    if not text:
        return ""
    try:
        return datetime.fromisoformat(text).date().isoformat()
    except ValueError:
        pass
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue
    raise ValueError(f"Invalid date: {text!r}")


def normalize_dates(row: QuoteScheduleRow) -> QuoteScheduleRow:
    """Bring every date field of a row to 'YYYY-MM-DD' (or "").

    Raises ValidationError when a date field holds something that is not a
    date.
    """
    changes = {}
    for name in FIELDS:
        if name not in DATE_FIELDS:
            continue
        try:
            changes[name] = parse_date_cell(getattr(row, name))
        except ValueError as e:
            raise ValidationError(f"{name}: {e}") from e
    return replace(row, **changes)


def _int(value: Any) -> int:
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else 0
    match = _INT_RE.match(str(value))
    return int(match.group(1)) if match else 0


def _raw_decimal(value: Any) -> Decimal:
    if value is None or isinstance(value, bool):
        return Decimal("0")
    if isinstance(value, Decimal):
        return value if value.is_finite() else Decimal("0")
    if isinstance(value, int):
        return Decimal(value)
    if isinstance(value, float):
        return Decimal(repr(value)) if math.isfinite(value) else Decimal("0")
    match = _DECIMAL_RE.match(str(value))
    if not match:
        return Decimal("0")
    try:
        return Decimal(match.group(1))
    except InvalidOperation:
        return Decimal("0")


def _decimal(value: Any) -> Decimal:
    """Read an amount cell, rounded to cents.

    Numeric cells are IEEE doubles, so only about 15 significant digits
    survive a trip through a workbook.
    """
    amount = _raw_decimal(value)
    try:
        return amount.quantize(CENT)
    except InvalidOperation:
        return amount


def map_row(values: Sequence[Any], columns: Dict[str, int]) -> QuoteScheduleRow:
    """Map one sheet row to a QuoteScheduleRow, applying the cell defaults."""
    def cell(name: str) -> Any:
        index = columns[name]
        return values[index] if index < len(values) else None

    return QuoteScheduleRow(
        quote_number=_text(cell("quote_number")),
        client_name=_text(cell("client_name")),
        agent_name=_text(cell("agent_name")),
        tour_type=_text(cell("tour_type")) or "FIT",
        departure_date=parse_date_cell(cell("departure_date")),
        return_date=parse_date_cell(cell("return_date")),
        pax_count=_int(cell("pax_count")),
        quote_date=parse_date_cell(cell("quote_date")),
        valid_until=parse_date_cell(cell("valid_until")),
        status=_text(cell("status")) or "Pending",
        total_amount=_decimal(cell("total_amount")),
        currency=_text(cell("currency")) or "ZAR",
        consultant=_text(cell("consultant")),
        notes=_text(cell("notes")),
    )


def _is_blank(values: Sequence[Any]) -> bool:
    return all(v is None or (isinstance(v, str) and not v.strip()) for v in values)


def parse_spreadsheet(data: bytes) -> List[QuoteScheduleRow]:
    """Read a quote schedule workbook into rows.

    Raises ParseError if the bytes are not an .xlsx workbook and
    RowParseError (1-based sheet row number) if any row cannot be mapped.
    """
    try:
        wb = load_workbook(BytesIO(data), data_only=True)
    except Exception as e:
        logger.error(f"Failed to open quote schedule workbook: {e}")
        raise ParseError(f"Failed to parse Excel file: {e}") from e

    ws = wb.worksheets[0]
    logger.info(f"Parsing quote schedule - Using sheet: {ws.title}")

    row_iter = ws.iter_rows(values_only=True)
    header = next(row_iter, None)
    if header is None:
        logger.warning("Quote schedule sheet is empty")
        return []

    columns = detect_columns(header)
    rows: List[QuoteScheduleRow] = []

    for row_index, values in enumerate(row_iter, start=2):
        if _is_blank(values):
            logger.debug(f"Skipping blank row {row_index}")
            continue
        try:
            rows.append(map_row(values, columns))
        except Exception as e:
            logger.error(f"Quote schedule import aborted at row {row_index}: {e}")
            raise RowParseError(row_index, str(e)) from e

    logger.info(f"Parsed {len(rows)} quote schedule rows")
    return rows


def _date_value(value: str) -> Any:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return value


def render_spreadsheet(rows: Sequence[QuoteScheduleRow]) -> bytes:
    """Build a single-sheet 'Quote Schedule' workbook and return its bytes."""
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE

    ws.append(list(HEADERS))
    for cell in ws[1]:
        cell.font = Font(bold=True)
    for i, width in enumerate(COLUMN_WIDTHS, start=1):
        ws.column_dimensions[get_column_letter(i)].width = width
    ws.freeze_panes = "A2"

    for row in rows:
        values = []
        for name in FIELDS:
            value = getattr(row, name)
            if name in DATE_FIELDS:
                value = _date_value(value)
            values.append(value)
        ws.append(values)
        # Text starting with "=" is stored as a formula unless forced back to a string
        for cell in ws[ws.max_row]:
            if isinstance(cell.value, str) and cell.data_type == "f":
                cell.data_type = "s"

    buffer = BytesIO()
    wb.save(buffer)
    logger.info(f"Exported {len(rows)} quote schedule rows")
    return buffer.getvalue()


def filter_quotes(
    rows: Sequence[QuoteScheduleRow],
    search: str = "",
    status: Optional[str] = None,
    tour_type: Optional[str] = None,
) -> List[QuoteScheduleRow]:
    """Filter rows by free-text search, status and tour type.

    Search is case-insensitive over quote number, client and agent name.
    A status or tour type of None or 'all' disables that filter.
    """
    needle = (search or "").lower()
    result = []
    for row in rows:
        if needle and not any(
            needle in field.lower() for field in (row.quote_number, row.client_name, row.agent_name)
        ):
            continue
        if status not in (None, "", "all") and row.status != status:
            continue
        if tour_type not in (None, "", "all") and row.tour_type != tour_type:
            continue
        result.append(row)
    return result


def days_until_valid(row: QuoteScheduleRow, today: date) -> Optional[int]:
    """Days left until the quote expires (negative once expired)."""
    if not row.valid_until:
        return None
    try:
        valid = date.fromisoformat(row.valid_until)
    except ValueError:
        return None
    return (valid - today).days


def validity_urgency(days: Optional[int]) -> str:
    if days is None:
        return "unknown"
    if days < 0:
        return "expired"
    if days <= 7:
        return "urgent"
    if days <= 30:
        return "soon"
    return "ok"


def schedule_filename(today: date) -> str:
    return f"quote-schedule-{today.isoformat()}.xlsx"
