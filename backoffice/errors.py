"""Error types raised by the back-office core.

Generators and the template renderer never raise on incomplete data; these
errors come from the spreadsheet bridge, the pricing evaluator and the
record store. The API layer maps them onto HTTP status codes.
"""


class BackOfficeError(Exception):
    """Base class for all back-office errors."""

    status_code = 500


class ValidationError(BackOfficeError):
    """A create/update payload is malformed."""

    status_code = 400


class NotFoundError(BackOfficeError):
    """No record exists for the requested id."""

    status_code = 404

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")


class ParseError(BackOfficeError):
    """An uploaded file is not a readable spreadsheet workbook."""

    status_code = 400


class RowParseError(ParseError):
    """A spreadsheet row could not be mapped; the whole import is aborted.

    ``row_index`` is the 1-based sheet row number (the header is row 1).
    """

    def __init__(self, row_index: int, reason: str = ""):
        self.row_index = row_index
        self.reason = reason
        message = f"Error processing row {row_index}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class InvalidArgument(BackOfficeError):
    """A numeric precondition was violated (e.g. non-numeric pax count)."""

    status_code = 400
