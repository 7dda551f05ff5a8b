"""Main FastAPI application for the tour operations back-office."""
import logging
import os
from dataclasses import asdict, fields
from datetime import date
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import Response
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .docx_export import text_to_docx
from .errors import BackOfficeError, ParseError, ValidationError
from .models import (
    OvernightEdit, OvernightList, OvernightRemoval, PricingRequest,
    QuoteScheduleRow, QuoteTemplate, RenderRequest, TemplateDefinition,
    TourManualData, VoucherData,
)
from .overnight_list import (
    add_entry, generate_overnight_list, overnight_list_filename,
    redate_entries, remove_entry,
)
from .pricing import DEFAULT_QUOTE_TEMPLATES, price_template
from .quote_schedule import (
    days_until_valid, filter_quotes, normalize_dates, parse_spreadsheet,
    render_spreadsheet, schedule_filename, validity_urgency,
)
from .store import RecordStore
from .template_renderer import DEFAULT_TEMPLATES, render
from .tour_manual import generate_tour_manual, tour_manual_filename
from .validation import (
    validate_overnight_entries, validate_quote_row, validate_template,
    validate_tour_manual, validate_voucher,
)
from .voucher_generator import DEFAULT_LETTERHEAD, generate_voucher, voucher_filename

# Configure logging
logging.basicConfig(
    level=os.environ.get("BACKOFFICE_LOG_LEVEL", "INFO").upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"

# Create FastAPI app
app = FastAPI(
    title="Tour Operations Back-Office",
    description="Vouchers, tour manuals, overnight lists, supplier e-mails and quote schedules",
    version=VERSION
)

LETTERHEAD = os.environ.get("BACKOFFICE_LETTERHEAD", DEFAULT_LETTERHEAD)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

email_templates: RecordStore[TemplateDefinition] = RecordStore("template", DEFAULT_TEMPLATES.values())
quote_templates: RecordStore[QuoteTemplate] = RecordStore("quote template", DEFAULT_QUOTE_TEMPLATES)
quote_schedule: RecordStore[QuoteScheduleRow] = RecordStore("quote")


def http_error(e: BackOfficeError) -> HTTPException:
    """Map a domain error onto an HTTPException."""
    if e.status_code >= 500:
        logger.error(f"{type(e).__name__}: {e}")
    else:
        logger.warning(f"{type(e).__name__}: {e}")
    return HTTPException(status_code=e.status_code, detail=str(e))


def download(content, filename: str, media_type: str) -> Response:
    """Wrap generated content as a file download."""
    if isinstance(content, str):
        content = content.encode("utf-8")
        media_type = f"{media_type}; charset=utf-8"
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


def document_response(text: str, filename: str, fmt: str, title: str) -> Response:
    if fmt == "txt":
        return download(text, filename, "text/plain")
    if fmt == "docx":
        docx_name = filename.rsplit(".", 1)[0] + ".docx"
        return download(text_to_docx(text, title), docx_name, DOCX_MEDIA_TYPE)
    raise HTTPException(status_code=400, detail="Invalid format. Use 'txt' or 'docx'")


def patched(store: RecordStore, record_id: str, changes: Dict[str, Any], model, normalize=None):
    """Apply a partial update after validating the merged record."""
    current = store.get(record_id)
    known = {f.name for f in fields(model)}
    unknown = sorted(set(changes) - known)
    if unknown:
        raise ValidationError(f"Unknown field(s): {', '.join(unknown)}")
    try:
        candidate = TypeAdapter(model).validate_python({**asdict(current), **changes})
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {store.kind}: {e.error_count()} error(s)") from e
    if normalize is not None:
        candidate = normalize(candidate)
    return store.update(record_id, **{name: getattr(candidate, name) for name in changes})


def quote_payload(record_id: str, row: QuoteScheduleRow, today: date) -> Dict[str, Any]:
    days = days_until_valid(row, today)
    return {
        "id": record_id,
        **asdict(row),
        "days_until_valid": days,
        "urgency": validity_urgency(days),
    }


# --- Health -----------------------------------------------------------------

@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": VERSION,
        "templates": len(email_templates),
        "quote_templates": len(quote_templates),
        "quotes": len(quote_schedule),
    }


# --- E-mail templates -------------------------------------------------------

@app.post("/templates/render")
async def render_adhoc_template(request: RenderRequest):
    """Render a template definition that is not stored."""
    rendered = render(request.template, request.context)
    report = validate_template(request.template)
    return {**asdict(rendered), "warnings": report.issues}


@app.get("/templates")
async def list_templates():
    return [{"id": rid, **asdict(t)} for rid, t in email_templates.list()]


@app.post("/templates", status_code=201)
async def create_template(template: TemplateDefinition):
    report = validate_template(template)
    if not report.passed:
        raise http_error(ValidationError("; ".join(report.issues)))
    return {"id": email_templates.create(template)}


@app.get("/templates/{record_id}")
async def get_template(record_id: str):
    try:
        return {"id": record_id, **asdict(email_templates.get(record_id))}
    except BackOfficeError as e:
        raise http_error(e)


@app.patch("/templates/{record_id}")
async def update_template(record_id: str, changes: Dict[str, Any] = Body(...)):
    try:
        updated = patched(email_templates, record_id, changes, TemplateDefinition)
        report = validate_template(updated)
        return {"id": record_id, **asdict(updated), "warnings": report.issues}
    except BackOfficeError as e:
        raise http_error(e)


@app.delete("/templates/{record_id}", status_code=204)
async def delete_template(record_id: str):
    try:
        email_templates.delete(record_id)
    except BackOfficeError as e:
        raise http_error(e)
    return Response(status_code=204)


@app.post("/templates/{record_id}/render")
async def render_stored_template(record_id: str, context: Dict[str, Optional[str]] = Body(...)):
    try:
        template = email_templates.get(record_id)
    except BackOfficeError as e:
        raise http_error(e)
    logger.info(f"Rendering template '{template.name}' with {len(context)} variables")
    return asdict(render(template, context))


# --- Documents --------------------------------------------------------------

@app.post("/documents/voucher")
async def download_voucher(data: VoucherData, fmt: str = Query("txt", alias="format")):
    text = generate_voucher(data, letterhead=LETTERHEAD)
    return document_response(text, voucher_filename(data), fmt, "CONFIRMATION VOUCHER")


@app.post("/documents/voucher/preview")
async def preview_voucher(data: VoucherData):
    report = validate_voucher(data)
    return {
        "filename": voucher_filename(data),
        "text": generate_voucher(data, letterhead=LETTERHEAD),
        "warnings": report.issues,
    }


@app.post("/documents/tour-manual")
async def download_tour_manual(data: TourManualData, fmt: str = Query("txt", alias="format")):
    text = generate_tour_manual(data)
    return document_response(text, tour_manual_filename(data), fmt, f"TOUR MANUAL – {data.tour_code}")


@app.post("/documents/tour-manual/preview")
async def preview_tour_manual(data: TourManualData):
    report = validate_tour_manual(data)
    return {
        "filename": tour_manual_filename(data),
        "text": generate_tour_manual(data),
        "warnings": report.issues,
    }


@app.post("/documents/overnight-list")
async def download_overnight_list(data: OvernightList, fmt: str = Query("txt", alias="format")):
    text = generate_overnight_list(data.entries)
    return document_response(text, overnight_list_filename(data.tour_start_date), fmt, "OVERNIGHT LIST")


@app.post("/documents/overnight-list/preview")
async def preview_overnight_list(data: OvernightList):
    report = validate_overnight_entries(data.entries)
    return {
        "filename": overnight_list_filename(data.tour_start_date),
        "text": generate_overnight_list(data.entries),
        "warnings": report.issues,
    }


@app.post("/overnight-list/remove")
async def remove_overnight_entry(request: OvernightRemoval):
    try:
        return {"entries": remove_entry(request.entries, request.index)}
    except BackOfficeError as e:
        raise http_error(e)


@app.post("/overnight-list/add")
async def add_overnight_entry(request: OvernightEdit):
    return {"entries": add_entry(request.entries, request.tour_start_date)}


@app.post("/overnight-list/redate")
async def redate_overnight_entries(request: OvernightEdit):
    return {"entries": redate_entries(request.entries, request.tour_start_date)}


# --- Quote schedule ---------------------------------------------------------

@app.get("/quote-schedule")
async def list_quotes(
    search: str = "",
    status: Optional[str] = None,
    tour_type: Optional[str] = None,
):
    today = date.today()
    return [
        quote_payload(rid, row, today)
        for rid, row in quote_schedule.list()
        if filter_quotes([row], search=search, status=status, tour_type=tour_type)
    ]


@app.post("/quote-schedule", status_code=201)
async def create_quote(row: QuoteScheduleRow):
    try:
        row = normalize_dates(row)
    except BackOfficeError as e:
        raise http_error(e)
    report = validate_quote_row(row)
    return {"id": quote_schedule.create(row), "warnings": report.issues}


@app.post("/quote-schedule/import")
async def import_quote_schedule(
    file: UploadFile = File(..., description="Quote schedule workbook (.xlsx)"),
    replace: bool = Query(False, description="Replace the current schedule instead of appending"),
):
    """Import a quote schedule workbook; nothing is stored if any row fails."""
    logger.info(f"Quote schedule import: file={file.filename}, replace={replace}")

    try:
        if file.filename and file.filename.lower().endswith(".xls"):
            raise ParseError("Legacy .xls workbooks are not supported, please save as .xlsx")
        content = await file.read()
        rows = parse_spreadsheet(content)
    except BackOfficeError as e:
        raise http_error(e)
    except Exception as e:
        logger.exception("Unexpected error")
        raise HTTPException(status_code=500, detail=f"An unexpected error occurred: {str(e)}")

    warnings = []
    for row in rows:
        report = validate_quote_row(row)
        warnings.extend(f"{report.document}: {issue}" for issue in report.issues)

    ids = quote_schedule.replace_all(rows) if replace else quote_schedule.extend(rows)
    logger.info(f"Imported {len(ids)} quotes from {file.filename}")
    return {"imported": len(ids), "ids": ids, "warnings": warnings}


@app.get("/quote-schedule/export")
async def export_quote_schedule():
    rows = [row for _, row in quote_schedule.list()]
    try:
        content = render_spreadsheet(rows)
    except Exception as e:
        logger.exception("Unexpected error")
        raise HTTPException(status_code=500, detail=f"Failed to export quote schedule: {str(e)}")
    return download(content, schedule_filename(date.today()), XLSX_MEDIA_TYPE)


@app.get("/quote-schedule/{record_id}")
async def get_quote(record_id: str):
    try:
        return quote_payload(record_id, quote_schedule.get(record_id), date.today())
    except BackOfficeError as e:
        raise http_error(e)


@app.patch("/quote-schedule/{record_id}")
async def update_quote(record_id: str, changes: Dict[str, Any] = Body(...)):
    try:
        updated = patched(quote_schedule, record_id, changes, QuoteScheduleRow, normalize=normalize_dates)
        report = validate_quote_row(updated)
        return {**quote_payload(record_id, updated, date.today()), "warnings": report.issues}
    except BackOfficeError as e:
        raise http_error(e)


@app.delete("/quote-schedule/{record_id}", status_code=204)
async def delete_quote(record_id: str):
    try:
        quote_schedule.delete(record_id)
    except BackOfficeError as e:
        raise http_error(e)
    return Response(status_code=204)


# --- Quote templates & pricing ----------------------------------------------

@app.get("/quote-templates")
async def list_quote_templates():
    return [{"id": rid, **asdict(t)} for rid, t in quote_templates.list()]


@app.post("/quote-templates", status_code=201)
async def create_quote_template(template: QuoteTemplate):
    return {"id": quote_templates.create(template)}


@app.get("/quote-templates/{record_id}")
async def get_quote_template(record_id: str):
    try:
        return {"id": record_id, **asdict(quote_templates.get(record_id))}
    except BackOfficeError as e:
        raise http_error(e)


@app.delete("/quote-templates/{record_id}", status_code=204)
async def delete_quote_template(record_id: str):
    try:
        quote_templates.delete(record_id)
    except BackOfficeError as e:
        raise http_error(e)
    return Response(status_code=204)


@app.post("/quote-templates/{record_id}/price")
async def price_stored_template(
    record_id: str,
    pax_count: int = Body(..., embed=True),
    season: str = Body("Normal", embed=True),
):
    try:
        template = quote_templates.get(record_id)
        total = price_template(template, pax_count, season)
    except BackOfficeError as e:
        raise http_error(e)
    return {"template": template.name, "pax_count": pax_count, "season": season, "total": total}


@app.post("/pricing")
async def price_adhoc_template(request: PricingRequest):
    try:
        total = price_template(request.template, request.pax_count, request.season)
    except BackOfficeError as e:
        raise http_error(e)
    return {
        "template": request.template.name,
        "pax_count": request.pax_count,
        "season": request.season,
        "total": total,
    }
