"""Pre-flight checks for generated documents and imported records.

The generators never refuse incomplete input: staff preview the output and
fix it by hand. These checks collect what looks wrong so the preview can
show it next to the text:
1. Accommodation stays where check-in is not before check-out
2. Overnight lists whose day numbers are not 0..N-1
3. Meal codes and accommodation types outside the known code sets
4. Template placeholders that are not declared as variables
5. Quote rows with an unknown tour type or status
"""
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Sequence

from .models import (
    ACCOMMODATION_TYPES, MANUAL_MEAL_LABELS, MEAL_CODE_LABELS, QUOTE_STATUSES, TOUR_TYPES,
    OvernightEntry, QuoteScheduleRow, TemplateDefinition, TemplateType,
    TourManualData, VoucherData,
)
from .template_renderer import undeclared_variables

logger = logging.getLogger(__name__)


@dataclass
class ValidationReport:
    """Issues found in one document or record."""
    document: str
    issues: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.issues

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["passed"] = self.passed
        return data


def _finish(report: ValidationReport) -> ValidationReport:
    if report.passed:
        logger.debug(f"Validation passed: {report.document}")
    else:
        logger.warning(f"Validation found {len(report.issues)} issue(s) in {report.document}")
        for issue in report.issues:
            logger.warning(f"  - {issue}")
    return report


def validate_voucher(data: VoucherData) -> ValidationReport:
    report = ValidationReport(document=f"voucher {data.booking}")

    if not data.client_name.strip():
        report.issues.append("Client name is empty")

    for i, acc in enumerate(data.accommodations, start=1):
        label = acc.name or f"accommodation {i}"
        if not acc.name.strip():
            report.issues.append(f"Accommodation {i} has no name")
        if acc.date_in is None or acc.date_out is None:
            report.issues.append(f"{label}: missing check-in or check-out date")
        elif acc.date_in >= acc.date_out:
            report.issues.append(
                f"{label}: check-in {acc.date_in.isoformat()} is not before "
                f"check-out {acc.date_out.isoformat()}"
            )

    for i, flight in enumerate(data.flight_departures, start=1):
        if not flight.flight_number.strip():
            report.issues.append(f"Flight departure {i} has no flight number")

    return _finish(report)


def validate_overnight_entries(entries: Sequence[OvernightEntry]) -> ValidationReport:
    report = ValidationReport(document="overnight list")

    days = [e.day for e in entries]
    if days != list(range(len(entries))):
        report.issues.append(f"Day numbers are not 0..{len(entries) - 1}: {days}")

    for entry in entries:
        if entry.type not in ACCOMMODATION_TYPES:
            report.issues.append(f"Day {entry.day}: unknown accommodation type '{entry.type}'")
        for meal in ("breakfast", "lunch", "dinner"):
            code = getattr(entry, meal)
            if code not in MEAL_CODE_LABELS:
                report.issues.append(f"Day {entry.day}: unknown {meal} code '{code}'")

    return _finish(report)


def validate_tour_manual(data: TourManualData) -> ValidationReport:
    report = ValidationReport(document=f"tour manual {data.tour_code}")

    for supplier in data.supplier_references:
        if supplier.status not in ("confirmed", "pending"):
            report.issues.append(f"{supplier.name}: unknown status '{supplier.status}'")

    for day in data.itinerary:
        for meal in ("breakfast", "lunch", "dinner"):
            code = getattr(day.meals, meal)
            if code not in MANUAL_MEAL_LABELS:
                report.issues.append(f"Day {day.day}: unknown {meal} code '{code}'")

    for flight in data.flight_details:
        if flight.passengers and len(flight.passengers) != flight.total_passengers:
            report.issues.append(
                f"Flight {flight.flight_number}: {len(flight.passengers)} passengers listed, "
                f"{flight.total_passengers} expected"
            )

    return _finish(report)


def validate_template(template: TemplateDefinition) -> ValidationReport:
    report = ValidationReport(document=f"template '{template.name}'")

    if not template.name.strip():
        report.issues.append("Template name is empty")
    try:
        TemplateType(template.type)
    except ValueError:
        report.issues.append(f"Unknown template type '{template.type}'")

    missing = undeclared_variables(template)
    if missing:
        report.issues.append(f"Placeholders not declared as variables: {', '.join(missing)}")

    return _finish(report)


def validate_quote_row(row: QuoteScheduleRow) -> ValidationReport:
    report = ValidationReport(document=f"quote {row.quote_number}")

    if row.tour_type not in TOUR_TYPES:
        report.issues.append(f"Unknown tour type '{row.tour_type}'")
    if row.status not in QUOTE_STATUSES:
        report.issues.append(f"Unknown status '{row.status}'")
    if row.pax_count < 0:
        report.issues.append(f"Negative pax count {row.pax_count}")
    if row.departure_date and row.return_date and row.return_date < row.departure_date:
        report.issues.append("Return date is before departure date")

    return _finish(report)
