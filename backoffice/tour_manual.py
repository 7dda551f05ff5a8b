"""Tour manual generator.

The tour manual is the tour leader's briefing pack: general notes, the
day-by-day itinerary, what is and is not included, border crossings, the
supplier reference list, the rooming list and arriving flights.
"""
import logging
from typing import List

from .formatting import document_filename, format_long_date
from .models import FlightDetail, ItineraryDay, RoomingEntry, SupplierReference, TourManualData

logger = logging.getLogger(__name__)

RULE = "________________________________________"


def _itinerary_block(day: ItineraryDay) -> str:
    status = day.notes or "Confirmed"
    lines = [
        f"Day {day.day} – {format_long_date(day.date)} | {day.location}",
        f"• Activity: {day.activity}",
        f"• Accommodation: {day.accommodation} – {day.room_type} ({status})",
        f"• Meals: B: {day.meals.breakfast} | L: {day.meals.lunch} | D: {day.meals.dinner}",
    ]
    if day.notes:
        lines.append(f"• Notes: {day.notes}")
    lines.append(RULE)
    return "\n".join(lines)


def _supplier_line(supplier: SupplierReference) -> str:
    line = f"• {supplier.name} – {supplier.status}"
    if supplier.reference:
        line += f" ({supplier.reference})"
    if supplier.notes:
        line += f" ({supplier.notes})"
    return line


def _rooming_line(room: RoomingEntry) -> str:
    line = f"Room {room.room_number}\t{room.room_type}\t{room.client_name}"
    if room.booking_reference:
        line += f" ({room.booking_reference})"
    return line


def _flight_block(number: int, flight: FlightDetail) -> str:
    lines = [
        f"Arrival {number}: Flight {flight.flight_number}",
        f"• Flight: {flight.flight_number} arriving at CPT",
        f"• Arrival Date: {format_long_date(flight.arrival_date)}",
        f"• Arrival Time: {flight.arrival_time}",
        f"• Total Passengers: {flight.total_passengers}",
        "Clients:",
    ]
    lines += [f"• {p.name} ({p.booking_reference})" for p in flight.passengers]
    lines.append(RULE)
    return "\n".join(lines)


def generate_tour_manual(data: TourManualData) -> str:
    """Generate the tour manual text."""
    parts: List[str] = [
        f"TOUR MANUAL – {data.tour_code}",
        f"Tour Code: {data.tour_code}",
        f"Departure Reference: {data.departure_reference}",
        f"Clients: {data.client_count} + {data.crew_count} Crew",
        f"Rooming List: {data.rooming_config}",
        RULE,
        "",
        "1. General Notes",
        data.general_notes,
        "",
        RULE,
        "",
        "2. Day-by-Day Itinerary",
        "\n".join(_itinerary_block(d) for d in data.itinerary),
        "",
        "3. Included Services",
        data.included_services,
        "",
        RULE,
        "",
        "4. Included Entrance Fees & Activities",
        data.included_activities,
        "",
        "Not included:",
        data.not_included,
        "",
        RULE,
        "",
        "5. Border Crossings",
        data.border_crossings,
        "",
        RULE,
        "",
        "6. Supplier Reference List",
        "\n".join(_supplier_line(s) for s in data.supplier_references),
        "",
        RULE,
        "",
        "Rooming List",
        "\n".join(_rooming_line(r) for r in data.rooming_list),
        "",
        "\n".join(_flight_block(i, f) for i, f in enumerate(data.flight_details, start=1)),
        "",
    ]
    if data.flight_details:
        parts.append("Attention Needed\n• Additional flight details as required\n")
    else:
        parts.append("")

    manual = "\n".join(parts)
    logger.info(
        f"Generated tour manual: {data.tour_code} / {data.departure_reference}, "
        f"{len(data.itinerary)} days, {len(data.supplier_references)} suppliers"
    )
    return manual


def tour_manual_filename(data: TourManualData) -> str:
    return document_filename("Tour_Manual", data.tour_code, data.departure_reference)
