"""Confirmation voucher generator.

Turns a VoucherData object into the plain-text confirmation voucher that is
sent to the client and the suppliers. The output is a pure function of the
input: no clock, no lookups.
"""
import logging
from typing import List

from .formatting import document_filename, format_long_date
from .models import Accommodation, FlightDeparture, PassengerRoom, VoucherData

logger = logging.getLogger(__name__)

DEFAULT_LETTERHEAD = (
    "38 Chilwan Crescent, Helderberg Industrial Park, Somerset West, South Africa 7130.  "
    "TEL: +27 21 845 6310 / FAX: +27 21 845 4357 / Email: nicholas@nomadtours.co.za"
)

LABEL_WIDTH = 26


def _flight_block(flight: FlightDeparture) -> str:
    flown = format_long_date(flight.date)
    return (
        f"{flown}:\n"
        f"\n"
        f"{flight.passengers} fly out on {flown} on Flight {flight.flight_number} "
        f"departs {flight.departure_time}."
    )


def _passenger_line(room: PassengerRoom) -> str:
    return f"{room.names} – sharing {room.room_type.lower()}"


def _accommodation_block(acc: Accommodation) -> str:
    lines = [
        f"{'Accommodation:'.ljust(LABEL_WIDTH)}{acc.name}",
        "",
        acc.address,
    ]
    if acc.website:
        lines.append(acc.website)
    lines += [
        f"Tel: {acc.phone}",
        "",
        f"Booking Number: {acc.booking_number}",
        "",
        f"{'Type'.ljust(LABEL_WIDTH)}{acc.room_type}",
        "",
        f"{'Date in:'.ljust(LABEL_WIDTH)}{format_long_date(acc.date_in)}",
        f"{'Date out:'.ljust(LABEL_WIDTH)}{format_long_date(acc.date_out)}",
        "",
        f"Meal included – {acc.meals}",
        "",
    ]
    if acc.notes:
        lines += [acc.notes, ""]
    return "\n".join(lines)


def generate_voucher(data: VoucherData, letterhead: str = DEFAULT_LETTERHEAD) -> str:
    """Generate the confirmation voucher text."""
    phones = ", ".join(p for p in data.emergency_phones if p)
    departure = format_long_date(data.departure_date)
    room_count = len(data.passengers)

    sections: List[str] = [
        letterhead,
        "CONFIRMATION VOUCHER",
        "Nomad Emergency Telephone Number:",
        f"NOMAD: {phones}",
        f"Client: {data.client_name}",
        f"Date: {format_long_date(data.date)}",
        f"Booking: {data.booking}",
        f"Departure Date: {departure}",
        f"Booking Reference:\n{data.booking_reference}",
        f"{departure}:",
        "Arrival transfer with Nomad truck.",
        "\n".join(_flight_block(f) for f in data.flight_departures),
        "Nomad Crew:",
        data.crew.driver,
        data.crew.tour_leader,
        f"Passengers: {room_count}x Double / twin rooms",
        f"{room_count}x double rooms",
        "\n".join(_passenger_line(p) for p in data.passengers),
        "ACCOMMODATION",
        "\n".join(_accommodation_block(a) for a in data.accommodations),
    ]
    voucher = "\n\n".join(sections)

    logger.info(
        f"Generated confirmation voucher: booking={data.booking}, "
        f"{len(data.flight_departures)} flights, {len(data.accommodations)} accommodations"
    )
    return voucher


def voucher_filename(data: VoucherData) -> str:
    """e.g. 'Confirmation_Voucher_BEN101025_Borcherds_Group.txt'."""
    return document_filename("Confirmation_Voucher", data.booking, data.client_name)
