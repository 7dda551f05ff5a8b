"""Data models for the tour operations back-office.

All models are plain frozen value objects. The UI/API layer builds them from
request data; the generators, the spreadsheet bridge and the pricing
evaluator only read them.
"""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Dict, List, Optional


class TemplateType(str, Enum):
    BOOKING_REQUEST = "booking_request"
    CONFIRMATION = "confirmation"
    RELEASE = "release"


TOUR_TYPES = ("FIT", "Group")

QUOTE_STATUSES = ("Pending", "Confirmed", "Not Accepted", "Requote Requested")

# Overnight list meal codes
MEAL_CODE_LABELS = {
    "0": "MEAL INCLUDED",
    "1": "MEAL COOKED FROM TRUCK",
    "X": "FOR CLIENT OWN EXPENSE",
}

# Tour manual meal codes
MANUAL_MEAL_LABELS = {
    "P": "Provided (by lodge/supplier)",
    "X": "Own account",
}

ACCOMMODATION_TYPES = (
    "Dorm Rooms",
    "Camping",
    "Twin Rooms",
    "Single Rooms",
    "Double Rooms",
    "Crew Rooms",
)


# --- E-mail templates -------------------------------------------------------

@dataclass(frozen=True)
class TemplateDefinition:
    """A supplier e-mail template with ``{{var}}`` placeholders."""
    name: str
    type: TemplateType
    subject: str
    body: str
    variables: List[str] = field(default_factory=list)
    is_active: bool = True


@dataclass(frozen=True)
class RenderedMessage:
    subject: str
    body: str


@dataclass(frozen=True)
class RenderRequest:
    template: TemplateDefinition
    context: Dict[str, Optional[str]] = field(default_factory=dict)


# --- Confirmation voucher ---------------------------------------------------

@dataclass(frozen=True)
class FlightDeparture:
    """A group of passengers flying out on the same flight."""
    date: Optional[date]
    passengers: str
    flight_number: str
    departure_time: str


@dataclass(frozen=True)
class PassengerRoom:
    room_number: str
    room_type: str
    names: str


@dataclass(frozen=True)
class Accommodation:
    """One accommodation block on a confirmation voucher."""
    name: str
    address: str
    phone: str
    booking_number: str
    room_type: str
    date_in: Optional[date]
    date_out: Optional[date]
    meals: str
    website: str = ""
    notes: str = ""


@dataclass(frozen=True)
class NomadCrew:
    driver: str = "Driver"
    tour_leader: str = "Tour Leader"


@dataclass(frozen=True)
class VoucherData:
    """Everything printed on a client confirmation voucher."""
    client_name: str
    date: Optional[date]
    booking: str
    departure_date: Optional[date]
    booking_reference: str
    emergency_phones: List[str] = field(default_factory=list)
    crew: NomadCrew = field(default_factory=NomadCrew)
    passengers: List[PassengerRoom] = field(default_factory=list)
    flight_departures: List[FlightDeparture] = field(default_factory=list)
    accommodations: List[Accommodation] = field(default_factory=list)


# --- Overnight list ---------------------------------------------------------

@dataclass(frozen=True)
class OvernightEntry:
    """One night of an overland tour.

    Meal codes: "0" included, "1" cooked from the truck, "X" own expense.
    """
    day: int
    date: Optional[date]
    start: str
    end: str
    activity: str = "0"
    accommodation: str = ""
    type: str = "Camping"
    breakfast: str = "0"
    lunch: str = "0"
    dinner: str = "0"
    notes: str = ""


@dataclass(frozen=True)
class OvernightList:
    tour_start_date: date
    entries: List[OvernightEntry] = field(default_factory=list)


@dataclass(frozen=True)
class OvernightRemoval:
    entries: List[OvernightEntry]
    index: int


@dataclass(frozen=True)
class OvernightEdit:
    tour_start_date: date
    entries: List[OvernightEntry] = field(default_factory=list)


# --- Tour manual ------------------------------------------------------------

@dataclass(frozen=True)
class SupplierReference:
    name: str
    status: str = "confirmed"  # 'confirmed' or 'pending'
    reference: str = ""
    notes: str = ""


@dataclass(frozen=True)
class DayMeals:
    breakfast: str = "X"
    lunch: str = "X"
    dinner: str = "X"


@dataclass(frozen=True)
class ItineraryDay:
    day: int
    date: Optional[date]
    location: str
    activity: str
    accommodation: str
    room_type: str
    meals: DayMeals = field(default_factory=DayMeals)
    notes: str = ""


@dataclass(frozen=True)
class RoomingEntry:
    room_number: str
    room_type: str
    client_name: str
    booking_reference: str = ""


@dataclass(frozen=True)
class FlightPassenger:
    name: str
    booking_reference: str


@dataclass(frozen=True)
class FlightDetail:
    flight_number: str
    arrival_date: Optional[date]
    arrival_time: str
    total_passengers: int
    passengers: List[FlightPassenger] = field(default_factory=list)


@dataclass(frozen=True)
class TourManualData:
    """Tour manual handed to the tour leader before departure."""
    tour_code: str
    departure_reference: str
    client_count: int
    crew_count: int
    rooming_config: str = ""
    general_notes: str = ""
    included_services: str = ""
    included_activities: str = ""
    not_included: str = ""
    border_crossings: str = ""
    supplier_references: List[SupplierReference] = field(default_factory=list)
    itinerary: List[ItineraryDay] = field(default_factory=list)
    rooming_list: List[RoomingEntry] = field(default_factory=list)
    flight_details: List[FlightDetail] = field(default_factory=list)


# --- Quote schedule ---------------------------------------------------------

@dataclass(frozen=True)
class QuoteScheduleRow:
    """One line of the quote schedule spreadsheet.

    Dates are ``YYYY-MM-DD`` strings, or "" when unknown.
    """
    quote_number: str = ""
    client_name: str = ""
    agent_name: str = ""
    tour_type: str = "FIT"
    departure_date: str = ""
    return_date: str = ""
    pax_count: int = 0
    quote_date: str = ""
    valid_until: str = ""
    status: str = "Pending"
    total_amount: Decimal = Decimal("0")
    currency: str = "ZAR"
    consultant: str = ""
    notes: str = ""


# --- Quote templates & pricing ----------------------------------------------

@dataclass(frozen=True)
class TemplateService:
    """A priced service line of a quote template.

    ``formula`` is descriptive only; pricing uses a fixed computation.
    """
    service_type: str
    base_price: Decimal
    currency: str = "ZAR"
    formula: str = ""
    service_name: str = ""
    description: str = ""
    quantity: int = 1
    is_included: bool = True


@dataclass(frozen=True)
class PricingRule:
    name: str
    formula: str = ""
    description: str = ""
    variables: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class QuoteTemplate:
    name: str
    tour_type: str
    duration: int
    services: List[TemplateService] = field(default_factory=list)
    formulas: List[PricingRule] = field(default_factory=list)
    description: str = ""
    is_active: bool = True


@dataclass(frozen=True)
class PricingRequest:
    template: QuoteTemplate
    pax_count: int
    season: str = "Normal"
