from datetime import date

from backoffice.models import (
    DayMeals, FlightDetail, FlightPassenger, ItineraryDay, RoomingEntry,
    SupplierReference, TourManualData,
)
from backoffice.tour_manual import RULE, generate_tour_manual, tour_manual_filename


def make_manual(**overrides):
    data = dict(
        tour_code="ZZK Series",
        departure_reference="ZZK250828R",
        client_count=13,
        crew_count=2,
        rooming_config="3x Double, 2x Twin, 3x Single",
        general_notes="• Vehicle: Overland truck",
        included_services="• All breakfasts.",
        included_activities="• Fish River Canyon",
        not_included="• Flights & airport transfers",
        border_crossings="• South Africa → Namibia (Vioolsdrif/Nakop)",
        supplier_references=[
            SupplierReference(name="Okiep Country Lodge"),
            SupplierReference(name="NWR Ai-Ais", reference="Ref: 681139.1"),
            SupplierReference(name="Kupferquelle, Etosha", status="pending", notes="FB"),
        ],
        itinerary=[
            ItineraryDay(
                day=1, date=date(2025, 8, 28), location="Cape Town", activity="Arrival",
                accommodation="The Fountains Hotel", room_type="Double",
                meals=DayMeals(breakfast="X", lunch="X", dinner="P"),
            ),
            ItineraryDay(
                day=2, date=date(2025, 8, 29), location="Springbok", activity="Drive north",
                accommodation="Okiep Country Lodge", room_type="Twin",
                meals=DayMeals(breakfast="P", lunch="X", dinner="P"), notes="Late check-in",
            ),
        ],
        rooming_list=[
            RoomingEntry(room_number="1", room_type="Double", client_name="John Smith", booking_reference="BK1"),
            RoomingEntry(room_number="2", room_type="Twin", client_name="Jane Doe"),
        ],
        flight_details=[
            FlightDetail(
                flight_number="SA 41", arrival_date=date(2025, 8, 28), arrival_time="14h20",
                total_passengers=2,
                passengers=[
                    FlightPassenger(name="John Smith", booking_reference="BK1"),
                    FlightPassenger(name="Jane Doe", booking_reference="BK2"),
                ],
            ),
        ],
    )
    data.update(overrides)
    return TourManualData(**data)


def test_heading():
    text = generate_tour_manual(make_manual())
    lines = text.split("\n")
    assert lines[0] == "TOUR MANUAL – ZZK Series"
    assert lines[1] == "Tour Code: ZZK Series"
    assert lines[2] == "Departure Reference: ZZK250828R"
    assert lines[3] == "Clients: 13 + 2 Crew"
    assert lines[4] == "Rooming List: 3x Double, 2x Twin, 3x Single"
    assert lines[5] == RULE


def test_sections_in_order():
    text = generate_tour_manual(make_manual())
    headings = [
        "1. General Notes", "2. Day-by-Day Itinerary", "3. Included Services",
        "4. Included Entrance Fees & Activities", "Not included:", "5. Border Crossings",
        "6. Supplier Reference List", "Rooming List\n",
    ]
    positions = [text.index(h) for h in headings]
    assert positions == sorted(positions)


def test_itinerary_days():
    text = generate_tour_manual(make_manual())
    assert (
        "Day 1 – 28 August 2025 | Cape Town\n"
        "• Activity: Arrival\n"
        "• Accommodation: The Fountains Hotel – Double (Confirmed)\n"
        "• Meals: B: X | L: X | D: P\n"
        f"{RULE}"
    ) in text
    assert "• Accommodation: Okiep Country Lodge – Twin (Late check-in)" in text
    assert "• Notes: Late check-in" in text


def test_supplier_references():
    text = generate_tour_manual(make_manual())
    assert "• Okiep Country Lodge – confirmed\n" in text
    assert "• NWR Ai-Ais – confirmed (Ref: 681139.1)" in text
    assert "• Kupferquelle, Etosha – pending (FB)" in text


def test_rooming_list():
    text = generate_tour_manual(make_manual())
    assert "Room 1\tDouble\tJohn Smith (BK1)\nRoom 2\tTwin\tJane Doe" in text


def test_flights_and_attention_trailer():
    text = generate_tour_manual(make_manual())
    assert "Arrival 1: Flight SA 41" in text
    assert "• Arrival Date: 28 August 2025" in text
    assert "Clients:\n• John Smith (BK1)\n• Jane Doe (BK2)" in text
    assert "Attention Needed\n• Additional flight details as required" in text


def test_no_flights_no_attention_trailer():
    text = generate_tour_manual(make_manual(flight_details=[]))
    assert "Arrival 1" not in text
    assert "Attention Needed" not in text


def test_empty_manual_does_not_fail():
    data = TourManualData(tour_code="X", departure_reference="Y", client_count=0, crew_count=0)
    text = generate_tour_manual(data)
    assert "2. Day-by-Day Itinerary\n\n" in text
    assert text == generate_tour_manual(data)


def test_filename():
    assert tour_manual_filename(make_manual()) == "Tour_Manual_ZZK_Series_ZZK250828R.txt"
