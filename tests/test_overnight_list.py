from datetime import date

import pytest

from backoffice.errors import InvalidArgument
from backoffice.models import OvernightEntry
from backoffice.overnight_list import (
    FOOTER, HEADER, add_entry, generate_overnight_list, overnight_list_filename,
    redate_entries, remove_entry,
)


def make_entries(count=4, start=date(2025, 9, 13)):
    towns = ["Cape Town", "Orange River", "Fish River Canyon", "Sesriem", "Swakopmund", "Kamanjab"]
    return redate_entries(
        [
            OvernightEntry(
                day=i,
                date=None,
                start=towns[i],
                end=towns[i + 1],
                accommodation=f"Camp {i}",
            )
            for i in range(count)
        ],
        start,
    )


def test_empty_list_is_header_and_footer_only():
    text = generate_overnight_list([])
    assert text == f"{HEADER}\n\n\n{FOOTER}"
    assert FOOTER == "-- 0 = MEAL INCLUDED 1= MEAL COOKED FROM TRUCK X= FOR CLIENT OWN EXPENSE"


def test_entry_lines_are_tab_separated():
    entries = [
        OvernightEntry(
            day=0, date=date(2025, 9, 13), start="Cape Town", end="Cape Town",
            activity="0", accommodation="Sunflower Stop", type="Dorm Rooms",
            breakfast="0", lunch="1", dinner="X",
        ),
        OvernightEntry(
            day=1, date=date(2025, 10, 1), start="Bulawayo", end="Tshipise",
            accommodation="Mapesu", notes="Late start",
        ),
    ]
    lines = generate_overnight_list(entries).split("\n")
    assert lines[0] == HEADER
    assert lines[1] == "0\t13-Sep-25\tCape Town\tCape Town\t0\tSunflower Stop\tDorm Rooms\t0\t1\tX\t"
    assert lines[2] == "1\t1-Oct-25\tBulawayo\tTshipise\t0\tMapesu\tCamping\t0\t0\t0\tLate start"
    assert lines[-1] == FOOTER


def test_remove_renumbers_following_days():
    entries = make_entries(5)
    result = remove_entry(entries, 1)
    assert [e.day for e in result] == [0, 1, 2, 3]
    assert [e.start for e in result] == ["Cape Town", "Fish River Canyon", "Sesriem", "Swakopmund"]
    # the input list is left untouched
    assert [e.day for e in entries] == [0, 1, 2, 3, 4]


def test_remove_last_and_only_entry():
    assert remove_entry(make_entries(1), 0) == []


def test_remove_out_of_range():
    with pytest.raises(InvalidArgument):
        remove_entry(make_entries(2), 2)
    with pytest.raises(InvalidArgument):
        remove_entry(make_entries(2), -1)


def test_add_entry_continues_numbering_and_dates():
    start = date(2025, 9, 13)
    result = add_entry(make_entries(3, start), start)
    new = result[-1]
    assert new.day == 3
    assert new.date == date(2025, 9, 16)
    assert (new.activity, new.type, new.breakfast, new.lunch, new.dinner) == ("0", "Camping", "0", "0", "0")


def test_add_entry_to_empty_list():
    result = add_entry([], date(2025, 9, 13))
    assert [(e.day, e.date) for e in result] == [(0, date(2025, 9, 13))]


def test_redate_from_new_start():
    entries = redate_entries(make_entries(3), date(2026, 1, 30))
    assert [e.date for e in entries] == [date(2026, 1, 30), date(2026, 1, 31), date(2026, 2, 1)]


def test_filename():
    assert overnight_list_filename(date(2025, 9, 13)) == "Overnight_List_2025-09-13.txt"
