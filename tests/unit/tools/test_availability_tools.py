"""
Unit tests for meeting time suggestions.

The suggester walks Monday..Sunday, keeps days everyone marked available
with at least one slot, and uses the first member's first slot. With no
common day it returns three fixed fallbacks.
"""

from datetime import date

from flatmatch.models.profile import AvailabilitySchedule, DayAvailability, TimeSlot, WEEKDAYS
from flatmatch.tools.availability_tools import fallback_times, suggest_times

TODAY = date(2026, 10, 19)
EXPECTED_FALLBACK = [
    "Tomorrow at 2:00 PM",
    "10/21/2026 at 10:00 AM",
    "This weekend at 11:00 AM",
]


def _schedule(user_id, days):
    """days: mapping weekday -> list of (start, end), or None for unavailable."""
    weekly = {}
    for day, slots in days.items():
        if slots is None:
            weekly[day] = DayAvailability(available=False)
        else:
            weekly[day] = DayAvailability(
                available=True,
                time_slots=[TimeSlot(start=s, end=e) for s, e in slots],
            )
    return AvailabilitySchedule(user_id=user_id, weekly_schedule=weekly)


class TestSuggestTimes:
    """Test weekday matching and fallbacks."""

    def test_common_days_use_first_member_first_slot(self, store):
        store.add_availability(
            _schedule("a", {"monday": [("18:00", "20:00")], "wednesday": [("09:00", "11:00")]})
        )
        store.add_availability(
            _schedule(
                "b",
                {
                    "monday": [("10:00", "12:00")],
                    "tuesday": [("10:00", "12:00")],
                    "wednesday": [("15:00", "16:00")],
                },
            )
        )
        assert suggest_times(["a", "b"], store, today=TODAY) == [
            "Monday 18:00",
            "Wednesday 09:00",
        ]

    def test_stops_after_three_days(self, store):
        every_day = {day: [("12:00", "13:00")] for day in WEEKDAYS}
        store.add_availability(_schedule("a", every_day))
        store.add_availability(_schedule("b", every_day))
        assert suggest_times(["a", "b"], store, today=TODAY) == [
            "Monday 12:00",
            "Tuesday 12:00",
            "Wednesday 12:00",
        ]

    def test_no_overlapping_day_returns_fallback(self, store):
        store.add_availability(_schedule("a", {"monday": [("10:00", "11:00")]}))
        store.add_availability(_schedule("b", {"friday": [("10:00", "11:00")]}))
        result = suggest_times(["a", "b"], store, today=TODAY)
        assert result == EXPECTED_FALLBACK
        assert len(result) == 3

    def test_unavailable_day_does_not_qualify(self, store):
        store.add_availability(_schedule("a", {"monday": [("10:00", "11:00")]}))
        store.add_availability(_schedule("b", {"monday": None}))
        assert suggest_times(["a", "b"], store, today=TODAY) == EXPECTED_FALLBACK

    def test_available_day_without_slots_does_not_qualify(self, store):
        store.add_availability(_schedule("a", {"monday": [("10:00", "11:00")]}))
        store.add_availability(_schedule("b", {"monday": []}))
        assert suggest_times(["a", "b"], store, today=TODAY) == EXPECTED_FALLBACK

    def test_missing_schedule_returns_fallback(self, store):
        store.add_availability(_schedule("a", {"monday": [("10:00", "11:00")]}))
        assert suggest_times(["a", "nobody"], store, today=TODAY) == EXPECTED_FALLBACK

    def test_no_members_returns_fallback(self, store):
        assert suggest_times([], store, today=TODAY) == EXPECTED_FALLBACK

    def test_fallback_second_entry_is_two_days_ahead(self):
        assert fallback_times(date(2026, 12, 30))[1] == "1/1/2027 at 10:00 AM"
