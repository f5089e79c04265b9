"""Suggest meeting times (e.g. flat viewings) from weekly schedules."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from flatmatch.models.profile import WEEKDAYS
from flatmatch.tools.repository import ProfileRepository
from flatmatch.utils.logging_config import logger

MAX_SUGGESTIONS = 3


def fallback_times(today: Optional[date] = None) -> list[str]:
    """Fixed suggestions used when schedules never line up."""

    today = today or date.today()
    day_after = today + timedelta(days=2)
    return [
        "Tomorrow at 2:00 PM",
        f"{day_after.month}/{day_after.day}/{day_after.year} at 10:00 AM",
        "This weekend at 11:00 AM",
    ]


def suggest_times(
    member_ids: list[str],
    repository: ProfileRepository,
    today: Optional[date] = None,
) -> list[str]:
    """Return up to three "<Weekday> <start>" strings everyone can make.

    A weekday qualifies when every member has it marked available with at
    least one slot. The suggested time is the first slot of the first
    member; slot ranges are not intersected across members.
    """

    if not member_ids:
        return fallback_times(today)

    schedules = [repository.get_availability(user_id) for user_id in member_ids]
    if any(schedule is None for schedule in schedules):
        logger.debug("suggest_times missing schedule, using fallback")
        return fallback_times(today)

    suggestions: list[str] = []
    for day in WEEKDAYS:
        days = [schedule.weekly_schedule.get(day) for schedule in schedules]
        if all(d is not None and d.available and d.time_slots for d in days):
            first_slot = days[0].time_slots[0]
            suggestions.append(f"{day.capitalize()} {first_slot.start}")
            if len(suggestions) == MAX_SUGGESTIONS:
                break

    if not suggestions:
        return fallback_times(today)
    return suggestions
