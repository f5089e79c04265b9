"""Typed records for profiles and the sub-records scored against them.

Every model accepts snake_case field names as well as the camelCase keys
stored documents use (``hasRoom``, ``maxDistanceKm``), so a fetched document
can be validated directly. Absent data is ``None``, never a sentinel.
"""

from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from flatmatch.config import config

Cleanliness = Literal["relaxed", "average", "meticulous"]
SleepSchedule = Literal["early", "flexible", "night"]
GuestFrequency = Literal["never", "sometimes", "often"]
NoiseTolerance = Literal["low", "medium", "high"]
HousingMode = Literal["offer", "seek"]
SwipeDecision = Literal["like", "pass"]

WEEKDAYS = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class _Record(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class GeoPoint(_Record):
    lat: float
    lng: float


class Profile(_Record):
    """Public profile of a user taking part in roommate search."""

    id: str
    age: int
    city: str = ""
    university: str = ""
    # True when the user offers a room, False when seeking one.
    has_room: bool = False
    location: Optional[GeoPoint] = None
    paused: bool = False
    photos: list[str] = Field(default_factory=list)
    first_name: Optional[str] = None


class LifestyleProfile(_Record):
    user_id: str
    cleanliness: Optional[Cleanliness] = None
    sleep: Optional[SleepSchedule] = None
    smoker: Optional[bool] = None
    pets_ok: Optional[bool] = None
    guests: Optional[GuestFrequency] = None
    noise: Optional[NoiseTolerance] = None
    hobbies: list[str] = Field(default_factory=list)
    religion: Optional[str] = None
    show_religion: bool = False
    political_view: Optional[str] = None
    show_gender: bool = False


class HousingProfile(_Record):
    """Either a room offer or a room search, selected by ``mode``.

    Only the fields of the active mode are meaningful; switching mode
    replaces them.
    """

    user_id: str
    mode: HousingMode

    # offer
    neighborhood: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    rent: Optional[float] = None
    currency: Optional[str] = None
    bills_included: bool = False
    available_from: Optional[date] = None
    available_to: Optional[date] = None

    # seek
    budget_min: Optional[float] = None
    budget_max: Optional[float] = None
    target_neighborhoods: list[str] = Field(default_factory=list)
    desired_from: Optional[date] = None
    desired_to: Optional[date] = None

    @property
    def has_room(self) -> bool:
        return self.mode == "offer"

    @property
    def move_in_date(self) -> Optional[date]:
        """First day the room is free (offer) or wanted (seek)."""

        return self.available_from if self.has_room else self.desired_from


class PreferencesProfile(_Record):
    """The viewer's filter policy for feed generation."""

    user_id: str
    age_min: Optional[int] = None
    age_max: Optional[int] = None
    city_only: bool = False
    university_filter: bool = False
    max_distance_km: Optional[float] = None
    quiz_answers: dict[str, str] = Field(default_factory=dict)
    must_haves: list[str] = Field(default_factory=list)
    dealbreakers: list[str] = Field(default_factory=list)


class Penalties(_Record):
    # The pair has a block relationship.
    blocked: bool = False
    # The candidate already passed on the viewer.
    passed: bool = False


class CompatibilityResult(_Record):
    score: int = Field(ge=0, le=100)
    reasons: list[str] = Field(default_factory=list)


class TimeSlot(_Record):
    start: str
    end: str


class DayAvailability(_Record):
    available: bool = False
    time_slots: list[TimeSlot] = Field(default_factory=list)


class AvailabilitySchedule(_Record):
    """Weekly schedule keyed by lower-case weekday name."""

    user_id: str
    weekly_schedule: dict[str, DayAvailability] = Field(default_factory=dict)


class Group(_Record):
    id: Optional[str] = None
    name: str
    creator_id: str
    member_ids: list[str] = Field(min_length=2)

    @field_validator("member_ids")
    @classmethod
    def _within_group_size(cls, member_ids: list[str]) -> list[str]:
        if len(dict.fromkeys(member_ids)) > config.MAX_GROUP_SIZE:
            raise ValueError(f"at most {config.MAX_GROUP_SIZE} members allowed")
        return member_ids


class SwipeAction(_Record):
    swiper_id: str
    target_id: str
    action: SwipeDecision


class Report(_Record):
    reporter_id: str
    reported_user_id: str
    reason: str = ""


class FeedEntry(_Record):
    """One ranked candidate in a generated feed."""

    profile: Profile
    distance_km: Optional[float] = None
    compatibility: CompatibilityResult
    lifestyle: Optional[LifestyleProfile] = None
    housing: Optional[HousingProfile] = None
