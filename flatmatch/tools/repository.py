"""Collaborator interfaces consumed by the feed, group, and availability tools.

The core never caches or persists records itself. Hosts inject an object
implementing these protocols; ``InMemoryStore`` is a dict-backed one for
seeded demo data and tests, ``FirestoreStore`` lives in firestore_tools.
``create_store`` picks one from REPOSITORY_BACKEND.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from flatmatch.config import config
from flatmatch.models.profile import (
    AvailabilitySchedule,
    HousingProfile,
    LifestyleProfile,
    PreferencesProfile,
    Profile,
    Report,
    SwipeAction,
    SwipeDecision,
)
from flatmatch.tools.firestore_tools import FirestoreStore
from flatmatch.utils.errors import InvalidInputError
from flatmatch.utils.logging_config import logger


@runtime_checkable
class ProfileRepository(Protocol):
    def get_profile(self, user_id: str) -> Optional[Profile]: ...

    def list_candidates(self) -> list[Profile]: ...

    def get_lifestyle(self, user_id: str) -> Optional[LifestyleProfile]: ...

    def get_housing(self, user_id: str) -> Optional[HousingProfile]: ...

    def get_preferences(self, user_id: str) -> Optional[PreferencesProfile]: ...

    def get_availability(self, user_id: str) -> Optional[AvailabilitySchedule]: ...


@runtime_checkable
class SwipeHistoryProvider(Protocol):
    def has_swiped(self, viewer_id: str, candidate_id: str) -> bool: ...


@runtime_checkable
class ReportCountProvider(Protocol):
    def report_count(self, user_id: str) -> int: ...


@runtime_checkable
class RelationshipFlagsProvider(Protocol):
    def was_blocked(self, first_id: str, second_id: str) -> bool: ...

    def was_passed(self, first_id: str, second_id: str) -> bool: ...


class InMemoryStore:
    """Dict-backed implementation of every collaborator protocol."""

    def __init__(self) -> None:
        self._profiles: dict[str, Profile] = {}
        self._lifestyles: dict[str, LifestyleProfile] = {}
        self._housing: dict[str, HousingProfile] = {}
        self._preferences: dict[str, PreferencesProfile] = {}
        self._availability: dict[str, AvailabilitySchedule] = {}
        self._swipes: list[SwipeAction] = []
        self._reports: list[Report] = []
        self._blocks: dict[str, set[str]] = {}

    # ------------------------------------------------------------
    # writes
    # ------------------------------------------------------------
    def add_profile(self, profile: Profile) -> None:
        self._profiles[profile.id] = profile

    def add_lifestyle(self, lifestyle: LifestyleProfile) -> None:
        self._lifestyles[lifestyle.user_id] = lifestyle

    def add_housing(self, housing: HousingProfile) -> None:
        # One active housing mode per user; a new record replaces the old.
        self._housing[housing.user_id] = housing

    def add_preferences(self, preferences: PreferencesProfile) -> None:
        self._preferences[preferences.user_id] = preferences

    def add_availability(self, schedule: AvailabilitySchedule) -> None:
        self._availability[schedule.user_id] = schedule

    def record_swipe(self, swiper_id: str, target_id: str, action: SwipeDecision) -> None:
        self._swipes.append(
            SwipeAction(swiper_id=swiper_id, target_id=target_id, action=action)
        )

    def record_report(self, reporter_id: str, reported_user_id: str, reason: str = "") -> None:
        self._reports.append(
            Report(
                reporter_id=reporter_id,
                reported_user_id=reported_user_id,
                reason=reason,
            )
        )
        logger.info("Report recorded against user=%s", reported_user_id)

    def block_user(self, blocker_id: str, target_id: str) -> None:
        self._blocks.setdefault(blocker_id, set()).add(target_id)

    # ------------------------------------------------------------
    # ProfileRepository
    # ------------------------------------------------------------
    def get_profile(self, user_id: str) -> Optional[Profile]:
        return self._profiles.get(user_id)

    def list_candidates(self) -> list[Profile]:
        return list(self._profiles.values())

    def get_lifestyle(self, user_id: str) -> Optional[LifestyleProfile]:
        return self._lifestyles.get(user_id)

    def get_housing(self, user_id: str) -> Optional[HousingProfile]:
        return self._housing.get(user_id)

    def get_preferences(self, user_id: str) -> Optional[PreferencesProfile]:
        return self._preferences.get(user_id)

    def get_availability(self, user_id: str) -> Optional[AvailabilitySchedule]:
        return self._availability.get(user_id)

    # ------------------------------------------------------------
    # SwipeHistoryProvider / ReportCountProvider
    # ------------------------------------------------------------
    def has_swiped(self, viewer_id: str, candidate_id: str) -> bool:
        return any(
            s.swiper_id == viewer_id and s.target_id == candidate_id
            for s in self._swipes
        )

    def report_count(self, user_id: str) -> int:
        return sum(1 for r in self._reports if r.reported_user_id == user_id)

    # ------------------------------------------------------------
    # RelationshipFlagsProvider
    # ------------------------------------------------------------
    def was_blocked(self, first_id: str, second_id: str) -> bool:
        """True when either user blocked the other."""

        return second_id in self._blocks.get(first_id, set()) or first_id in self._blocks.get(
            second_id, set()
        )

    def was_passed(self, first_id: str, second_id: str) -> bool:
        """True when ``first_id`` swiped pass on ``second_id``."""

        return any(
            s.swiper_id == first_id and s.target_id == second_id and s.action == "pass"
            for s in self._swipes
        )


def create_store(backend: Optional[str] = None):
    """Create the collaborator store named by ``backend``.

    Defaults to REPOSITORY_BACKEND. The Firestore store connects lazily,
    so no client is created until the first lookup.
    """

    backend = backend or config.REPOSITORY_BACKEND
    if backend == "memory":
        return InMemoryStore()
    if backend == "firestore":
        return FirestoreStore(limit=config.MAX_CANDIDATES)
    raise InvalidInputError(f"Unknown repository backend: {backend}")
