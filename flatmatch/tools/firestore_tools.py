"""Firestore-backed collaborator store.

Implements the repository, swipe, report, and relationship protocols over
Firestore collections so hosts storing profiles there can hand a
``FirestoreStore`` straight to the feed graph. Every failure is logged and
re-raised as RepositoryUnavailableError; the feed decides whether that
drops one candidate or the whole request.
"""

from __future__ import annotations

import os
from typing import Optional, TypeVar

import firebase_admin
from firebase_admin import credentials, firestore
from pydantic import BaseModel, ValidationError

from flatmatch.models.profile import (
    AvailabilitySchedule,
    HousingProfile,
    LifestyleProfile,
    PreferencesProfile,
    Profile,
)
from flatmatch.utils.errors import RepositoryUnavailableError
from flatmatch.utils.logging_config import logger

ModelT = TypeVar("ModelT", bound=BaseModel)

_db: firestore.Client | None = None


def get_db() -> firestore.Client:
    """Get a Firestore client, initializing Firebase lazily."""
    global _db

    if _db is not None:
        return _db

    try:
        if not firebase_admin._apps:
            cred_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS")
            if not cred_path:
                raise RuntimeError(
                    "GOOGLE_APPLICATION_CREDENTIALS is not set"
                )

            cred = credentials.Certificate(cred_path)
            firebase_admin.initialize_app(cred)

        _db = firestore.client()
        return _db

    except Exception as exc:
        logger.error("Failed to initialize Firestore: %s", exc)
        raise RepositoryUnavailableError(str(exc)) from exc


class FirestoreStore:
    """Profile, swipe, report, and block lookups backed by Firestore.

    Per-user records live in documents keyed by user id:
    profiles/{id}, lifestyles/{id}, housing/{id}, preferences/{id},
    availability/{id}, blocks/{id} (field ``blocked``: list of ids).
    Swipes and reports are queried by field.
    """

    def __init__(self, db: firestore.Client | None = None, limit: int = 500):
        self._db = db
        self.limit = limit

    @property
    def db(self) -> firestore.Client:
        if self._db is None:
            self._db = get_db()
        return self._db

    def _get_record(
        self, collection: str, user_id: str, model: type[ModelT]
    ) -> Optional[ModelT]:
        try:
            doc = self.db.collection(collection).document(user_id).get()
            if not doc.exists:
                return None

            data = doc.to_dict() or {}
            if model is Profile:
                data.setdefault("id", user_id)
            else:
                data.setdefault("userId", user_id)
            return model.model_validate(data)
        except Exception as exc:
            logger.error("Failed to fetch %s/%s: %s", collection, user_id, str(exc))
            raise RepositoryUnavailableError(str(exc)) from exc

    def get_profile(self, user_id: str) -> Optional[Profile]:
        return self._get_record("profiles", user_id, Profile)

    def list_candidates(self) -> list[Profile]:
        """Query profiles for a feed pass, capped at ``limit`` documents.

        Documents that fail validation are logged and skipped so one bad
        record never empties the feed. Only a failing query raises.
        """

        try:
            docs = list(self.db.collection("profiles").limit(self.limit).stream())
        except Exception as exc:
            logger.error("Failed to query profiles: %s", str(exc))
            raise RepositoryUnavailableError(str(exc)) from exc

        profiles = []
        for doc in docs:
            data = doc.to_dict() or {}
            data.setdefault("id", doc.id)
            try:
                profiles.append(Profile.model_validate(data))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed profile %s: %d validation errors",
                    doc.id,
                    exc.error_count(),
                )
        return profiles

    def get_lifestyle(self, user_id: str) -> Optional[LifestyleProfile]:
        return self._get_record("lifestyles", user_id, LifestyleProfile)

    def get_housing(self, user_id: str) -> Optional[HousingProfile]:
        return self._get_record("housing", user_id, HousingProfile)

    def get_preferences(self, user_id: str) -> Optional[PreferencesProfile]:
        return self._get_record("preferences", user_id, PreferencesProfile)

    def get_availability(self, user_id: str) -> Optional[AvailabilitySchedule]:
        return self._get_record("availability", user_id, AvailabilitySchedule)

    def _swipes(self, swiper_id: str, target_id: str) -> list[dict]:
        query = (
            self.db.collection("swipes")
            .where("swiperId", "==", swiper_id)
            .where("targetId", "==", target_id)
        )
        return [doc.to_dict() or {} for doc in query.stream()]

    def has_swiped(self, viewer_id: str, candidate_id: str) -> bool:
        try:
            return bool(self._swipes(viewer_id, candidate_id))
        except Exception as exc:
            logger.error("Failed to fetch swipes: %s", str(exc))
            raise RepositoryUnavailableError(str(exc)) from exc

    def was_passed(self, first_id: str, second_id: str) -> bool:
        try:
            return any(s.get("action") == "pass" for s in self._swipes(first_id, second_id))
        except Exception as exc:
            logger.error("Failed to fetch swipes: %s", str(exc))
            raise RepositoryUnavailableError(str(exc)) from exc

    def report_count(self, user_id: str) -> int:
        try:
            query = self.db.collection("reports").where("reportedUserId", "==", user_id)
            return sum(1 for _ in query.stream())
        except Exception as exc:
            logger.error("Failed to count reports: %s", str(exc))
            raise RepositoryUnavailableError(str(exc)) from exc

    def _blocked_by(self, user_id: str) -> set[str]:
        doc = self.db.collection("blocks").document(user_id).get()
        if not doc.exists:
            return set()
        return set((doc.to_dict() or {}).get("blocked", []))

    def was_blocked(self, first_id: str, second_id: str) -> bool:
        """True when either user blocked the other."""

        try:
            return second_id in self._blocked_by(first_id) or first_id in self._blocked_by(
                second_id
            )
        except Exception as exc:
            logger.error("Failed to fetch blocks: %s", str(exc))
            raise RepositoryUnavailableError(str(exc)) from exc
