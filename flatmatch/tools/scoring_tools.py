"""Deterministic compatibility scoring between two roommate profiles.

The model is additive: each factor contributes independently, the total is
clamped to 0-100 and rounded once at the end. Every factor guards on the
presence of the data it needs, so partial profiles score lower instead of
failing.
"""

from __future__ import annotations

import math
from typing import Optional

from flatmatch.config import config
from flatmatch.models.profile import (
    CompatibilityResult,
    HousingProfile,
    LifestyleProfile,
    Penalties,
    PreferencesProfile,
    Profile,
)

WEIGHTS = {
    "SAME_UNIVERSITY": 30,
    "SAME_CITY_OTHER_UNIVERSITY": 20,
    "SAME_CITY": 20,
    "BUDGET_FIT": 15,
    "LIFESTYLE_MATCH": 3,
    "LIFESTYLE_CAP": 15,
    "HOBBIES": 8,
    "QUIZ": 7,
    "MOVE_IN": 3,
    "COMPLEMENTARY_HOUSING": 2,
    "RELIGION": 5,
    "GENDER_VISIBILITY": 5,
    "BLOCKED_PENALTY": -10,
    "REPEATED_PASS_PENALTY": -10,
}

MOVE_IN_WINDOW_DAYS = 30

_CLEANLINESS_LABELS = {
    "meticulous": "Both very clean",
    "average": "Both moderately clean",
    "relaxed": "Both relaxed about cleanliness",
}
_SLEEP_LABELS = {
    "early": "Both early birds",
    "night": "Both night owls",
    "flexible": "Both flexible sleepers",
}

Contribution = tuple[float, list[str]]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _same_currency(first: Optional[str], second: Optional[str]) -> bool:
    if first and second:
        return first.upper() == second.upper()
    return True


def _valid_range(low: Optional[float], high: Optional[float]) -> bool:
    return low is not None and high is not None and low <= high


def calculate_affiliation_score(viewer: Profile, candidate: Profile) -> Contribution:
    """University and city factors (1-3)."""

    score = 0.0
    reasons: list[str] = []

    same_university = bool(viewer.university) and viewer.university == candidate.university
    same_city = bool(viewer.city) and viewer.city == candidate.city

    if same_university:
        score += WEIGHTS["SAME_UNIVERSITY"]
        reasons.append(f"Both study at {viewer.university}")

    if same_city and not same_university:
        score += WEIGHTS["SAME_CITY_OTHER_UNIVERSITY"]
        reasons.append(f"Different schools, both in {viewer.city}")

    if same_city:
        score += WEIGHTS["SAME_CITY"]
        reasons.append(f"Both in {viewer.city}")

    return score, reasons


def _offer_fit(offer: HousingProfile, seek: HousingProfile) -> float:
    rent = offer.rent
    low, high = seek.budget_min, seek.budget_max
    if rent is None or not _valid_range(low, high):
        return 0.0
    if not _same_currency(offer.currency, seek.currency):
        return 0.0
    if rent < low or rent > high:
        return 0.0

    if high == low:
        position = 0.5
    else:
        position = (rent - low) / (high - low)
    return WEIGHTS["BUDGET_FIT"] * (1 - abs(position - 0.5) * 2)


def _overlap_fit(first: HousingProfile, second: HousingProfile) -> float:
    if not _valid_range(first.budget_min, first.budget_max):
        return 0.0
    if not _valid_range(second.budget_min, second.budget_max):
        return 0.0
    if not _same_currency(first.currency, second.currency):
        return 0.0

    overlap = min(first.budget_max, second.budget_max) - max(
        first.budget_min, second.budget_min
    )
    if overlap <= 0:
        return 0.0

    widest = max(
        first.budget_max - first.budget_min,
        second.budget_max - second.budget_min,
    )
    return WEIGHTS["BUDGET_FIT"] * (overlap / widest)


def calculate_budget_fit(
    viewer_housing: Optional[HousingProfile],
    candidate_housing: Optional[HousingProfile],
) -> Contribution:
    """Budget factor (4).

    Offer vs. seek peaks when the rent sits at the midpoint of the seeker's
    budget and falls to zero at either bound. Seek vs. seek scales with the
    budget overlap relative to the wider of the two ranges.
    """

    if viewer_housing is None or candidate_housing is None:
        return 0.0, []

    if viewer_housing.has_room and not candidate_housing.has_room:
        score = _offer_fit(viewer_housing, candidate_housing)
        reason = "Rent fits the budget"
    elif candidate_housing.has_room and not viewer_housing.has_room:
        score = _offer_fit(candidate_housing, viewer_housing)
        reason = "Rent fits the budget"
    elif not viewer_housing.has_room and not candidate_housing.has_room:
        score = _overlap_fit(viewer_housing, candidate_housing)
        reason = "Similar budget range"
    else:
        return 0.0, []

    return (score, [reason]) if score > 0 else (0.0, [])


def calculate_lifestyle_similarity(
    viewer_lifestyle: Optional[LifestyleProfile],
    candidate_lifestyle: Optional[LifestyleProfile],
) -> Contribution:
    """Lifestyle factor (5): 3 points per matching habit, capped at 15."""

    if viewer_lifestyle is None or candidate_lifestyle is None:
        return 0.0, []

    mine, theirs = viewer_lifestyle, candidate_lifestyle
    reasons: list[str] = []

    if mine.cleanliness is not None and mine.cleanliness == theirs.cleanliness:
        reasons.append(_CLEANLINESS_LABELS[mine.cleanliness])
    if mine.sleep is not None and mine.sleep == theirs.sleep:
        reasons.append(_SLEEP_LABELS[mine.sleep])
    if mine.guests is not None and mine.guests == theirs.guests:
        reasons.append("Similar social habits")
    if mine.smoker is not None and mine.smoker == theirs.smoker:
        reasons.append("Both smoke" if mine.smoker else "Both non-smokers")
    if mine.pets_ok is not None and mine.pets_ok == theirs.pets_ok:
        reasons.append("Both pet-friendly" if mine.pets_ok else "Both prefer no pets")

    score = min(len(reasons) * WEIGHTS["LIFESTYLE_MATCH"], WEIGHTS["LIFESTYLE_CAP"])
    return float(score), reasons


def calculate_hobby_overlap(
    viewer_lifestyle: Optional[LifestyleProfile],
    candidate_lifestyle: Optional[LifestyleProfile],
) -> Contribution:
    """Hobby factor (6): Jaccard similarity of the two hobby sets."""

    if viewer_lifestyle is None or candidate_lifestyle is None:
        return 0.0, []

    mine = set(viewer_lifestyle.hobbies)
    theirs = set(candidate_lifestyle.hobbies)
    union = mine | theirs
    shared = sorted(mine & theirs)
    if not union or not shared:
        return 0.0, []

    score = WEIGHTS["HOBBIES"] * len(shared) / len(union)
    if len(shared) >= 3:
        reason = f"Share {len(shared)} hobbies"
    else:
        reason = f"Both enjoy {' & '.join(shared)}"
    return score, [reason]


def calculate_quiz_alignment(
    viewer_preferences: Optional[PreferencesProfile],
    candidate_preferences: Optional[PreferencesProfile],
) -> Contribution:
    """Quiz factor (7): share of identical answers among common questions."""

    if viewer_preferences is None or candidate_preferences is None:
        return 0.0, []

    mine = viewer_preferences.quiz_answers
    theirs = candidate_preferences.quiz_answers
    common = [key for key in mine if key in theirs]
    if not common:
        return 0.0, []

    matching = sum(1 for key in common if mine[key] == theirs[key])
    if matching == 0:
        return 0.0, []

    score = WEIGHTS["QUIZ"] * matching / len(common)
    return score, [f"Answered {matching} of {len(common)} quiz questions alike"]


def calculate_move_in_alignment(
    viewer_housing: Optional[HousingProfile],
    candidate_housing: Optional[HousingProfile],
) -> Contribution:
    """Move-in factor (8): linear decay to zero over a 30 day gap."""

    if viewer_housing is None or candidate_housing is None:
        return 0.0, []

    mine = viewer_housing.move_in_date
    theirs = candidate_housing.move_in_date
    if mine is None or theirs is None:
        return 0.0, []

    gap_days = abs((mine - theirs).days)
    if gap_days >= MOVE_IN_WINDOW_DAYS:
        return 0.0, []

    score = WEIGHTS["MOVE_IN"] * (1 - gap_days / MOVE_IN_WINDOW_DAYS)
    return score, ["Similar move-in dates"]


def calculate_complementary_housing(viewer: Profile, candidate: Profile) -> Contribution:
    """Housing mode factor (9)."""

    if viewer.has_room != candidate.has_room:
        return float(WEIGHTS["COMPLEMENTARY_HOUSING"]), [
            "One has a room, the other is looking"
        ]
    return 0.0, []


def calculate_religion_match(
    viewer_lifestyle: Optional[LifestyleProfile],
    candidate_lifestyle: Optional[LifestyleProfile],
) -> Contribution:
    """Religion factor (10). Only counts when both chose to show it."""

    if viewer_lifestyle is None or candidate_lifestyle is None:
        return 0.0, []
    if not viewer_lifestyle.show_religion or not candidate_lifestyle.show_religion:
        return 0.0, []
    if not viewer_lifestyle.religion or not candidate_lifestyle.religion:
        return 0.0, []

    if viewer_lifestyle.religion == candidate_lifestyle.religion:
        return float(WEIGHTS["RELIGION"]), ["Share religious values"]
    return 0.0, []


def calculate_gender_visibility(
    viewer_lifestyle: Optional[LifestyleProfile],
    candidate_lifestyle: Optional[LifestyleProfile],
) -> Contribution:
    """Gender visibility factor (11): half credit when both opted in."""

    if viewer_lifestyle is None or candidate_lifestyle is None:
        return 0.0, []
    if viewer_lifestyle.show_gender and candidate_lifestyle.show_gender:
        return WEIGHTS["GENDER_VISIBILITY"] / 2, ["Both open about gender"]
    return 0.0, []


def calculate_penalties(penalties: Optional[Penalties]) -> float:
    if penalties is None:
        return 0.0

    total = 0.0
    if penalties.blocked:
        total += WEIGHTS["BLOCKED_PENALTY"]
    if penalties.passed:
        total += WEIGHTS["REPEATED_PASS_PENALTY"]
    return total


def compute_compatibility(
    viewer: Profile,
    candidate: Profile,
    viewer_lifestyle: Optional[LifestyleProfile] = None,
    candidate_lifestyle: Optional[LifestyleProfile] = None,
    viewer_housing: Optional[HousingProfile] = None,
    candidate_housing: Optional[HousingProfile] = None,
    viewer_preferences: Optional[PreferencesProfile] = None,
    candidate_preferences: Optional[PreferencesProfile] = None,
    penalties: Optional[Penalties] = None,
) -> CompatibilityResult:
    """Score how well ``candidate`` fits ``viewer`` (0-100) and explain why.

    The result is a pure function of the arguments. It is not symmetric:
    penalties are directional, so score(a, b) may differ from score(b, a).
    Reasons follow factor evaluation order and only cover factors that
    added points.
    """

    contributions = [
        calculate_affiliation_score(viewer, candidate),
        calculate_budget_fit(viewer_housing, candidate_housing),
        calculate_lifestyle_similarity(viewer_lifestyle, candidate_lifestyle),
        calculate_hobby_overlap(viewer_lifestyle, candidate_lifestyle),
        calculate_quiz_alignment(viewer_preferences, candidate_preferences),
        calculate_move_in_alignment(viewer_housing, candidate_housing),
        calculate_complementary_housing(viewer, candidate),
        calculate_religion_match(viewer_lifestyle, candidate_lifestyle),
        calculate_gender_visibility(viewer_lifestyle, candidate_lifestyle),
    ]

    total = 0.0
    reasons: list[str] = []
    for score, factor_reasons in contributions:
        total += score
        if score > 0:
            reasons.extend(factor_reasons)

    total += calculate_penalties(penalties)
    total = max(0.0, min(100.0, total))

    return CompatibilityResult(score=_round_half_up(total), reasons=reasons)


def compatibility_label(score: int) -> str:
    """Short explanation of a score band for display next to a match."""

    if score >= 85:
        return "Excellent match! You have a lot in common."
    if score >= 70:
        return "Great compatibility with shared interests."
    if score >= 55:
        return "Good potential match worth exploring."
    if score >= 40:
        return "Some compatibility, could work out."
    return "Limited compatibility, but you never know!"


def should_show_match(score: int, demo_mode: Optional[bool] = None) -> bool:
    """Whether a pair scores high enough to surface as a match.

    Demo builds use a lower bar so seeded profiles still produce matches.
    """

    if demo_mode is None:
        demo_mode = config.DEMO_MODE
    return score >= 25 if demo_mode else score >= 40
