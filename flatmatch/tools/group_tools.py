"""Group compatibility built on top of the pairwise scorer."""

from __future__ import annotations

from itertools import combinations

from flatmatch.config import config
from flatmatch.models.profile import Group
from flatmatch.tools.repository import ProfileRepository
from flatmatch.tools.scoring_tools import compute_compatibility
from flatmatch.utils.errors import InvalidInputError
from flatmatch.utils.logging_config import logger

COMPLEMENTARY_HOUSING_BONUS = 10


def group_score(member_ids: list[str], repository: ProfileRepository) -> int:
    """Average pairwise compatibility of a group (0-100).

    Groups are consensual, so pairs are scored without block or pass
    penalties. A flat bonus applies when the group already has a room on
    offer and someone looking for one. Members whose profile cannot be
    found are left out of the pairs.
    """

    unique_ids = list(dict.fromkeys(member_ids))
    if len(unique_ids) < 2:
        return 0
    if len(unique_ids) > config.MAX_GROUP_SIZE:
        raise InvalidInputError(
            f"Groups hold at most {config.MAX_GROUP_SIZE} members, got {len(unique_ids)}"
        )

    members = []
    for user_id in unique_ids:
        profile = repository.get_profile(user_id)
        if profile is None:
            logger.debug("group_score skipping missing profile user=%s", user_id)
            continue
        members.append(
            (
                profile,
                repository.get_lifestyle(user_id),
                repository.get_housing(user_id),
                repository.get_preferences(user_id),
            )
        )

    pair_scores = [
        compute_compatibility(
            first[0],
            second[0],
            viewer_lifestyle=first[1],
            candidate_lifestyle=second[1],
            viewer_housing=first[2],
            candidate_housing=second[2],
            viewer_preferences=first[3],
            candidate_preferences=second[3],
        ).score
        for first, second in combinations(members, 2)
    ]
    if not pair_scores:
        return 0

    total = sum(pair_scores) / len(pair_scores)

    offering = any(profile.has_room for profile, *_ in members)
    seeking = any(not profile.has_room for profile, *_ in members)
    if offering and seeking:
        total += COMPLEMENTARY_HOUSING_BONUS

    total = max(0.0, min(100.0, total))
    return int(total + 0.5)


def score_group(group: Group, repository: ProfileRepository) -> int:
    """Convenience wrapper for a validated Group record."""

    return group_score(group.member_ids, repository)
