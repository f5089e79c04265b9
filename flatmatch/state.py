"""Shared LangGraph state definitions.

Graph states are TypedDicts so state is explicit and consistent across
graph nodes.
"""

from __future__ import annotations

from typing import Optional, TypedDict

from flatmatch.models.profile import (
    FeedEntry,
    HousingProfile,
    LifestyleProfile,
    PreferencesProfile,
    Profile,
)

JsonDict = dict[str, object]


class FeedState(TypedDict, total=False):
    """State for the feed graph.

    Fields are optional at runtime because nodes populate them progressively.
    """

    # Identifies the viewer the feed is built for.
    viewer_id: str
    # Maximum number of entries to return.
    limit: int
    # Viewer records loaded by fetch_viewer.
    viewer: Profile
    viewer_lifestyle: Optional[LifestyleProfile]
    viewer_housing: Optional[HousingProfile]
    viewer_preferences: PreferencesProfile
    # Candidate population from the repository.
    candidates: list[Profile]
    # Candidates that passed every eligibility rule.
    eligible_candidates: list[Profile]
    # Scored entries in candidate order, before radius filter and sort.
    scored_entries: list[FeedEntry]
    # Final ranked, truncated feed.
    feed: list[FeedEntry]
    # Error string if a viewer-level step fails.
    error: str
    # Response metadata for observability.
    response_metadata: JsonDict
