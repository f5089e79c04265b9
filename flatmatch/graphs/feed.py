"""Feed graph: filter, score, and rank roommate candidates for a viewer."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from langgraph.graph import StateGraph

from flatmatch.config import config
from flatmatch.graphs.base_graph import BaseGraph
from flatmatch.models.profile import (
    CompatibilityResult,
    FeedEntry,
    Penalties,
    PreferencesProfile,
    Profile,
)
from flatmatch.state import FeedState
from flatmatch.tools.repository import (
    ProfileRepository,
    RelationshipFlagsProvider,
    ReportCountProvider,
    SwipeHistoryProvider,
    create_store,
)
from flatmatch.tools.scoring_tools import compute_compatibility
from flatmatch.utils.errors import InvalidInputError
from flatmatch.utils.geo import distance_between
from flatmatch.utils.logging_config import logger

Scorer = Callable[..., CompatibilityResult]


def _with_state(state: FeedState, **updates) -> FeedState:
    """Return a new state dict with updates applied."""

    return {**state, **updates}


def age_in_range(age: int, preferences: PreferencesProfile) -> bool:
    """Check an age against the viewer's range.

    A missing bound is open. A malformed range (min > max) does not filter.
    """

    low, high = preferences.age_min, preferences.age_max
    if low is not None and high is not None and low > high:
        return True
    if low is not None and age < low:
        return False
    if high is not None and age > high:
        return False
    return True


def rank_feed(
    entries: list[FeedEntry],
    max_distance_km: Optional[float],
    limit: int,
) -> list[FeedEntry]:
    """Apply the radius filter, sort by score, and truncate.

    Entries with an unknown distance always pass the radius filter. The sort
    is stable, so equal scores keep their incoming order.
    """

    within_radius = [
        entry
        for entry in entries
        if max_distance_km is None
        or entry.distance_km is None
        or entry.distance_km <= max_distance_km
    ]
    ranked = sorted(
        within_radius, key=lambda entry: entry.compatibility.score, reverse=True
    )
    return ranked[: max(limit, 0)]


class FeedGraph(BaseGraph):
    """Multi-step feed pipeline over injected collaborators."""

    name = "feed"

    def __init__(
        self,
        repository: ProfileRepository,
        swipes: SwipeHistoryProvider,
        reports: ReportCountProvider,
        relationships: Optional[RelationshipFlagsProvider] = None,
        scorer: Scorer = compute_compatibility,
        max_candidates: Optional[int] = None,
        max_workers: Optional[int] = None,
        timeout: int = config.GRAPH_TIMEOUT,
    ):
        super().__init__(timeout=timeout)
        self.repository = repository
        self.swipes = swipes
        self.reports = reports
        self.relationships = relationships
        self.scorer = scorer
        self.max_candidates = (
            config.MAX_CANDIDATES if max_candidates is None else max_candidates
        )
        self.max_workers = config.FEED_MAX_WORKERS if max_workers is None else max_workers

        if self.max_candidates < 1 or self.max_workers < 1:
            raise InvalidInputError(
                f"max_candidates and max_workers must be at least 1, got "
                f"{self.max_candidates} and {self.max_workers}"
            )

    def build_graph(self) -> StateGraph:
        graph = StateGraph(FeedState)

        graph.add_node("fetch_viewer", self.node_fetch_viewer)
        graph.add_node("query_candidates", self.node_query_candidates)
        graph.add_node("filter_candidates", self.node_filter_candidates)
        graph.add_node("score_candidates", self.node_score_candidates)
        graph.add_node("rank_candidates", self.node_rank_candidates)
        graph.add_node("finalize_response", self.node_finalize_response)

        graph.set_entry_point("fetch_viewer")
        graph.add_edge("fetch_viewer", "query_candidates")
        graph.add_edge("query_candidates", "filter_candidates")
        graph.add_edge("filter_candidates", "score_candidates")
        graph.add_edge("score_candidates", "rank_candidates")
        graph.add_edge("rank_candidates", "finalize_response")
        graph.set_finish_point("finalize_response")

        return graph

    # ------------------------------------------------------------
    # entry points
    # ------------------------------------------------------------
    def run_feed(self, viewer_id: str, limit: Optional[int] = None) -> FeedState:
        """Run the graph and return the full final state, metadata included."""

        if limit is None:
            limit = config.FEED_LIMIT
        return self.run({"viewer_id": viewer_id, "limit": limit})

    def generate_feed(self, viewer_id: str, limit: Optional[int] = None) -> list[FeedEntry]:
        """Ranked feed for ``viewer_id``, at most ``limit`` entries.

        Returns an empty list when the viewer or their preferences are
        missing. Candidates whose lookups fail are left out.
        """

        return self.run_feed(viewer_id, limit).get("feed", [])

    # ------------------------------------------------------------
    # nodes
    # ------------------------------------------------------------
    def node_fetch_viewer(self, state: FeedState) -> FeedState:
        """Load the viewer's profile and sub-records."""

        viewer_id = state["viewer_id"]
        try:
            self._log_node_execution("fetch_viewer", state)
            viewer = self.repository.get_profile(viewer_id)
            if viewer is None:
                return _with_state(state, error=f"Viewer profile not found: {viewer_id}")

            preferences = self.repository.get_preferences(viewer_id)
            if preferences is None:
                return _with_state(state, error=f"Viewer has no preferences: {viewer_id}")

            return _with_state(
                state,
                viewer=viewer,
                viewer_preferences=preferences,
                viewer_lifestyle=self.repository.get_lifestyle(viewer_id),
                viewer_housing=self.repository.get_housing(viewer_id),
            )
        except Exception as exc:
            self._log_node_error("fetch_viewer", exc)
            return _with_state(
                state,
                error="Repository unavailable. Returning empty feed.",
            )

    def node_query_candidates(self, state: FeedState) -> FeedState:
        """Pull the candidate population, bounded by max_candidates."""

        if state.get("error"):
            return state

        try:
            self._log_node_execution("query_candidates", state)
            candidates = self.repository.list_candidates()
            if len(candidates) > self.max_candidates:
                logger.warning(
                    "Candidate pool of %s truncated to %s",
                    len(candidates),
                    self.max_candidates,
                )
                candidates = candidates[: self.max_candidates]
            return _with_state(state, candidates=candidates)
        except Exception as exc:
            self._log_node_error("query_candidates", exc)
            return _with_state(
                state,
                error="Failed to query candidates. Returning empty feed.",
                candidates=[],
            )

    def _is_eligible(
        self, viewer: Profile, preferences: PreferencesProfile, candidate: Profile
    ) -> bool:
        # Cheap profile checks first, collaborator lookups last.
        if candidate.id == viewer.id:
            return False
        if candidate.paused:
            return False
        if not age_in_range(candidate.age, preferences):
            return False
        if preferences.city_only and candidate.city != viewer.city:
            return False
        if preferences.university_filter and candidate.university != viewer.university:
            return False
        if not candidate.photos:
            return False
        if self.swipes.has_swiped(viewer.id, candidate.id):
            return False
        if self.reports.report_count(candidate.id) >= config.REPORT_THRESHOLD:
            return False
        return True

    def node_filter_candidates(self, state: FeedState) -> FeedState:
        """Drop candidates the viewer should not see."""

        if state.get("error"):
            return state

        self._log_node_execution("filter_candidates", state)
        viewer = state["viewer"]
        preferences = state["viewer_preferences"]

        eligible: list[Profile] = []
        for candidate in state.get("candidates", []):
            try:
                if self._is_eligible(viewer, preferences, candidate):
                    eligible.append(candidate)
            except Exception as exc:
                logger.warning(
                    "Eligibility check failed for candidate=%s; dropping: %s",
                    candidate.id,
                    str(exc),
                )

        logger.debug("filter_candidates result=%s", len(eligible))
        return _with_state(state, eligible_candidates=eligible)

    def _score_candidate(self, state: FeedState, candidate: Profile) -> FeedEntry:
        viewer = state["viewer"]
        lifestyle = self.repository.get_lifestyle(candidate.id)
        housing = self.repository.get_housing(candidate.id)
        preferences = self.repository.get_preferences(candidate.id)

        penalties = None
        if self.relationships is not None:
            penalties = Penalties(
                blocked=self.relationships.was_blocked(viewer.id, candidate.id),
                passed=self.relationships.was_passed(candidate.id, viewer.id),
            )

        compatibility = self.scorer(
            viewer,
            candidate,
            viewer_lifestyle=state.get("viewer_lifestyle"),
            candidate_lifestyle=lifestyle,
            viewer_housing=state.get("viewer_housing"),
            candidate_housing=housing,
            viewer_preferences=state.get("viewer_preferences"),
            candidate_preferences=preferences,
            penalties=penalties,
        )

        return FeedEntry(
            profile=candidate,
            distance_km=distance_between(viewer.location, candidate.location),
            compatibility=compatibility,
            lifestyle=lifestyle,
            housing=housing,
        )

    def node_score_candidates(self, state: FeedState) -> FeedState:
        """Score every eligible candidate on a bounded thread pool.

        Results are collected in candidate order; a failing candidate is
        logged and dropped without affecting the others.
        """

        if state.get("error"):
            return state

        self._log_node_execution("score_candidates", state)
        eligible = state.get("eligible_candidates", [])
        entries: list[FeedEntry] = []
        if not eligible:
            return _with_state(state, scored_entries=entries)

        workers = min(self.max_workers, len(eligible))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [
                pool.submit(self._score_candidate, state, candidate)
                for candidate in eligible
            ]
            for candidate, future in zip(eligible, futures):
                try:
                    entries.append(future.result())
                except Exception as exc:
                    logger.warning(
                        "Scoring failed for candidate=%s; dropping: %s",
                        candidate.id,
                        str(exc),
                    )

        return _with_state(state, scored_entries=entries)

    def node_rank_candidates(self, state: FeedState) -> FeedState:
        """Radius filter, stable sort, and truncate to the limit."""

        if state.get("error"):
            return state

        self._log_node_execution("rank_candidates", state)
        feed = rank_feed(
            state.get("scored_entries", []),
            state["viewer_preferences"].max_distance_km,
            state.get("limit", config.FEED_LIMIT),
        )
        return _with_state(state, feed=feed)

    def node_finalize_response(self, state: FeedState) -> FeedState:
        """Attach response metadata."""

        if state.get("error"):
            logger.info("Feed for viewer=%s empty: %s", state.get("viewer_id"), state["error"])
            return _with_state(
                state,
                feed=[],
                response_metadata={
                    "success": False,
                    "error": state.get("error"),
                    "total_candidates": len(state.get("candidates", [])),
                    "eligible_count": 0,
                    "scored_count": 0,
                    "returned_count": 0,
                },
            )

        metadata = {
            "success": True,
            "error": None,
            "total_candidates": len(state.get("candidates", [])),
            "eligible_count": len(state.get("eligible_candidates", [])),
            "scored_count": len(state.get("scored_entries", [])),
            "returned_count": len(state.get("feed", [])),
        }
        logger.debug("Feed metadata viewer=%s %s", state.get("viewer_id"), metadata)
        return _with_state(state, response_metadata=metadata)


def create_feed_graph(
    repository: Optional[ProfileRepository] = None,
    swipes: Optional[SwipeHistoryProvider] = None,
    reports: Optional[ReportCountProvider] = None,
    relationships: Optional[RelationshipFlagsProvider] = None,
) -> FeedGraph:
    """Build a feed graph where one store serves every collaborator role.

    ``InMemoryStore`` and ``FirestoreStore`` implement all four protocols,
    so hosts usually pass just the repository. Without one, the store named
    by REPOSITORY_BACKEND is created.
    """

    if repository is None:
        repository = create_store()

    if relationships is None and isinstance(repository, RelationshipFlagsProvider):
        relationships = repository

    return FeedGraph(
        repository=repository,
        swipes=swipes or repository,
        reports=reports or repository,
        relationships=relationships,
        timeout=config.GRAPH_TIMEOUT,
    )
