from collections.abc import Callable, Iterable, Sequence

from loguru import logger

from seedpick.core.config import settings
from seedpick.models.candidate import Candidate
from seedpick.models.profile import FeedbackSignal, UserProfile
from seedpick.models.scoring import RecommendationResult, Step2SelectionResult
from seedpick.services.category import filter_by_category
from seedpick.services.diversity import (
    pick_final_recommendations,
    select_final_with_mmr,
    select_step2_diverse_candidates,
)
from seedpick.services.franchise import franchise_key
from seedpick.services.preference import build_seed_preference_vector
from seedpick.services.profile import update_exposure_history, update_profile_from_feedback
from seedpick.services.scoring import score_candidates
from seedpick.services.semantic import build_semantic_similarity_map


class RecommendationEngine:
    """
    Runs the browse and final recommendation flows over caller-supplied pools.

    Stateless between calls; profiles go in and come out as snapshots that the
    caller persists.
    """

    def __init__(
        self,
        franchise_key_of: Callable[[Candidate], str] = franchise_key,
        browse_count: int | None = None,
        mmr_lambda: float | None = None,
        mmr_top_n: int | None = None,
        pick_count: int | None = None,
        semantic_weight: float | None = None,
    ):
        self.franchise_key_of = franchise_key_of
        self.browse_count = settings.STEP2_TARGET_COUNT if browse_count is None else browse_count
        self.mmr_lambda = settings.FINAL_MMR_LAMBDA if mmr_lambda is None else mmr_lambda
        self.mmr_top_n = settings.FINAL_MMR_TOP_N if mmr_top_n is None else mmr_top_n
        self.pick_count = settings.FINAL_PICK_COUNT if pick_count is None else pick_count
        self.semantic_weight = settings.SEMANTIC_BLEND_WEIGHT if semantic_weight is None else semantic_weight

    def browse(
        self,
        pool: Sequence[Candidate],
        category_id: str | None = None,
        profile: UserProfile | None = None,
    ) -> Step2SelectionResult:
        """
        Build the diverse browsing list.

        Args:
            pool: Raw discovery results.
            category_id: Taste category used to filter the pool, if any.
            profile: Long-term profile; its exposure history softens repeats.

        Returns:
            Step2SelectionResult
        """
        candidates = filter_by_category(category_id, pool) if category_id else list(pool)
        logger.info(f"Browsing {len(candidates)} of {len(pool)} candidates for category {category_id!r}")
        return select_step2_diverse_candidates(
            candidates,
            total=self.browse_count,
            franchise_key_of=self.franchise_key_of,
            exposure_history=profile.exposure_history if profile else None,
            exposure_limit=settings.EXPOSURE_HISTORY_LIMIT,
        )

    def recommend(
        self,
        seeds: Sequence[Candidate],
        pool: Sequence[Candidate],
        category_id: str | None = None,
        profile: UserProfile | None = None,
    ) -> RecommendationResult:
        """
        Score the pool against the liked seeds and pick the final explained list.

        Seeds are removed from the pool. When ``category_id`` is given the
        category filter is applied again as a final guard.

        Args:
            seeds: Liked items, in the order they were chosen.
            pool: Candidate items for the final list.
            category_id: Taste category, if any.
            profile: Long-term profile blended into the score.

        Returns:
            RecommendationResult with the final picks and MMR diagnostics.
        """
        if not seeds:
            logger.warning("No seeds supplied; similarity falls back to zero for every candidate")

        seed_ids = {seed.id for seed in seeds}
        candidates = [candidate for candidate in pool if candidate.id not in seed_ids]
        if category_id:
            candidates = filter_by_category(category_id, candidates)

        preference = build_seed_preference_vector(seeds)
        semantic_map = build_semantic_similarity_map(seeds, candidates)
        scored = score_candidates(
            candidates,
            preference,
            profile=profile,
            semantic_map=semantic_map,
            semantic_weight=self.semantic_weight,
        )
        mmr = select_final_with_mmr(scored, self.franchise_key_of, lambda_=self.mmr_lambda, top_n=self.mmr_top_n)
        picks = pick_final_recommendations(mmr, scored, self.franchise_key_of, count=self.pick_count)

        logger.info(f"Recommended {len(picks)} items from {len(candidates)} candidates and {len(seeds)} seeds")
        return RecommendationResult(picks=picks, mmr=mmr, preference=preference)

    def record_feedback(
        self, profile: UserProfile, candidate: Candidate, signal: FeedbackSignal | str
    ) -> UserProfile:
        """Apply a like/dislike. Raises ValueError for an unknown signal."""
        return update_profile_from_feedback(profile, candidate, signal)

    def record_shown(self, profile: UserProfile, shown: Iterable[Candidate]) -> UserProfile:
        return update_exposure_history(profile, [candidate.id for candidate in shown])
