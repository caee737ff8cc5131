"""
Seedpick - recommendation and diversity selection for catalog browsing.

Turns a few liked seed items plus a candidate pool into a diverse browsing
list and a short, explained final recommendation, optionally blended with a
decaying long-term taste profile.
"""

from seedpick.core.version import __version__
from seedpick.models.candidate import Candidate, CandidateTag, CandidateTitle, MediaFormat
from seedpick.models.profile import FeedbackSignal, ProfileScoreResult, SessionStep, UserProfile
from seedpick.models.scoring import (
    FinalScoreBreakdown,
    MmrSelectionResult,
    RecommendationResult,
    ScoredFinalCandidate,
    SeedPreferenceVector,
    Step2SelectionResult,
)
from seedpick.services.category import filter_by_category, is_category_aligned
from seedpick.services.diversity import (
    pick_final_recommendations,
    select_final_with_mmr,
    select_step2_diverse_candidates,
)
from seedpick.services.engine import RecommendationEngine
from seedpick.services.franchise import dedupe_by_franchise, franchise_key
from seedpick.services.preference import build_seed_preference_vector, top_preference_tags
from seedpick.services.profile import (
    create_empty_user_profile,
    normalize_user_profile,
    score_with_profile,
    top_disliked_tags,
    top_liked_tags,
    update_exposure_history,
    update_profile_from_feedback,
)
from seedpick.services.quality import quality_score
from seedpick.services.scoring import build_final_reason, build_scored_candidate, score_final_candidate
from seedpick.services.semantic import build_semantic_similarity_map

__all__ = [
    "__version__",
    "Candidate",
    "CandidateTag",
    "CandidateTitle",
    "MediaFormat",
    "FeedbackSignal",
    "ProfileScoreResult",
    "SessionStep",
    "UserProfile",
    "FinalScoreBreakdown",
    "MmrSelectionResult",
    "RecommendationResult",
    "ScoredFinalCandidate",
    "SeedPreferenceVector",
    "Step2SelectionResult",
    "RecommendationEngine",
    "build_seed_preference_vector",
    "score_final_candidate",
    "select_final_with_mmr",
    "select_step2_diverse_candidates",
    "build_semantic_similarity_map",
    "is_category_aligned",
    "update_profile_from_feedback",
    "update_exposure_history",
    "score_with_profile",
    "filter_by_category",
    "pick_final_recommendations",
    "dedupe_by_franchise",
    "franchise_key",
    "top_preference_tags",
    "create_empty_user_profile",
    "normalize_user_profile",
    "top_disliked_tags",
    "top_liked_tags",
    "quality_score",
    "build_final_reason",
    "build_scored_candidate",
]
