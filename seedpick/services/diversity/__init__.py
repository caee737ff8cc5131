"""
Diversity selection.

Two greedy selectors with the same shape: a quota-constrained browse list and
an MMR re-ranking for the final explained picks.
"""

from seedpick.services.diversity.browse import (
    BrowseListSelector,
    compute_diversity_gain,
    compute_quota_targets,
    compute_redundancy_penalty,
    select_step2_diverse_candidates,
)
from seedpick.services.diversity.mmr import (
    pairwise_candidate_similarity,
    pick_final_recommendations,
    select_final_with_mmr,
)

__all__ = [
    "BrowseListSelector",
    "compute_diversity_gain",
    "compute_quota_targets",
    "compute_redundancy_penalty",
    "select_step2_diverse_candidates",
    "pairwise_candidate_similarity",
    "pick_final_recommendations",
    "select_final_with_mmr",
]
