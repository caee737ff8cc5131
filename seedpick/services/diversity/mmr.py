from collections.abc import Callable, Sequence

from loguru import logger

from seedpick.models.candidate import Candidate
from seedpick.models.scoring import MmrDebugRow, MmrSelectionResult, ScoredFinalCandidate
from seedpick.services.constants import (
    DIVERSITY_TAG_WEIGHT_FLOOR,
    FINAL_MMR_LAMBDA,
    FINAL_MMR_TOP_N,
    FINAL_PICK_COUNT,
    MMR_WEIGHT_COSINE,
    MMR_WEIGHT_GENRE_JACCARD,
    MMR_WEIGHT_TAG_JACCARD,
)
from seedpick.services.vectors import (
    build_tag_weight_map,
    clamp,
    cosine_similarity,
    genre_set,
    jaccard_similarity,
    weighted_jaccard,
)

FranchiseKeyFn = Callable[[Candidate], str]


def _sort_by_total(candidates: Sequence[ScoredFinalCandidate]) -> list[ScoredFinalCandidate]:
    return sorted(candidates, key=lambda item: item.breakdown.total, reverse=True)


def _diversity_tag_map(item: ScoredFinalCandidate) -> dict[str, float]:
    return build_tag_weight_map(item.candidate, floor=DIVERSITY_TAG_WEIGHT_FLOOR)


def _pair_similarity(
    left: ScoredFinalCandidate,
    right: ScoredFinalCandidate,
    left_tag_map: dict[str, float],
    right_tag_map: dict[str, float],
) -> float:
    return clamp(
        cosine_similarity(left.tag_vector, right.tag_vector) * MMR_WEIGHT_COSINE
        + weighted_jaccard(left_tag_map, right_tag_map) * MMR_WEIGHT_TAG_JACCARD
        + jaccard_similarity(genre_set(left.candidate), genre_set(right.candidate)) * MMR_WEIGHT_GENRE_JACCARD
    )


def pairwise_candidate_similarity(left: ScoredFinalCandidate, right: ScoredFinalCandidate) -> float:
    """0.5 * tag-vector cosine + 0.28 * weighted tag Jaccard + 0.22 * genre Jaccard."""
    return _pair_similarity(left, right, _diversity_tag_map(left), _diversity_tag_map(right))


def select_final_with_mmr(
    candidates: Sequence[ScoredFinalCandidate],
    franchise_key_of: FranchiseKeyFn,
    lambda_: float = FINAL_MMR_LAMBDA,
    top_n: int = FINAL_MMR_TOP_N,
) -> MmrSelectionResult:
    """
    Re-rank scored candidates with Maximal Marginal Relevance.

    Each step picks, among candidates whose franchise is still unused, the one
    maximizing ``lambda * total - (1 - lambda) * max similarity to the picks so
    far``. Ties go to the higher-scored candidate.

    Args:
        candidates: Scored pool.
        franchise_key_of: Groups related entries; one pick per key.
        lambda_: Relevance/diversity balance.
        top_n: Maximum number of picks.

    Returns:
        MmrSelectionResult with per-pick diagnostics.
    """
    pool = _sort_by_total(candidates)
    selected: list[ScoredFinalCandidate] = []
    debug_rows: list[MmrDebugRow] = []
    used_franchises: set[str] = set()
    keys = {item.candidate.id: franchise_key_of(item.candidate) for item in pool}
    tag_maps = {item.candidate.id: _diversity_tag_map(item) for item in pool}

    while len(selected) < top_n and pool:
        best_index = -1
        best_mmr = float("-inf")
        best_redundancy = 0.0

        for index, candidate in enumerate(pool):
            if keys[candidate.candidate.id] in used_franchises:
                continue
            redundancy = max(
                (
                    _pair_similarity(candidate, picked, tag_maps[candidate.candidate.id], tag_maps[picked.candidate.id])
                    for picked in selected
                ),
                default=0.0,
            )
            mmr = lambda_ * candidate.breakdown.total - (1 - lambda_) * redundancy
            if mmr > best_mmr:
                best_index, best_mmr, best_redundancy = index, mmr, redundancy

        if best_index < 0:
            break

        picked = pool.pop(best_index)
        selected.append(picked)
        used_franchises.add(keys[picked.candidate.id])
        debug_rows.append(
            MmrDebugRow(
                candidate_id=picked.candidate.id,
                title=picked.candidate.display_title,
                year=picked.candidate.season_year,
                format=picked.candidate.format,
                base=picked.breakdown.total,
                mmr=best_mmr,
                redundancy=best_redundancy,
                similarity=picked.breakdown.similarity,
                quality=picked.breakdown.quality,
                novelty=picked.breakdown.novelty,
                profile_bonus=picked.breakdown.profile_bonus,
                key_tags=picked.dominant_tags[:4],
            )
        )

    logger.debug(f"MMR picked {len(selected)} of {len(candidates)} scored candidates")
    return MmrSelectionResult(selected=selected, debug_rows=debug_rows)


def pick_final_recommendations(
    mmr_result: MmrSelectionResult,
    scored: Sequence[ScoredFinalCandidate],
    franchise_key_of: FranchiseKeyFn,
    count: int = FINAL_PICK_COUNT,
) -> list[ScoredFinalCandidate]:
    """
    Take the first ``count`` MMR picks, backfilling from the score-sorted pool.

    Backfill skips franchises already present, so the result holds at most one
    item per franchise whenever the pool allows it.
    """
    picks = list(mmr_result.selected[:count])
    used_ids = {item.candidate.id for item in picks}
    used_franchises = {franchise_key_of(item.candidate) for item in picks}

    if len(picks) < count:
        for item in _sort_by_total(scored):
            if len(picks) >= count:
                break
            key = franchise_key_of(item.candidate)
            if item.candidate.id in used_ids or key in used_franchises:
                continue
            picks.append(item)
            used_ids.add(item.candidate.id)
            used_franchises.add(key)
        if len(picks) < count:
            logger.info(f"Only {len(picks)} distinct franchises available for {count} final picks")

    return picks
