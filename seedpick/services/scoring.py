from collections.abc import Mapping, Sequence

from loguru import logger

from seedpick.models.candidate import Candidate
from seedpick.models.profile import UserProfile
from seedpick.models.scoring import FinalScoreBreakdown, ScoredFinalCandidate, SeedPreferenceVector
from seedpick.services.constants import (
    FINAL_WEIGHT_NOVELTY,
    FINAL_WEIGHT_QUALITY,
    FINAL_WEIGHT_SIMILARITY,
    NOVELTY_RARE_TAG_WEIGHT,
    NOVELTY_TAG_LIMIT,
    NOVELTY_UNTAGGED_SCORE,
    NOVELTY_YEAR_WEIGHT,
    REASON_NOVELTY_THRESHOLD,
    REASON_PROFILE_THRESHOLD,
    REASON_QUALITY_THRESHOLD,
    REASON_SIMILARITY_THRESHOLD,
)
from seedpick.services.profile import score_with_profile
from seedpick.services.quality import quality_score
from seedpick.services.vectors import (
    candidate_tag_vector,
    clamp,
    cosine_similarity,
    dominant_tag_names,
    normalize_tag_name,
    sorted_tags,
    year_bucket,
)


class RecommendationScoring:
    """
    Scores candidates against the seed preference vector.

    Total = 0.65 * similarity + 0.20 * quality + 0.15 * novelty, each term and
    the sum clamped to [0, 1]. An optional long-term profile adjusts the total
    additively before it is re-clamped.
    """

    @staticmethod
    def novelty(candidate: Candidate, preference: SeedPreferenceVector) -> tuple[float, float, float]:
        """
        How much the candidate adds beyond what the seeds already cover.

        Returns:
            (novelty, rare_tag_score, year_novelty_score)
        """
        tags = [name for name in (normalize_tag_name(tag.name) for tag in sorted_tags(candidate)) if name]
        tags = tags[:NOVELTY_TAG_LIMIT]
        if tags:
            rare_tag_score = sum(1 / (1 + preference.tag_frequency.get(tag, 0)) for tag in tags) / len(tags)
        else:
            rare_tag_score = NOVELTY_UNTAGGED_SCORE

        seen_in_bucket = preference.year_bucket_frequency.get(year_bucket(candidate.season_year), 0)
        year_novelty_score = 1 / (1 + seen_in_bucket)

        score = clamp(rare_tag_score * NOVELTY_RARE_TAG_WEIGHT + year_novelty_score * NOVELTY_YEAR_WEIGHT)
        return score, clamp(rare_tag_score), clamp(year_novelty_score)

    @staticmethod
    def combine(similarity: float, quality: float, novelty: float) -> float:
        return clamp(
            FINAL_WEIGHT_SIMILARITY * clamp(similarity)
            + FINAL_WEIGHT_QUALITY * clamp(quality)
            + FINAL_WEIGHT_NOVELTY * clamp(novelty)
        )


def score_final_candidate(
    candidate: Candidate, preference: SeedPreferenceVector
) -> tuple[FinalScoreBreakdown, dict[str, float]]:
    """
    Score one candidate against the seed preference vector.

    Args:
        candidate: Item to score.
        preference: Output of ``build_seed_preference_vector``.

    Returns:
        (breakdown, candidate tag vector)
    """
    tag_vector = candidate_tag_vector(candidate)
    similarity = cosine_similarity(preference.tag_weights, tag_vector)
    quality = quality_score(candidate)
    novelty, rare_tag_score, year_novelty_score = RecommendationScoring.novelty(candidate, preference)

    breakdown = FinalScoreBreakdown(
        similarity=clamp(similarity),
        quality=clamp(quality),
        novelty=novelty,
        rare_tag_score=rare_tag_score,
        year_novelty_score=year_novelty_score,
        total=RecommendationScoring.combine(similarity, quality, novelty),
    )
    return breakdown, tag_vector


def build_final_reason(scored: ScoredFinalCandidate) -> str:
    """Short explanation naming the single strongest signal behind a pick."""
    tag_text = ", ".join(scored.dominant_tags[:2])
    breakdown = scored.breakdown
    profile_bonus = breakdown.profile_bonus or 0.0

    if profile_bonus >= REASON_PROFILE_THRESHOLD and tag_text:
        return f"Matches both your long-term favourite tags and your picks here ({tag_text})."
    if profile_bonus <= -REASON_PROFILE_THRESHOLD and tag_text:
        return f"Avoids tags you usually skip while keeping the {tag_text} feel."
    if breakdown.similarity >= REASON_SIMILARITY_THRESHOLD and tag_text:
        return f"Shares a lot of tags with your picks ({tag_text})."
    if breakdown.novelty >= REASON_NOVELTY_THRESHOLD and tag_text:
        return f"Brings something new with less-explored tags ({tag_text})."
    if breakdown.quality >= REASON_QUALITY_THRESHOLD:
        return "Highly rated and widely watched, a safe pick."
    if tag_text:
        return f"Fits the {tag_text} side of your taste."
    return "Balanced on tag similarity, quality and freshness."


def build_scored_candidate(
    candidate: Candidate,
    preference: SeedPreferenceVector,
    profile: UserProfile | None = None,
    semantic: float | None = None,
    semantic_weight: float = 0.0,
) -> ScoredFinalCandidate:
    """
    Score a candidate and attach its dominant tags and reason.

    Args:
        candidate: Item to score.
        preference: Seed preference vector.
        profile: Long-term profile; its total is added to the score.
        semantic: Text similarity for this candidate, if computed.
        semantic_weight: Share of ``semantic`` blended into the similarity term.

    Returns:
        ScoredFinalCandidate with a clamped total.
    """
    breakdown, tag_vector = score_final_candidate(candidate, preference)

    if semantic is not None:
        breakdown.semantic = clamp(semantic)
        weight = clamp(semantic_weight)
        if weight > 0:
            breakdown.similarity = clamp((1 - weight) * breakdown.similarity + weight * breakdown.semantic)
            breakdown.total = RecommendationScoring.combine(breakdown.similarity, breakdown.quality, breakdown.novelty)

    if profile is not None:
        profile_result = score_with_profile(candidate, profile)
        breakdown.profile_bonus = profile_result.total
        breakdown.total = clamp(breakdown.total + profile_result.total)

    scored = ScoredFinalCandidate(
        candidate=candidate,
        tag_vector=tag_vector,
        dominant_tags=dominant_tag_names(candidate),
        breakdown=breakdown,
    )
    scored.reason = build_final_reason(scored)
    return scored


def score_candidates(
    candidates: Sequence[Candidate],
    preference: SeedPreferenceVector,
    profile: UserProfile | None = None,
    semantic_map: Mapping[int, float] | None = None,
    semantic_weight: float = 0.0,
) -> list[ScoredFinalCandidate]:
    """Score a pool and return it sorted by total, best first (stable)."""
    semantic_map = semantic_map or {}
    scored = [
        build_scored_candidate(
            candidate,
            preference,
            profile=profile,
            semantic=semantic_map.get(candidate.id),
            semantic_weight=semantic_weight,
        )
        for candidate in candidates
    ]
    scored.sort(key=lambda item: item.breakdown.total, reverse=True)
    if scored:
        logger.debug(f"Scored {len(scored)} candidates, best total {scored[0].breakdown.total:.3f}")
    return scored
