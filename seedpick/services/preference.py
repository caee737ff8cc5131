from collections import defaultdict
from collections.abc import Sequence

from loguru import logger

from seedpick.models.candidate import Candidate
from seedpick.models.scoring import SeedPreferenceVector
from seedpick.services.constants import SEED_RECENCY_BOOST, TAG_VECTOR_LIMIT
from seedpick.services.vectors import normalize_tag_name, sorted_tags, tag_weight, year_bucket


def build_seed_preference_vector(seeds: Sequence[Candidate]) -> SeedPreferenceVector:
    """
    Aggregate liked seeds into a max-normalized tag vector.

    Later seeds get a mild recency boost (up to 1.4x the first one). Each seed
    counts once per tag in ``tag_frequency`` and once in its year bucket.

    Args:
        seeds: Liked candidates, in the order they were chosen.

    Returns:
        SeedPreferenceVector; empty when there are no seeds.
    """
    tag_weights: dict[str, float] = defaultdict(float)
    tag_frequency: dict[str, int] = defaultdict(int)
    bucket_frequency: dict[str, int] = defaultdict(int)
    divisor = max(1, len(seeds) - 1)

    for index, seed in enumerate(seeds):
        recency = 1 + (index / divisor) * SEED_RECENCY_BOOST
        seen: set[str] = set()
        for tag in sorted_tags(seed)[:TAG_VECTOR_LIMIT]:
            key = normalize_tag_name(tag.name)
            if not key:
                continue
            tag_weights[key] += tag_weight(tag.rank) * recency
            if key not in seen:
                tag_frequency[key] += 1
                seen.add(key)
        bucket_frequency[year_bucket(seed.season_year)] += 1

    if tag_weights:
        max_weight = max(tag_weights.values())
        for key in tag_weights:
            tag_weights[key] = tag_weights[key] / max_weight

    logger.debug(f"Built preference vector from {len(seeds)} seeds with {len(tag_weights)} tags")

    return SeedPreferenceVector(
        tag_weights=dict(tag_weights),
        tag_frequency=dict(tag_frequency),
        year_bucket_frequency=dict(bucket_frequency),
        seed_years=[seed.season_year for seed in seeds if seed.season_year is not None],
    )


def top_preference_tags(preference: SeedPreferenceVector, limit: int = 10) -> list[str]:
    ranked = sorted(preference.tag_weights.items(), key=lambda x: x[1], reverse=True)
    return [name for name, _ in ranked[:limit]]
