import math
from typing import Any

from seedpick.models.candidate import Candidate, CandidateTag, MediaFormat
from seedpick.services.constants import (
    DOMINANT_TAG_LIMIT,
    STUDIO_LIMIT,
    TAG_RANK_DEFAULT,
    TAG_VECTOR_LIMIT,
    TAG_WEIGHT_FLOOR,
)


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    if value < low:
        return low
    if value > high:
        return high
    return value


def normalize_tag_name(name: str | None) -> str:
    return (name or "").strip().lower()


def sorted_tags(candidate: Candidate) -> list[CandidateTag]:
    """Tags ordered by rank, strongest first. Unranked tags sort last, ties keep input order."""
    return sorted(candidate.tags, key=lambda tag: tag.rank or 0, reverse=True)


def tag_weight(rank: float | None, floor: float = TAG_WEIGHT_FLOOR) -> float:
    """Map a 0-100 rank onto a [floor, 1] weight. Missing rank counts as a weak tag."""
    value = TAG_RANK_DEFAULT if rank is None else rank
    return max(floor, min(1.0, value / 100))


def build_tag_weight_map(
    candidate: Candidate, limit: int = TAG_VECTOR_LIMIT, floor: float = TAG_WEIGHT_FLOOR
) -> dict[str, float]:
    """Weighted vector of the candidate's top-ranked tags keyed by normalized name."""
    vector: dict[str, float] = {}
    for tag in sorted_tags(candidate)[:limit]:
        key = normalize_tag_name(tag.name)
        if not key:
            continue
        vector[key] = tag_weight(tag.rank, floor)
    return vector


def candidate_tag_vector(candidate: Candidate) -> dict[str, float]:
    return build_tag_weight_map(candidate)


def dominant_tag_names(candidate: Candidate, limit: int = DOMINANT_TAG_LIMIT) -> list[str]:
    """Display names of the strongest tags."""
    names = []
    for tag in sorted_tags(candidate):
        name = (tag.name or "").strip()
        if name:
            names.append(name)
        if len(names) >= limit:
            break
    return names


def studio_names(candidate: Candidate, limit: int = STUDIO_LIMIT) -> list[str]:
    return [name for name in (studio.strip() for studio in candidate.studios) if name][:limit]


def cosine_similarity(left: dict[str, float], right: dict[str, float]) -> float:
    """Cosine of two sparse non-negative vectors, 0 when either side is empty."""
    if not left or not right:
        return 0.0
    small, large = (left, right) if len(left) <= len(right) else (right, left)
    dot = sum(value * large.get(key, 0.0) for key, value in small.items())
    norm_left = math.sqrt(sum(value * value for value in left.values()))
    norm_right = math.sqrt(sum(value * value for value in right.values()))
    if not norm_left or not norm_right:
        return 0.0
    return clamp(dot / (norm_left * norm_right))


def weighted_jaccard(left: dict[str, float], right: dict[str, float]) -> float:
    """Sum of per-key minimums over sum of per-key maximums."""
    if not left or not right:
        return 0.0
    numerator = 0.0
    denominator = 0.0
    for key in left.keys() | right.keys():
        a = left.get(key, 0.0)
        b = right.get(key, 0.0)
        numerator += min(a, b)
        denominator += max(a, b)
    if not denominator:
        return 0.0
    return clamp(numerator / denominator)


def jaccard_similarity(set_a: set[Any], set_b: set[Any]) -> float:
    """Calculate Jaccard similarity between two sets."""
    if not set_a or not set_b:
        return 0.0

    intersection = len(set_a & set_b)
    union = len(set_a | set_b)
    return intersection / union if union > 0 else 0.0


def year_bucket(season_year: int | None) -> str:
    """classic (<2000), mid (2000-2009), modern (>=2010). Unknown years count as mid."""
    if not season_year:
        return "mid"
    if season_year < 2000:
        return "classic"
    if season_year < 2010:
        return "mid"
    return "modern"


def format_bucket(media_format: MediaFormat | None) -> str:
    return "tv" if media_format == MediaFormat.TV else "other"


def genre_set(candidate: Candidate) -> set[str]:
    return {genre.lower() for genre in candidate.genres}
