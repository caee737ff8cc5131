import math

from seedpick.models.candidate import Candidate
from seedpick.services.constants import (
    QUALITY_FAVOURITES_CEILING,
    QUALITY_POPULARITY_CEILING,
    QUALITY_SCORE_BASELINE,
    QUALITY_SCORE_RANGE,
    QUALITY_TRENDING_CEILING,
    QUALITY_WEIGHT_FAVOURITES,
    QUALITY_WEIGHT_POPULARITY,
    QUALITY_WEIGHT_SCORE,
    QUALITY_WEIGHT_TRENDING,
)
from seedpick.services.vectors import clamp


def _log_norm(count: int | None, ceiling: float) -> float:
    return clamp(math.log10(max(0, count or 0) + 1) / ceiling)


def quality_score(candidate: Candidate) -> float:
    """
    Taste-independent "how good and how popular" score in [0, 1].

    The average score is rescaled from roughly 50-95; popularity, favourites
    and trending counters are log-scaled against fixed ceilings. Missing
    counters count as zero.
    """
    score_norm = clamp((candidate.score_value - QUALITY_SCORE_BASELINE) / QUALITY_SCORE_RANGE)
    popularity_norm = _log_norm(candidate.popularity, QUALITY_POPULARITY_CEILING)
    favourites_norm = _log_norm(candidate.favourites, QUALITY_FAVOURITES_CEILING)
    trending_norm = _log_norm(candidate.trending, QUALITY_TRENDING_CEILING)
    return (
        score_norm * QUALITY_WEIGHT_SCORE
        + popularity_norm * QUALITY_WEIGHT_POPULARITY
        + favourites_norm * QUALITY_WEIGHT_FAVOURITES
        + trending_norm * QUALITY_WEIGHT_TRENDING
    )
