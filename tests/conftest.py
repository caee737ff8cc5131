"""Pytest configuration and test helpers."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Make ``seedpick`` importable without an editable install.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


from seedpick.models.candidate import Candidate, CandidateTag, CandidateTitle, MediaFormat  # noqa: E402


def make_candidate(
    candidate_id: int,
    *,
    title: str | None = None,
    tags: dict[str, float] | None = None,
    genres: list[str] | None = None,
    year: int | None = None,
    media_format: MediaFormat | None = None,
    score: float | None = None,
    popularity: int | None = None,
    favourites: int | None = None,
    trending: int | None = None,
    studios: list[str] | None = None,
    synonyms: list[str] | None = None,
    description: str | None = None,
) -> Candidate:
    return Candidate(
        id=candidate_id,
        title=CandidateTitle(english=title if title is not None else f"Item{candidate_id}"),
        tags=[CandidateTag(name=name, rank=rank) for name, rank in (tags or {}).items()],
        genres=genres or [],
        season_year=year,
        format=media_format,
        average_score=score,
        popularity=popularity,
        favourites=favourites,
        trending=trending,
        studios=studios or [],
        synonyms=synonyms or [],
        description=description,
    )


@pytest.fixture
def candidate_factory():
    return make_candidate
