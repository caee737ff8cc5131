"""Candidate and profile model behaviour."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from seedpick.core.config import Settings
from seedpick.models.candidate import Candidate, MediaFormat
from seedpick.models.profile import SessionStep


def test_candidate_accepts_catalog_payload() -> None:
    payload = {
        "id": 21,
        "idMal": 21,
        "title": {"romaji": "One Piece", "english": None, "native": "ワンピース"},
        "format": "TV",
        "seasonYear": 1999,
        "genres": ["Action", "Adventure"],
        "tags": [{"name": "Pirates", "rank": 95}, {"name": "Ensemble Cast"}],
        "averageScore": 88,
        "popularity": 500000,
        "studios": {"nodes": [{"name": "Toei Animation"}, {"name": " "}]},
        "synonyms": None,
    }

    candidate = Candidate.model_validate(payload)

    assert candidate.id_mal == 21
    assert candidate.format is MediaFormat.TV
    assert candidate.season_year == 1999
    assert candidate.studios == ["Toei Animation"]
    assert candidate.synonyms == []
    assert candidate.tags[1].rank is None
    assert candidate.display_title == "One Piece"


def test_candidate_is_immutable() -> None:
    candidate = Candidate(id=1)

    with pytest.raises(ValidationError):
        candidate.popularity = 10


def test_display_title_falls_back_to_id() -> None:
    assert Candidate(id=7).display_title == "#7"


def test_score_value_prefers_average_then_mean() -> None:
    assert Candidate(id=1, average_score=70, mean_score=80).score_value == 70
    assert Candidate(id=1, mean_score=80).score_value == 80
    assert Candidate(id=1).score_value == 0.0


def test_session_step_deduplicates_ids_in_order() -> None:
    step = SessionStep(step_index=2, shown_ids=[3, 1, 3, 2, 1], liked_ids=[5, 5])

    assert step.shown_ids == [3, 1, 2]
    assert step.liked_ids == [5]
    assert step.disliked_ids == []


def test_settings_can_be_overridden() -> None:
    settings = Settings(_env_file=None, FINAL_PICK_COUNT=3, SEMANTIC_BLEND_WEIGHT=0.25)

    assert settings.FINAL_PICK_COUNT == 3
    assert settings.SEMANTIC_BLEND_WEIGHT == 0.25
    assert settings.STEP2_TARGET_COUNT == 50
