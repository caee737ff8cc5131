"""Shared vector helpers and the quality score."""

from __future__ import annotations

import pytest

from seedpick.models.candidate import MediaFormat
from seedpick.services.quality import quality_score
from seedpick.services.vectors import (
    candidate_tag_vector,
    cosine_similarity,
    dominant_tag_names,
    format_bucket,
    tag_weight,
    weighted_jaccard,
    year_bucket,
)


def test_cosine_is_symmetric_and_bounded() -> None:
    left = {"mecha": 1.0, "space": 0.4}
    right = {"mecha": 0.3, "romance": 0.9, "space": 0.2}

    forward = cosine_similarity(left, right)

    assert forward == pytest.approx(cosine_similarity(right, left))
    assert 0.0 <= forward <= 1.0


def test_cosine_is_zero_for_empty_vectors() -> None:
    assert cosine_similarity({}, {"mecha": 1.0}) == 0.0
    assert cosine_similarity({"mecha": 1.0}, {}) == 0.0
    assert cosine_similarity({}, {}) == 0.0


def test_cosine_of_parallel_vectors_is_one() -> None:
    assert cosine_similarity({"a": 1.0, "b": 2.0}, {"a": 0.5, "b": 1.0}) == pytest.approx(1.0)


def test_weighted_jaccard() -> None:
    assert weighted_jaccard({"a": 1.0, "b": 0.5}, {"a": 0.5, "c": 0.5}) == pytest.approx(0.5 / 2.0)
    assert weighted_jaccard({}, {"a": 1.0}) == 0.0


def test_tag_weight_is_clamped() -> None:
    assert tag_weight(5) == 0.15
    assert tag_weight(80) == pytest.approx(0.8)
    assert tag_weight(150) == 1.0
    assert tag_weight(None) == pytest.approx(0.35)
    assert tag_weight(5, floor=0.1) == 0.1


def test_year_and_format_buckets() -> None:
    assert year_bucket(None) == "mid"
    assert year_bucket(1995) == "classic"
    assert year_bucket(2000) == "mid"
    assert year_bucket(2009) == "mid"
    assert year_bucket(2010) == "modern"
    assert format_bucket(MediaFormat.TV) == "tv"
    assert format_bucket(MediaFormat.TV_SHORT) == "other"
    assert format_bucket(None) == "other"


def test_candidate_tag_vector_keeps_top_sixteen(candidate_factory) -> None:
    tags = {f"Tag {index}": index for index in range(20)}
    candidate = candidate_factory(1, tags=tags)

    vector = candidate_tag_vector(candidate)

    assert len(vector) == 16
    assert "tag 19" in vector
    assert "tag 3" not in vector


def test_dominant_tags_are_top_four_by_rank(candidate_factory) -> None:
    candidate = candidate_factory(1, tags={"Low": 10, "High": 90, "Mid": 50, "Top": 99, "Other": 60})

    assert dominant_tag_names(candidate) == ["Top", "High", "Other", "Mid"]


def test_quality_score_of_unknown_item_is_zero(candidate_factory) -> None:
    assert quality_score(candidate_factory(1)) == 0.0


def test_quality_score_saturates_at_one(candidate_factory) -> None:
    candidate = candidate_factory(1, score=99, popularity=10**7, favourites=10**6, trending=10**6)

    assert quality_score(candidate) == pytest.approx(1.0)


def test_quality_score_grows_with_popularity(candidate_factory) -> None:
    quiet = candidate_factory(1, score=75, popularity=1000)
    loud = candidate_factory(2, score=75, popularity=100000)

    assert quality_score(loud) > quality_score(quiet)


def test_quality_score_ignores_negative_trending(candidate_factory) -> None:
    assert quality_score(candidate_factory(1, score=70, trending=-50)) == pytest.approx(
        quality_score(candidate_factory(2, score=70))
    )
