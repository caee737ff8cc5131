"""MMR re-ranking and the final pick list."""

from __future__ import annotations

import pytest

from seedpick.services.diversity import (
    pairwise_candidate_similarity,
    pick_final_recommendations,
    select_final_with_mmr,
)
from seedpick.services.franchise import franchise_key
from seedpick.services.preference import build_seed_preference_vector
from seedpick.services.scoring import score_candidates

OTHER_TITLES = [
    "Harbor Lights",
    "Quiet Orchard",
    "Falcon Relay",
    "Paper Lantern",
    "Glass Tundra",
    "Iron Meadow",
    "Nebula Cafe",
]


@pytest.fixture
def scored_pool(candidate_factory):
    seed = candidate_factory(100, title="Seed Show", tags={"Mecha": 90, "Space": 60}, genres=["Sci-Fi"])
    preference = build_seed_preference_vector([seed])
    sci_fi = {"genres": ["Sci-Fi"]}
    sequels = [
        candidate_factory(1, title="Mecha Saga", tags={"Mecha": 90, "Space": 60}, score=85, **sci_fi),
        candidate_factory(2, title="Mecha Saga Season 2", tags={"Mecha": 90, "Space": 55}, score=84, **sci_fi),
        candidate_factory(3, title="Mecha Saga: The Movie", tags={"Mecha": 85, "Space": 60}, score=83, **sci_fi),
    ]
    others = [
        candidate_factory(
            10 + index,
            title=title,
            tags={f"Theme{index}": 80, "Space": 30 + index * 5},
            genres=["Drama"] if index % 2 else ["Sci-Fi", "Drama"],
            score=70 + index,
        )
        for index, title in enumerate(OTHER_TITLES)
    ]
    return score_candidates([*sequels, *others], preference)


def test_franchise_is_picked_once(scored_pool) -> None:
    result = select_final_with_mmr(scored_pool, franchise_key)

    keys = [franchise_key(item.candidate) for item in result.selected]
    assert len(keys) == len(set(keys)) == 8
    assert keys.count("mecha saga") == 1
    assert result.selected[0].candidate.id == 1
    assert [row.candidate_id for row in result.debug_rows] == [item.candidate.id for item in result.selected]


def test_final_picks_hold_one_sequel(scored_pool) -> None:
    mmr = select_final_with_mmr(scored_pool, franchise_key)

    picks = pick_final_recommendations(mmr, scored_pool, franchise_key)

    keys = [franchise_key(item.candidate) for item in picks]
    assert len(picks) == 4
    assert len(set(keys)) == 4
    assert keys.count("mecha saga") == 1


def test_top_n_bounds_mmr_list(scored_pool) -> None:
    result = select_final_with_mmr(scored_pool, franchise_key, top_n=3)

    assert len(result.selected) == 3
    assert result.debug_rows[0].redundancy == 0.0


def test_backfill_skips_used_franchises(scored_pool) -> None:
    mmr = select_final_with_mmr(scored_pool, franchise_key, top_n=2)

    picks = pick_final_recommendations(mmr, scored_pool, franchise_key, count=4)

    keys = [franchise_key(item.candidate) for item in picks]
    assert picks[:2] == mmr.selected
    assert len(picks) == 4
    assert len(set(keys)) == 4


def test_short_pool_returns_fewer_picks(scored_pool) -> None:
    sequels = [item for item in scored_pool if franchise_key(item.candidate) == "mecha saga"]

    picks = pick_final_recommendations(select_final_with_mmr(sequels, franchise_key), sequels, franchise_key)

    assert [item.candidate.id for item in picks] == [1]


def test_pure_relevance_follows_score_order(scored_pool) -> None:
    result = select_final_with_mmr(scored_pool, lambda candidate: str(candidate.id), lambda_=1.0, top_n=10)

    totals = [item.breakdown.total for item in result.selected]
    assert totals == sorted(totals, reverse=True)
    assert len(result.selected) == 10


def test_pairwise_similarity_is_symmetric(scored_pool) -> None:
    first, second = scored_pool[0], scored_pool[-1]

    forward = pairwise_candidate_similarity(first, second)

    assert forward == pytest.approx(pairwise_candidate_similarity(second, first))
    assert 0.0 <= forward <= 1.0
    assert pairwise_candidate_similarity(first, first) == pytest.approx(1.0)


def test_empty_pool() -> None:
    result = select_final_with_mmr([], franchise_key)

    assert result.selected == []
    assert pick_final_recommendations(result, [], franchise_key) == []


def test_franchise_keys_are_computed_once_per_candidate(scored_pool) -> None:
    calls: list[int] = []

    def counting_key(candidate) -> str:
        calls.append(candidate.id)
        return franchise_key(candidate)

    result = select_final_with_mmr(scored_pool, counting_key)

    assert sorted(calls) == sorted(item.candidate.id for item in scored_pool)
    assert len(result.selected) == 8


def test_debug_redundancy_matches_pairwise_similarity(scored_pool) -> None:
    result = select_final_with_mmr(scored_pool, franchise_key, lambda_=0.7, top_n=5)

    for index, row in enumerate(result.debug_rows):
        earlier = result.selected[:index]
        expected = max(
            (pairwise_candidate_similarity(result.selected[index], picked) for picked in earlier),
            default=0.0,
        )
        assert row.redundancy == pytest.approx(expected)
