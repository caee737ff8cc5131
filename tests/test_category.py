"""Taste-category alignment rules."""

from __future__ import annotations

from seedpick.services.category import filter_by_category, is_category_aligned


def test_action_matches_genre_or_tag(candidate_factory) -> None:
    assert is_category_aligned("action", candidate_factory(1, genres=["Action"]))
    assert is_category_aligned("action", candidate_factory(2, tags={"Mecha": 80}))
    assert not is_category_aligned("action", candidate_factory(3, genres=["Romance"]))


def test_romance_rejects_weak_romance_in_action_shows(candidate_factory) -> None:
    weak = candidate_factory(1, genres=["Romance", "Comedy", "Action"])
    strong = candidate_factory(2, genres=["Romance", "Action"], tags={"Love Triangle": 70})

    assert not is_category_aligned("romance", weak)
    assert is_category_aligned("romance", strong)
    assert is_category_aligned("romance", candidate_factory(3, genres=["Romance"]))
    assert not is_category_aligned("romance", candidate_factory(4, genres=["Drama"]))


def test_healing_needs_strong_signal_when_intense(candidate_factory) -> None:
    assert is_category_aligned("healing", candidate_factory(1, genres=["Slice of Life"]))
    assert is_category_aligned("healing", candidate_factory(2, genres=["Action"], tags={"Iyashikei": 80}))
    assert not is_category_aligned("healing", candidate_factory(3, genres=["Action"], tags={"Cooking": 80}))
    assert not is_category_aligned("healing", candidate_factory(4, tags={"Food": 80, "Survival": 60}))


def test_psychological_rejects_pure_action_thrillers(candidate_factory) -> None:
    assert not is_category_aligned("psychological", candidate_factory(1, genres=["Thriller", "Action"]))
    assert is_category_aligned(
        "psychological", candidate_factory(2, genres=["Thriller", "Action"], tags={"Mind Game": 60})
    )
    assert is_category_aligned("psychological", candidate_factory(3, genres=["Psychological", "Fantasy"]))
    assert is_category_aligned("psychological", candidate_factory(4, tags={"Detective": 70}))


def test_special_theme_strength_against_action(candidate_factory) -> None:
    fantasy = ["Action", "Adventure", "Fantasy"]

    assert is_category_aligned("special", candidate_factory(1, tags={"Idol": 90}))
    assert is_category_aligned("special", candidate_factory(2, genres=["Sports"]))
    assert is_category_aligned("special", candidate_factory(3, genres=fantasy, tags={"Cooking": 80}))
    assert not is_category_aligned(
        "special", candidate_factory(4, genres=fantasy, tags={"Cooking": 80, "Battle": 60})
    )
    assert not is_category_aligned("special", candidate_factory(5, genres=["Comedy"]))


def test_unknown_category_passes_everything(candidate_factory) -> None:
    assert is_category_aligned("seasonal", candidate_factory(1))


def test_filter_keeps_order(candidate_factory) -> None:
    pool = [
        candidate_factory(1, genres=["Action"]),
        candidate_factory(2, genres=["Romance"]),
        candidate_factory(3, tags={"Martial Arts": 70}),
    ]

    assert [item.id for item in filter_by_category("action", pool)] == [1, 3]
