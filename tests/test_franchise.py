"""Franchise grouping keys."""

from __future__ import annotations

from seedpick.models.candidate import Candidate, CandidateTitle
from seedpick.services.franchise import dedupe_by_franchise, franchise_key, strip_sequel_markers


def _titled(candidate_id: int, english: str | None = None, romaji: str | None = None, **fields) -> Candidate:
    return Candidate(id=candidate_id, title=CandidateTitle(english=english, romaji=romaji), **fields)


def test_sequels_share_a_key() -> None:
    keys = {
        franchise_key(_titled(1, "Mob Psycho 100")),
        franchise_key(_titled(2, "Mob Psycho 100 II")),
        franchise_key(_titled(3, "Mob Psycho 100 Season 3")),
    }

    assert keys == {"mob psycho 100"}


def test_known_aliases_collapse() -> None:
    english = franchise_key(_titled(1, "Attack on Titan Season 3 Part 2"))
    romaji = franchise_key(_titled(2, romaji="Shingeki no Kyojin"))

    assert english == romaji == "attack on titan"


def test_shortest_title_variant_wins() -> None:
    sequel = _titled(1, "Frieren: Beyond Journey's End", romaji="Sousou no Frieren 2nd Season")
    original = _titled(2, romaji="Sousou no Frieren")

    assert franchise_key(sequel) == franchise_key(original) == "sousou no frieren"


def test_sequel_subtitles_are_dropped() -> None:
    assert strip_sequel_markers("Mecha Saga: The Movie") == "Mecha Saga:"
    assert franchise_key(_titled(1, "Mecha Saga: Final Chapter")) == "mecha saga"
    assert franchise_key(_titled(2, "Re:Zero")) == "re zero"


def test_untitled_item_falls_back_to_id() -> None:
    assert franchise_key(Candidate(id=42)) == "42"
    assert franchise_key(_titled(7, "OVA")) == "7"


def test_dedupe_keeps_strongest_entry() -> None:
    items = [
        _titled(1, "Mecha Saga", popularity=5000, mean_score=70),
        _titled(2, "Harbor Lights", popularity=100),
        _titled(3, "Mecha Saga Season 2", popularity=9000, mean_score=80),
    ]

    kept = dedupe_by_franchise(items)

    assert [item.id for item in kept] == [3, 2]
