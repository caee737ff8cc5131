"""Discovery presets, pool thresholds and request throttles."""

from __future__ import annotations

import asyncio

import pytest

from seedpick.services.discovery import (
    CATEGORY_DISCOVERY_PRESETS,
    RateLimiter,
    RequestPacer,
    get_category_discovery_presets,
    meets_pool_threshold,
    merge_discovery_pages,
)


class FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_known_categories_have_six_presets() -> None:
    assert set(CATEGORY_DISCOVERY_PRESETS) == {"action", "romance", "healing", "psychological", "special"}
    for presets in CATEGORY_DISCOVERY_PRESETS.values():
        assert len(presets) == 6
        assert len({preset.id for preset in presets}) == 6


def test_unknown_category_gets_genre_preset() -> None:
    presets = get_category_discovery_presets("seasonal", ["Comedy"])

    assert len(presets) == 1
    assert presets[0].id == "seasonal_base"
    assert presets[0].genre_in == ["Comedy"]
    assert presets[0].tag_in == []


def test_pool_thresholds(candidate_factory) -> None:
    assert meets_pool_threshold(candidate_factory(1, score=70, popularity=6000))
    assert not meets_pool_threshold(candidate_factory(2, score=60, popularity=6000))
    assert meets_pool_threshold(candidate_factory(2, score=60, popularity=6000), relaxed=True)
    assert not meets_pool_threshold(candidate_factory(3, score=80), relaxed=True)


def test_merge_keeps_first_occurrence_and_relaxes(candidate_factory) -> None:
    first = candidate_factory(1, title="First", score=70, popularity=6000)
    repeat = candidate_factory(1, title="Repeat", score=70, popularity=6000)
    relaxed_only = candidate_factory(2, score=60, popularity=2000)
    weak = candidate_factory(3, score=40, popularity=100)

    pool = merge_discovery_pages([[first, relaxed_only], [repeat, weak]])

    assert [item.id for item in pool] == [1, 2]
    assert pool[0].display_title == "First"


def test_merge_uses_strict_thresholds_when_enough_pass(candidate_factory) -> None:
    strong = [candidate_factory(index, score=80, popularity=10000) for index in range(260)]
    weak = candidate_factory(999, score=60, popularity=2000)

    pool = merge_discovery_pages([strong, [weak]], limit=300)

    assert len(pool) == 260
    assert 999 not in {item.id for item in pool}


def test_merge_applies_limit(candidate_factory) -> None:
    pages = [[candidate_factory(index, score=80, popularity=10000) for index in range(20)]]

    assert len(merge_discovery_pages(pages, limit=5)) == 5


def test_rate_limiter_window() -> None:
    clock = FakeClock()
    limiter = RateLimiter(limit=2, window_seconds=60, clock=clock)

    assert limiter.hit("user").allowed
    assert limiter.hit("user").allowed
    clock.now += 10.5
    blocked = limiter.hit("user")
    assert not blocked.allowed
    assert blocked.retry_after_seconds == 50
    assert limiter.hit("other").allowed

    clock.now += 50
    assert limiter.hit("user").allowed


def test_rate_limiter_forgets_expired_windows() -> None:
    clock = FakeClock()
    limiter = RateLimiter(limit=1, window_seconds=30, clock=clock)

    for index in range(5):
        limiter.hit(f"caller-{index}")
    assert len(limiter.active_keys) == 5

    clock.now += 30
    assert limiter.hit("late").allowed
    assert limiter.active_keys == ["late"]
    assert limiter.hit("caller-0").allowed


def test_rate_limiter_rejects_bad_configuration() -> None:
    with pytest.raises(ValueError):
        RateLimiter(limit=0)
    with pytest.raises(ValueError):
        RateLimiter(limit=5, window_seconds=0)


def test_request_pacer_spaces_reservations() -> None:
    clock = FakeClock()
    pacer = RequestPacer(min_gap_ms=120, clock=clock)

    assert pacer.reserve() == 0.0
    assert pacer.reserve() == pytest.approx(0.12)
    assert pacer.reserve() == pytest.approx(0.24)
    clock.now += 1.0
    assert pacer.reserve() == 0.0


def test_request_pacer_wait_without_gap() -> None:
    pacer = RequestPacer(min_gap_ms=0)

    asyncio.run(pacer.wait())
    asyncio.run(pacer.wait())

    assert pacer.reserve() == 0.0
