"""
Inputs for building discovery requests: per-category presets, pool quality
thresholds and caller-owned request throttles. Nothing here performs I/O.
"""

import asyncio
import math
import time
from collections.abc import Callable, Iterable

from loguru import logger
from pydantic import BaseModel, Field

from seedpick.core.config import settings
from seedpick.models.candidate import Candidate

STEP2_POOL_MIN = 250
STEP2_POOL_MAX = 400
STEP2_MIN_AVERAGE_SCORE = 65
STEP2_MIN_POPULARITY = 5000
STEP2_RELAXED_MIN_AVERAGE_SCORE = 58
STEP2_RELAXED_MIN_POPULARITY = 1200
STEP2_DISCOVERY_SORTS = ["POPULARITY_DESC", "SCORE_DESC", "TRENDING_DESC"]


class DiscoverPreset(BaseModel):
    id: str
    genre_in: list[str] = Field(default_factory=list)
    tag_in: list[str] = Field(default_factory=list)
    per_page: int | None = None


def _preset(preset_id: str, genres: list[str], tags: list[str]) -> DiscoverPreset:
    return DiscoverPreset(id=preset_id, genre_in=genres, tag_in=tags)


CATEGORY_DISCOVERY_PRESETS: dict[str, list[DiscoverPreset]] = {
    "action": [
        _preset("action_core", ["Action", "Adventure"], ["Martial Arts", "Swordplay"]),
        _preset("action_military", ["Action", "Adventure"], ["Military", "War"]),
        _preset("action_superpower", ["Action", "Adventure"], ["Super Power", "Shounen"]),
        _preset("action_mecha", ["Action", "Sci-Fi"], ["Mecha", "Space"]),
        _preset("action_survival", ["Action", "Thriller"], ["Survival", "Revenge"]),
        _preset("action_sports", ["Action", "Sports"], ["Competition", "Athletics"]),
    ],
    "romance": [
        _preset("romance_school", ["Romance", "Drama"], ["School", "Coming of Age"]),
        _preset("romance_romcom", ["Romance", "Comedy"], ["Romantic Comedy", "Love Triangle"]),
        _preset("romance_adult", ["Romance", "Drama"], ["Adult Cast", "Work"]),
        _preset("romance_shoujo", ["Romance", "Drama"], ["Shoujo", "Josei"]),
        _preset("romance_fantasy", ["Romance", "Fantasy"], ["Fantasy", "Isekai"]),
        _preset("romance_music", ["Romance", "Music"], ["Band", "Music"]),
    ],
    "healing": [
        _preset("healing_daily", ["Slice of Life", "Comedy"], ["Iyashikei", "Wholesome"]),
        _preset("healing_school", ["Slice of Life", "Comedy"], ["School Club", "Friendship"]),
        _preset("healing_food", ["Slice of Life", "Comedy"], ["Food", "Cooking"]),
        _preset("healing_family", ["Slice of Life", "Drama"], ["Family Life", "Childcare"]),
        _preset("healing_work", ["Slice of Life", "Comedy"], ["Work", "Cafe"]),
        _preset("healing_music", ["Slice of Life", "Music"], ["Band", "Music"]),
    ],
    "psychological": [
        _preset("psy_mindgame", ["Psychological", "Thriller"], ["Mind Game", "Strategy"]),
        _preset("psy_mystery", ["Psychological", "Mystery"], ["Detective", "Crime"]),
        _preset("psy_dark", ["Psychological", "Drama"], ["Trauma", "Depression"]),
        _preset("psy_philosophy", ["Psychological", "Drama"], ["Philosophy", "Existential"]),
        _preset("psy_gambling", ["Psychological", "Thriller"], ["Gambling", "Game"]),
        _preset("psy_scifi", ["Psychological", "Sci-Fi"], ["Time Manipulation", "Conspiracy"]),
    ],
    "special": [
        _preset("special_music", ["Music", "Slice of Life"], ["Band", "Concert"]),
        _preset("special_idol", ["Music", "Drama"], ["Idol", "Showbiz"]),
        _preset("special_sports", ["Sports", "Drama"], ["Competition", "Team Sports"]),
        _preset("special_cooking", ["Slice of Life", "Comedy"], ["Food", "Cooking"]),
        _preset("special_work", ["Slice of Life", "Drama"], ["Work", "Profession"]),
        _preset("special_hobby", ["Slice of Life", "Comedy"], ["Hobbies", "Club"]),
    ],
}


def get_category_discovery_presets(category_id: str, fallback_genres: list[str]) -> list[DiscoverPreset]:
    """Presets for a category, or a single genre-only preset for unknown ones."""
    presets = CATEGORY_DISCOVERY_PRESETS.get(category_id)
    if presets:
        return presets
    return [DiscoverPreset(id=f"{category_id}_base", genre_in=list(fallback_genres))]


def meets_pool_threshold(candidate: Candidate, relaxed: bool = False) -> bool:
    min_score = STEP2_RELAXED_MIN_AVERAGE_SCORE if relaxed else STEP2_MIN_AVERAGE_SCORE
    min_popularity = STEP2_RELAXED_MIN_POPULARITY if relaxed else STEP2_MIN_POPULARITY
    return candidate.score_value >= min_score and (candidate.popularity or 0) >= min_popularity


def merge_discovery_pages(pages: Iterable[Iterable[Candidate]], limit: int = STEP2_POOL_MAX) -> list[Candidate]:
    """
    Merge several discovery responses into one pool, first occurrence wins.

    Strict quality thresholds apply first; when fewer than ``STEP2_POOL_MIN``
    items survive, the relaxed thresholds are used instead.
    """
    unique: dict[int, Candidate] = {}
    for page in pages:
        for candidate in page:
            unique.setdefault(candidate.id, candidate)

    pool = [candidate for candidate in unique.values() if meets_pool_threshold(candidate)]
    if len(pool) < STEP2_POOL_MIN:
        pool = [candidate for candidate in unique.values() if meets_pool_threshold(candidate, relaxed=True)]
        logger.debug(f"Relaxed pool thresholds: {len(pool)} of {len(unique)} candidates kept")
    return pool[:limit]


class RateLimitResult(BaseModel):
    allowed: bool
    retry_after_seconds: int = 0


class RateLimiter:
    """
    Fixed-window request counter keyed by caller-chosen keys.

    Owned and passed around by the caller; there is no shared module state.
    """

    def __init__(
        self,
        limit: int = settings.DISCOVERY_RATE_LIMIT,
        window_seconds: float = settings.DISCOVERY_RATE_WINDOW_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        if limit <= 0:
            raise ValueError("limit must be positive")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}

    @property
    def active_keys(self) -> list[str]:
        return list(self._windows)

    def _drop_expired(self, now: float) -> None:
        expired = [key for key, (_, reset_at) in self._windows.items() if now >= reset_at]
        for key in expired:
            del self._windows[key]

    def hit(self, key: str = "default") -> RateLimitResult:
        now = self._clock()
        self._drop_expired(now)
        state = self._windows.get(key)
        if state is None:
            self._windows[key] = (1, now + self.window_seconds)
            return RateLimitResult(allowed=True)

        count, reset_at = state
        if count >= self.limit:
            return RateLimitResult(allowed=False, retry_after_seconds=math.ceil(reset_at - now))

        self._windows[key] = (count + 1, reset_at)
        return RateLimitResult(allowed=True)


class RequestPacer:
    """Keeps a minimum gap between consecutive discovery requests."""

    def __init__(
        self,
        min_gap_ms: int = settings.DISCOVERY_REQUEST_GAP_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.min_gap = max(0, min_gap_ms) / 1000
        self._clock = clock
        self._next_slot: float | None = None

    def reserve(self) -> float:
        """Claim the next request slot and return how many seconds to wait for it."""
        now = self._clock()
        if self._next_slot is None or self._next_slot <= now:
            start = now
        else:
            start = self._next_slot
        self._next_slot = start + self.min_gap
        return start - now

    async def wait(self) -> None:
        delay = self.reserve()
        if delay > 0:
            await asyncio.sleep(delay)
