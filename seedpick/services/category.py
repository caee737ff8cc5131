"""
Rule-based taste-category alignment.

Each known category combines genre membership with keyword patterns matched
against normalized tag names. Some categories weigh a category signal against
an opposing one (for example heavy action inside a romance query) and keep
the candidate only when its own signal is strong enough; ties keep it.
Unknown categories let every candidate through.
"""

import re
from collections.abc import Callable, Iterable

from seedpick.models.candidate import Candidate
from seedpick.services.vectors import genre_set, normalize_tag_name

ACTION_TAG_PATTERN = re.compile(
    r"(battle|fight|war|military|martial|super power|mecha|assassin|weapon|revenge|survival|monster)", re.I
)
ROMANCE_TAG_PATTERN = re.compile(
    r"(romance|love|relationship|dating|kiss|marriage|newlyweds|romantic|romcom|shoujo|josei|love triangle)", re.I
)
HEALING_TAG_PATTERN = re.compile(
    r"(iyashikei|healing|wholesome|daily life|slow life|friendship|family life|cute girls doing cute things"
    r"|food|cooking|gourmet|slice of life)",
    re.I,
)
STRONG_HEALING_TAG_PATTERN = re.compile(r"(iyashikei|healing|wholesome|slow life)", re.I)
PSYCHOLOGICAL_TAG_PATTERN = re.compile(
    r"(mind game|psychological|manipulation|suspense|mystery|detective|crime|strategy|trauma|existential"
    r"|philosophy|thriller|gambling)",
    re.I,
)
INTENSE_TAG_PATTERN = re.compile(
    r"(gore|slasher|death game|revenge|assassin|war|military|battle royale|survival)", re.I
)
SPECIAL_THEME_TAG_PATTERN = re.compile(
    r"(idol|music|band|singer|concert|showbiz|cooking|food|gourmet|restaurant|cafe|chef|workplace|office|job"
    r"|profession|career|teacher|doctor|nurse|bartender|maid|sports|basketball|baseball|soccer|volleyball"
    r"|swimming|athlete)",
    re.I,
)

ROMANCE_MIN_STRENGTH = 4
SPECIAL_ACTION_STRENGTH_LIMIT = 3.4
SPECIAL_ACTION_TAG_WEIGHT = 1.6


def _tag_names(candidate: Candidate) -> list[str]:
    return [name for name in (normalize_tag_name(tag.name) for tag in candidate.tags) if name]


def _has_tag(tags: list[str], pattern: re.Pattern[str]) -> bool:
    return any(pattern.search(tag) for tag in tags)


def _count_tags(tags: list[str], pattern: re.Pattern[str]) -> int:
    return sum(1 for tag in tags if pattern.search(tag))


def _is_action(genres: set[str], tags: list[str]) -> bool:
    return "action" in genres or "adventure" in genres or _has_tag(tags, ACTION_TAG_PATTERN)


def _is_romance(genres: set[str], tags: list[str]) -> bool:
    has_romance_tag = _has_tag(tags, ROMANCE_TAG_PATTERN)
    if not ("romance" in genres or has_romance_tag):
        return False
    action_heavy = bool(genres & {"action", "adventure", "mecha"}) or _has_tag(tags, ACTION_TAG_PATTERN)
    strength = (
        2 * ("romance" in genres) + 2 * has_romance_tag + ("comedy" in genres) + ("drama" in genres)
    )
    return not (action_heavy and strength < ROMANCE_MIN_STRENGTH)


def _is_healing(genres: set[str], tags: list[str]) -> bool:
    if not ("slice of life" in genres or _has_tag(tags, HEALING_TAG_PATTERN)):
        return False
    intense = (
        bool(genres & {"action", "adventure", "horror", "thriller"})
        or _has_tag(tags, ACTION_TAG_PATTERN)
        or _has_tag(tags, INTENSE_TAG_PATTERN)
    )
    strong_healing = "slice of life" in genres or _has_tag(tags, STRONG_HEALING_TAG_PATTERN)
    return not (intense and not strong_healing)


def _is_psychological(genres: set[str], tags: list[str]) -> bool:
    has_psychological_tag = _has_tag(tags, PSYCHOLOGICAL_TAG_PATTERN)
    if not (genres & {"psychological", "mystery", "thriller"} or has_psychological_tag):
        return False
    pure_action_fantasy = (
        bool(genres & {"action", "adventure", "fantasy"})
        and "psychological" not in genres
        and "mystery" not in genres
        and not has_psychological_tag
    )
    return not pure_action_fantasy


def _is_special_theme(genres: set[str], tags: list[str]) -> bool:
    theme_strength = 2 * _count_tags(tags, SPECIAL_THEME_TAG_PATTERN) + (2 if genres & {"music", "sports"} else 0)
    action_strength = len(genres & {"action", "adventure", "fantasy"}) + SPECIAL_ACTION_TAG_WEIGHT * _count_tags(
        tags, ACTION_TAG_PATTERN
    )
    if theme_strength <= 0:
        return False
    if action_strength >= SPECIAL_ACTION_STRENGTH_LIMIT and theme_strength < action_strength:
        return False
    return True


CATEGORY_RULES: dict[str, Callable[[set[str], list[str]], bool]] = {
    "action": _is_action,
    "romance": _is_romance,
    "healing": _is_healing,
    "psychological": _is_psychological,
    "special": _is_special_theme,
}


def is_category_aligned(category_id: str, candidate: Candidate) -> bool:
    """
    Decide whether a candidate belongs to a taste category.

    Args:
        category_id: One of action, romance, healing, psychological, special.
            Any other id passes every candidate.
        candidate: Item to test.

    Returns:
        True when the candidate fits the category.
    """
    rule = CATEGORY_RULES.get(category_id)
    if rule is None:
        return True
    return rule(genre_set(candidate), _tag_names(candidate))


def filter_by_category(category_id: str, candidates: Iterable[Candidate]) -> list[Candidate]:
    return [candidate for candidate in candidates if is_category_aligned(category_id, candidate)]
