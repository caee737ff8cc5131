"""
Franchise keys: collapse sequels, seasons and spin-offs of one series into a
single selectable unit.
"""

import re
from collections.abc import Callable, Iterable

from seedpick.models.candidate import Candidate

FRANCHISE_SYNONYM_LIMIT = 3
MIN_KEY_LENGTH = 3

_SEQUEL_PATTERNS = [
    re.compile(r"\b(s(?:eason)?|part|pt\.?|cour|chapter|episode|ep)\s*[-.:]?\s*(\d+|[ivx]+)\b", re.I),
    re.compile(r"\b(\d+|[ivx]+)\s*(st|nd|rd|th)?\s*(season|part|cour|chapter)\b", re.I),
    re.compile(r"\b(2nd|3rd|4th|5th|6th|final)\s*season\b", re.I),
    re.compile(r"\b(final season|the movie|movie|ova|ona|special)\b", re.I),
    re.compile(r"\b(pt\.?\s*\d+)\b", re.I),
    re.compile(r"\b(ii|iii|iv|v|vi|vii|viii|ix|x)\b", re.I),
]
_SUBTITLE_RE = re.compile(r"^(.*?)\s*[:：\-|]\s*(.+)$")
_SEQUEL_KEYWORD_RE = re.compile(
    r"(season|part|pt\.?|cour|chapter|arc|hen|movie|special|final|ova|ona|episode|ep|tv)", re.I
)
_TRAILING_NUMBER_RE = re.compile(r"\s+\d{1,2}\s*$")
_SEASON_TOKEN_RE = re.compile(r"\b(season\s*\d+|part\s*\d+|cour\s*\d+|s\d+)\b")
_NON_WORD_RE = re.compile(r"[^\w\s]|_")
_SPACES_RE = re.compile(r"\s+")

FRANCHISE_ALIASES: list[tuple[re.Pattern[str], str]] = [
    (
        re.compile(r"(re zero|rezero|re:zero|re：zero|kara hajimeru isekai seikatsu|リゼロ)", re.I),
        "re zero",
    ),
    (
        re.compile(r"(boku no kokoro no yabai yatsu|bokuyaba|the dangers in my heart)", re.I),
        "the dangers in my heart",
    ),
    (re.compile(r"(shingeki no kyojin|attack on titan|進撃の巨人)", re.I), "attack on titan"),
    (re.compile(r"(kimetsu no yaiba|鬼滅の刃|demon slayer)", re.I), "demon slayer"),
    (
        re.compile(r"(my hero academia|boku no hero academia|bokunoheroacademia|僕のヒーローアカデミア)", re.I),
        "my hero academia",
    ),
]


def normalize_title(value: str) -> str:
    value = _SEASON_TOKEN_RE.sub(" ", value.lower())
    value = _NON_WORD_RE.sub(" ", value)
    return _SPACES_RE.sub(" ", value).strip()


def strip_sequel_markers(value: str) -> str:
    """Remove season/part/movie markers and sequel subtitles, keeping base titles like "Re:Zero"."""
    stripped = value
    for pattern in _SEQUEL_PATTERNS:
        stripped = pattern.sub(" ", stripped)

    match = _SUBTITLE_RE.match(stripped)
    if match and _SEQUEL_KEYWORD_RE.search(match.group(2)):
        stripped = match.group(1)

    stripped = _TRAILING_NUMBER_RE.sub(" ", stripped)
    return _SPACES_RE.sub(" ", stripped).strip()


def canonicalize_franchise_key(value: str) -> str:
    for pattern, canonical in FRANCHISE_ALIASES:
        if pattern.search(value):
            return canonical
    return value


def _series_key(title: str) -> str:
    return canonicalize_franchise_key(normalize_title(strip_sequel_markers(title)))


def franchise_key(candidate: Candidate) -> str:
    """
    Grouping key shared by all entries of one series.

    Every title variant and the first few synonyms are normalized; the key with
    the fewest words (then the shortest) wins. Falls back to the item id.
    """
    titles = [
        candidate.title.english,
        candidate.title.romaji,
        candidate.title.native,
        *candidate.synonyms[:FRANCHISE_SYNONYM_LIMIT],
    ]
    keys = [key for key in (_series_key(title) for title in titles if title) if len(key) >= MIN_KEY_LENGTH]
    if keys:
        unique = list(dict.fromkeys(keys))
        unique.sort(key=lambda key: (len(key.split()), len(key)))
        return unique[0]
    return str(candidate.id)


def dedupe_by_franchise(
    candidates: Iterable[Candidate], key_of: Callable[[Candidate], str] = franchise_key
) -> list[Candidate]:
    """Keep one entry per franchise, preferring higher popularity + mean score * 100."""

    def strength(candidate: Candidate) -> float:
        return (candidate.popularity or 0) + (candidate.mean_score or 0) * 100

    kept: dict[str, Candidate] = {}
    for candidate in candidates:
        key = key_of(candidate)
        current = kept.get(key)
        if current is None or strength(candidate) > strength(current):
            kept[key] = candidate
    return list(kept.values())
