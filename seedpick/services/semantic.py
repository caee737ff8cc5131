"""
TF-IDF text similarity between liked seeds and candidates.

Vectors are rebuilt per call over the corpus formed by the supplied seeds and
candidates; nothing is cached between calls.
"""

import html
import math
import re
from collections import defaultdict
from collections.abc import Sequence

from loguru import logger

from seedpick.models.candidate import Candidate, CandidateTag
from seedpick.services.constants import (
    SEMANTIC_CENTROID_WEIGHT,
    SEMANTIC_DESCRIPTION_MAX_CHARS,
    SEMANTIC_MAX_SEED_WEIGHT,
    SEMANTIC_PHRASE_BOOST,
    SEMANTIC_SYNONYM_LIMIT,
    SEMANTIC_TAG_LIMIT,
    SEMANTIC_TAG_RANK_DEFAULT,
    SEMANTIC_WEIGHT_DESCRIPTION,
    SEMANTIC_WEIGHT_GENRE,
    SEMANTIC_WEIGHT_SYNONYM,
    SEMANTIC_WEIGHT_TAG,
    SEMANTIC_WEIGHT_TITLE_ENGLISH,
    SEMANTIC_WEIGHT_TITLE_NATIVE,
    SEMANTIC_WEIGHT_TITLE_ROMAJI,
)
from seedpick.services.vectors import clamp


class Tokenizer:
    _STOPWORDS = {
        "the",
        "and",
        "for",
        "with",
        "from",
        "that",
        "this",
        "into",
        "your",
        "you",
        "are",
        "was",
        "were",
        "have",
        "has",
        "had",
        "its",
        "their",
        "about",
        "after",
        "before",
        "while",
        "where",
        "when",
        "what",
        "which",
        "will",
        "would",
        "could",
        "should",
        "there",
        "here",
        "then",
        "than",
        "series",
        "anime",
    }

    # Letter or digit runs of two or more characters, any script
    _TOKEN_RE = re.compile(r"[^\W_]{2,}")
    _NON_WORD_RE = re.compile(r"[\W_]+")
    _BREAK_RE = re.compile(r"<br\s*/?>", re.I)
    _MARKUP_RE = re.compile(r"<[^>]+>")

    @classmethod
    def clean(cls, text: str | None) -> str:
        if not text:
            return ""
        text = html.unescape(text)
        text = cls._BREAK_RE.sub(" ", text)
        text = cls._MARKUP_RE.sub(" ", text)
        return text.lower()

    @classmethod
    def tokenize(cls, text: str | None) -> list[str]:
        cleaned = cls.clean(text)
        if not cleaned:
            return []
        return [token for token in cls._TOKEN_RE.findall(cleaned) if token not in cls._STOPWORDS]

    @classmethod
    def phrase(cls, text: str | None) -> str | None:
        """Whole value as a single underscored token, e.g. "Slice of Life" -> "slice_of_life"."""
        joined = cls._NON_WORD_RE.sub("_", cls.clean(text)).strip("_")
        if len(joined) < 2:
            return None
        return joined


def _add_weight(bag: dict[str, float], token: str, weight: float) -> None:
    if not token or weight <= 0:
        return
    bag[token] += weight


def _add_phrase_and_tokens(bag: dict[str, float], text: str | None, weight: float) -> None:
    if not text:
        return
    phrase = Tokenizer.phrase(text)
    if phrase:
        _add_weight(bag, phrase, weight * SEMANTIC_PHRASE_BOOST)
    for token in Tokenizer.tokenize(text):
        _add_weight(bag, token, weight)


def _tag_importance(tag: CandidateTag) -> float:
    rank = SEMANTIC_TAG_RANK_DEFAULT if tag.rank is None else tag.rank
    return clamp((130 - rank) / 100, 0.4, 1.8)


def build_weighted_bag(candidate: Candidate) -> dict[str, float]:
    """Weighted term bag from titles, synonyms, genres, tags and the description."""
    bag: dict[str, float] = defaultdict(float)

    _add_phrase_and_tokens(bag, candidate.title.english, SEMANTIC_WEIGHT_TITLE_ENGLISH)
    _add_phrase_and_tokens(bag, candidate.title.romaji, SEMANTIC_WEIGHT_TITLE_ROMAJI)
    _add_phrase_and_tokens(bag, candidate.title.native, SEMANTIC_WEIGHT_TITLE_NATIVE)

    for synonym in candidate.synonyms[:SEMANTIC_SYNONYM_LIMIT]:
        _add_phrase_and_tokens(bag, synonym, SEMANTIC_WEIGHT_SYNONYM)

    for genre in candidate.genres:
        _add_phrase_and_tokens(bag, genre, SEMANTIC_WEIGHT_GENRE)

    for tag in candidate.tags[:SEMANTIC_TAG_LIMIT]:
        if not (tag.name or "").strip():
            continue
        _add_phrase_and_tokens(bag, tag.name, SEMANTIC_WEIGHT_TAG * _tag_importance(tag))

    description = (candidate.description or "")[:SEMANTIC_DESCRIPTION_MAX_CHARS]
    for token in Tokenizer.tokenize(description):
        _add_weight(bag, token, SEMANTIC_WEIGHT_DESCRIPTION)

    return dict(bag)


def _l2_normalize(vector: dict[str, float]) -> dict[str, float]:
    norm = math.sqrt(sum(value * value for value in vector.values()))
    if not norm:
        return {}
    return {token: value / norm for token, value in vector.items()}


def _tfidf_vector(bag: dict[str, float], idf: dict[str, float]) -> dict[str, float]:
    total = sum(bag.values())
    if not total:
        return {}
    return _l2_normalize({token: (weight / total) * idf.get(token, 1.0) for token, weight in bag.items()})


def _dot(left: dict[str, float], right: dict[str, float]) -> float:
    """Cosine of two unit vectors."""
    if not left or not right:
        return 0.0
    small, large = (left, right) if len(left) <= len(right) else (right, left)
    return clamp(sum(value * large.get(token, 0.0) for token, value in small.items()))


def _centroid(vectors: list[dict[str, float]]) -> dict[str, float]:
    if not vectors:
        return {}
    summed: dict[str, float] = defaultdict(float)
    for vector in vectors:
        for token, value in vector.items():
            summed[token] += value
    return _l2_normalize({token: value / len(vectors) for token, value in summed.items()})


def build_semantic_similarity_map(seeds: Sequence[Candidate], candidates: Sequence[Candidate]) -> dict[int, float]:
    """
    Text similarity of each candidate to the seeds.

    Score is ``0.62 * cos(candidate, seed centroid) + 0.38 * max cos(candidate, seed)``
    over L2-normalized TF-IDF vectors, where ``idf = ln((1 + N) / (1 + df)) + 1``
    and N is the number of distinct items among seeds and candidates.

    Args:
        seeds: Liked items.
        candidates: Items to score.

    Returns:
        Candidate id -> similarity in [0, 1]. Empty when either input is empty;
        a candidate without any terms maps to 0.
    """
    if not seeds or not candidates:
        return {}

    corpus: dict[int, Candidate] = {}
    for item in [*seeds, *candidates]:
        corpus[item.id] = item

    bags: dict[int, dict[str, float]] = {}
    doc_freq: dict[str, int] = defaultdict(int)
    for item_id, item in corpus.items():
        bag = build_weighted_bag(item)
        bags[item_id] = bag
        for token in bag:
            doc_freq[token] += 1

    doc_count = max(1, len(corpus))
    idf = {token: math.log((1 + doc_count) / (1 + df)) + 1 for token, df in doc_freq.items()}
    vectors = {item_id: _tfidf_vector(bag, idf) for item_id, bag in bags.items()}

    seed_vectors = [vectors[seed.id] for seed in seeds if vectors.get(seed.id)]
    if not seed_vectors:
        logger.debug("No seed produced any semantic terms")
        return {}

    centroid = _centroid(seed_vectors)
    similarity: dict[int, float] = {}
    for candidate in candidates:
        vector = vectors.get(candidate.id)
        if not vector:
            similarity[candidate.id] = 0.0
            continue
        centroid_sim = _dot(vector, centroid)
        max_seed_sim = max(_dot(vector, seed_vector) for seed_vector in seed_vectors)
        similarity[candidate.id] = clamp(
            centroid_sim * SEMANTIC_CENTROID_WEIGHT + max_seed_sim * SEMANTIC_MAX_SEED_WEIGHT
        )

    logger.debug(f"Semantic similarity over {doc_count} documents for {len(similarity)} candidates")
    return similarity
