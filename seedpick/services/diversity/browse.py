import math
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence

from loguru import logger

from seedpick.models.candidate import Candidate
from seedpick.models.scoring import Step2DebugRow, Step2SelectionResult
from seedpick.services.constants import (
    DIVERSITY_GAIN_SPREAD_WEIGHT,
    DIVERSITY_TAG_WEIGHT_FLOOR,
    FIRST_PICK_DIVERSITY_GAIN,
    FRESH_STUDIO_BONUS,
    REDUNDANCY_CLOSE_YEAR_PENALTY,
    REDUNDANCY_FORMAT_PENALTY,
    REDUNDANCY_NEAR_YEAR_PENALTY,
    REDUNDANCY_STUDIO_WEIGHT,
    REDUNDANCY_TAG_WEIGHT,
    STEP2_EXPOSURE_LIMIT,
    STEP2_EXPOSURE_PENALTY,
    STEP2_FORMAT_RATIOS,
    STEP2_FORMAT_SLACK,
    STEP2_TAG_OVERLAP_PENALTY,
    STEP2_TARGET_COUNT,
    STEP2_WEIGHT_DIVERSITY,
    STEP2_WEIGHT_FORMAT_NEED,
    STEP2_WEIGHT_QUALITY,
    STEP2_WEIGHT_REDUNDANCY,
    STEP2_WEIGHT_YEAR_NEED,
    STEP2_YEAR_RATIOS,
    YEAR_BUCKET_NOVELTY_BONUS,
)
from seedpick.services.quality import quality_score
from seedpick.services.vectors import (
    build_tag_weight_map,
    clamp,
    dominant_tag_names,
    format_bucket,
    normalize_tag_name,
    studio_names,
    weighted_jaccard,
    year_bucket,
)

FranchiseKeyFn = Callable[[Candidate], str]


def compute_quota_targets(total: int, ratios: dict[str, float]) -> dict[str, int]:
    """
    Split ``total`` into integer quotas by largest remainder.

    Quotas always sum to ``total``; leftover slots go to the largest
    fractional parts first.
    """
    targets: dict[str, int] = {}
    remainders: list[tuple[str, float]] = []
    assigned = 0
    for key, ratio in ratios.items():
        raw = total * ratio
        floored = math.floor(raw)
        targets[key] = floored
        assigned += floored
        remainders.append((key, raw - floored))

    remainders.sort(key=lambda x: x[1], reverse=True)
    cursor = 0
    while assigned < total and remainders:
        targets[remainders[cursor % len(remainders)][0]] += 1
        assigned += 1
        cursor += 1
    return targets


class DiversityFeatures:
    """Per-candidate features compared when measuring redundancy."""

    def __init__(self, candidate: Candidate):
        self.candidate = candidate
        self.tag_map = build_tag_weight_map(candidate, floor=DIVERSITY_TAG_WEIGHT_FLOOR)
        self.studios = {name.lower() for name in studio_names(candidate)}
        self.top_tags = [key for key in (normalize_tag_name(name) for name in dominant_tag_names(candidate)) if key]
        self.year = candidate.season_year
        self.format = candidate.format
        self.year_bucket = year_bucket(candidate.season_year)
        self.format_bucket = format_bucket(candidate.format)


def studio_overlap_ratio(left: DiversityFeatures, right: DiversityFeatures) -> float:
    if not left.studios or not right.studios:
        return 0.0
    return len(left.studios & right.studios) / max(len(left.studios), len(right.studios))


def year_overlap_penalty(left: DiversityFeatures, right: DiversityFeatures) -> float:
    if not left.year or not right.year:
        return 0.0
    gap = abs(left.year - right.year)
    if gap <= 1:
        return REDUNDANCY_NEAR_YEAR_PENALTY
    if gap <= 3:
        return REDUNDANCY_CLOSE_YEAR_PENALTY
    return 0.0


def format_overlap_penalty(left: DiversityFeatures, right: DiversityFeatures) -> float:
    if left.format is None or right.format is None:
        return 0.0
    return REDUNDANCY_FORMAT_PENALTY if left.format == right.format else 0.0


def pair_redundancy(left: DiversityFeatures, right: DiversityFeatures) -> float:
    return (
        weighted_jaccard(left.tag_map, right.tag_map) * REDUNDANCY_TAG_WEIGHT
        + studio_overlap_ratio(left, right) * REDUNDANCY_STUDIO_WEIGHT
        + year_overlap_penalty(left, right)
        + format_overlap_penalty(left, right)
    )


def _redundancy(features: DiversityFeatures, selected: Sequence[DiversityFeatures]) -> float:
    if not selected:
        return 0.0
    return clamp(max(pair_redundancy(features, picked) for picked in selected))


def _diversity_gain(features: DiversityFeatures, selected: Sequence[DiversityFeatures], redundancy: float) -> float:
    if not selected:
        return FIRST_PICK_DIVERSITY_GAIN
    seen_studios = set().union(*(picked.studios for picked in selected))
    fresh_studio = any(studio not in seen_studios for studio in features.studios)
    same_bucket = sum(1 for picked in selected if picked.year_bucket == features.year_bucket)
    return clamp(
        (1 - redundancy) * DIVERSITY_GAIN_SPREAD_WEIGHT
        + (FRESH_STUDIO_BONUS if fresh_studio else 0.0)
        + YEAR_BUCKET_NOVELTY_BONUS / (1 + same_bucket)
    )


def compute_redundancy_penalty(candidate: Candidate, selected: Sequence[Candidate]) -> float:
    """
    Highest redundancy of ``candidate`` against any already-selected item.

    Per pair: ``0.62 * weighted tag Jaccard + 0.16 * studio overlap`` plus a
    year-gap penalty (0.08 within a year, 0.04 within three) and 0.08 for an
    identical format. Clamped to [0, 1].
    """
    return _redundancy(DiversityFeatures(candidate), [DiversityFeatures(picked) for picked in selected])


def compute_diversity_gain(candidate: Candidate, selected: Sequence[Candidate]) -> float:
    features = DiversityFeatures(candidate)
    picked = [DiversityFeatures(item) for item in selected]
    return _diversity_gain(features, picked, _redundancy(features, picked))


class BrowseListSelector:
    """
    Greedy, quota-constrained selection of a diverse browsing list.

    Runs up to three phases over a quality-sorted pool:

    1. year and format quotas enforced strictly
    2. format quotas get +2 headroom, year quotas dropped
    3. no quota constraints

    Each step scans every eligible candidate and takes the first one with the
    highest score. One item per franchise key across the whole call.
    """

    def __init__(
        self,
        pool: Sequence[Candidate],
        target_count: int,
        year_targets: dict[str, int],
        franchise_key_of: FranchiseKeyFn | None = None,
        exposure_ids: Iterable[int] = (),
    ):
        self.pool_size = len(pool)
        self.quality = {candidate.id: quality_score(candidate) for candidate in pool}
        self.ranked = sorted(pool, key=lambda c: self.quality[c.id], reverse=True)
        self.features = {candidate.id: DiversityFeatures(candidate) for candidate in self.ranked}
        self.total = max(0, min(target_count, len(self.ranked)))
        self.year_targets = year_targets
        self.format_targets = compute_quota_targets(target_count, STEP2_FORMAT_RATIOS)
        self.franchise_keys: dict[int, str] = (
            {candidate.id: franchise_key_of(candidate) for candidate in self.ranked}
            if franchise_key_of is not None
            else {}
        )
        self.exposure_ids = set(exposure_ids)

        self.selected: list[Candidate] = []
        self.selected_features: list[DiversityFeatures] = []
        self.debug_rows: list[Step2DebugRow] = []
        self.seen_ids: set[int] = set()
        self.seen_franchises: set[str] = set()
        self.selected_tag_freq: dict[str, int] = defaultdict(int)
        self.year_count: dict[str, int] = defaultdict(int)
        self.format_count: dict[str, int] = defaultdict(int)

    def _franchise_used(self, candidate: Candidate) -> bool:
        key = self.franchise_keys.get(candidate.id)
        return key is not None and key in self.seen_franchises

    def _can_use(self, candidate: Candidate, phase: int) -> bool:
        if candidate.id in self.seen_ids or self._franchise_used(candidate):
            return False
        features = self.features[candidate.id]
        if phase == 1 and self.year_count[features.year_bucket] >= self.year_targets.get(features.year_bucket, 0):
            return False
        if phase <= 2:
            slack = 0 if phase == 1 else STEP2_FORMAT_SLACK
            if self.format_count[features.format_bucket] >= self.format_targets[features.format_bucket] + slack:
                return False
        return True

    def _tag_overlap_penalty(self, features: DiversityFeatures) -> float:
        if not self.selected or not features.top_tags:
            return 0.0
        overlap = sum(self.selected_tag_freq.get(tag, 0) for tag in features.top_tags) / len(features.top_tags)
        return overlap * STEP2_TAG_OVERLAP_PENALTY

    @staticmethod
    def _need(count: int, target: int) -> float:
        return max(0, target - count) / max(1, target)

    def _score(self, candidate: Candidate) -> Step2DebugRow:
        features = self.features[candidate.id]
        quality = self.quality[candidate.id]
        redundancy = _redundancy(features, self.selected_features)
        diversity_gain = _diversity_gain(features, self.selected_features, redundancy)
        exposure_penalty = STEP2_EXPOSURE_PENALTY if candidate.id in self.exposure_ids else 0.0
        year_need = self._need(
            self.year_count[features.year_bucket], self.year_targets.get(features.year_bucket, 0)
        )
        format_need = self._need(
            self.format_count[features.format_bucket], self.format_targets[features.format_bucket]
        )

        score = (
            quality * STEP2_WEIGHT_QUALITY
            + diversity_gain * STEP2_WEIGHT_DIVERSITY
            + year_need * STEP2_WEIGHT_YEAR_NEED
            + format_need * STEP2_WEIGHT_FORMAT_NEED
            - redundancy * STEP2_WEIGHT_REDUNDANCY
            - self._tag_overlap_penalty(features)
            - exposure_penalty
        )
        return Step2DebugRow.model_construct(
            candidate_id=candidate.id,
            title=candidate.display_title,
            year=candidate.season_year,
            format=candidate.format,
            year_bucket=features.year_bucket,
            quality=quality,
            redundancy_penalty=redundancy,
            diversity_gain=diversity_gain,
            exposure_penalty=exposure_penalty,
            score=score,
            top_tags=dominant_tag_names(candidate),
            studios=studio_names(candidate),
        )

    def _accept(self, candidate: Candidate) -> None:
        self.selected.append(candidate)
        self.selected_features.append(self.features[candidate.id])
        self.seen_ids.add(candidate.id)
        key = self.franchise_keys.get(candidate.id)
        if key is not None:
            self.seen_franchises.add(key)

    def _pick(self, candidate: Candidate, row: Step2DebugRow) -> None:
        features = self.features[candidate.id]
        self._accept(candidate)
        self.year_count[features.year_bucket] += 1
        self.format_count[features.format_bucket] += 1
        for tag in features.top_tags:
            self.selected_tag_freq[tag] += 1
        self.debug_rows.append(row)

    def _run_phase(self, phase: int) -> None:
        while len(self.selected) < self.total:
            best: Candidate | None = None
            best_row: Step2DebugRow | None = None
            for candidate in self.ranked:
                if not self._can_use(candidate, phase):
                    continue
                row = self._score(candidate)
                # strict comparison: the first maximum in quality order wins
                if best_row is None or row.score > best_row.score:
                    best, best_row = candidate, row
            if best is None or best_row is None:
                break
            self._pick(best, best_row)

    def select(self) -> Step2SelectionResult:
        for phase in (1, 2, 3):
            self._run_phase(phase)
            logger.debug(f"Browse phase {phase}: {len(self.selected)}/{self.total} selected")
            if len(self.selected) >= self.total:
                break

        return Step2SelectionResult(
            selected=self.selected,
            debug_rows=self.debug_rows,
            year_targets=self.year_targets,
            format_targets=self.format_targets,
            pool_size=self.pool_size,
        )


def select_step2_diverse_candidates(
    pool: Sequence[Candidate],
    total: int = STEP2_TARGET_COUNT,
    franchise_key_of: FranchiseKeyFn | None = None,
    exposure_history: Sequence[int] | None = None,
    exposure_limit: int = STEP2_EXPOSURE_LIMIT,
) -> Step2SelectionResult:
    """
    Pick a diverse browsing list from a candidate pool.

    Year quotas (modern 0.6 / mid 0.3 / classic 0.1) and format quotas
    (tv 0.7 / other 0.3) are derived from ``total``. Candidates shown recently
    (last ``exposure_limit`` ids of ``exposure_history``) are penalized, not excluded.

    Args:
        pool: Candidates with unique ids.
        total: Desired list length.
        franchise_key_of: Groups related entries; at most one per key is picked.
        exposure_history: Previously shown ids, oldest first.
        exposure_limit: How many of the most recent exposures count.

    Returns:
        Step2SelectionResult; shorter than ``total`` when the pool runs out.
    """
    year_targets = compute_quota_targets(total, STEP2_YEAR_RATIOS)
    exposure_ids = list(exposure_history or [])[-exposure_limit:] if exposure_limit > 0 else []
    selector = BrowseListSelector(
        pool,
        total,
        year_targets,
        franchise_key_of=franchise_key_of,
        exposure_ids=exposure_ids,
    )
    result = selector.select()
    logger.info(f"Browse list: {len(result.selected)} of {total} requested from a pool of {result.pool_size}")
    return result
