"""
Long-term taste profile updates and scoring.

Every function returns a new UserProfile; the input snapshot is never mutated.
Feedback decays both tag maps by 0.98 and drops weights under 0.02 before
adding the new contribution, so stale taste fades out over time.
"""

import math
from collections.abc import Iterable, Mapping
from datetime import datetime, timezone
from typing import Any

from loguru import logger

from seedpick.models.candidate import Candidate
from seedpick.models.profile import FeedbackSignal, ProfileScoreResult, SessionStep, UserProfile
from seedpick.services.constants import (
    PROFILE_DECAY,
    PROFILE_DISLIKE_RELIEF,
    PROFILE_DISLIKED_PENALTY_WEIGHT,
    PROFILE_EXPOSURE_LIMIT,
    PROFILE_EXPOSURE_PENALTY,
    PROFILE_LIKE_RELIEF,
    PROFILE_LIKED_BONUS_WEIGHT,
    PROFILE_TAG_CAP,
    PROFILE_TAG_LIMIT,
    PROFILE_TAG_WEIGHT_FLOOR,
    PROFILE_TOP_TAGS_LIMIT,
    PROFILE_VALUE_FLOOR,
)
from seedpick.services.vectors import build_tag_weight_map, clamp


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _profile_tag_weights(candidate: Candidate) -> dict[str, float]:
    return build_tag_weight_map(candidate, limit=PROFILE_TAG_LIMIT, floor=PROFILE_TAG_WEIGHT_FLOOR)


def _decay(weights: Mapping[str, float]) -> dict[str, float]:
    decayed = {}
    for tag, value in weights.items():
        next_value = value * PROFILE_DECAY
        if next_value >= PROFILE_VALUE_FLOOR:
            decayed[tag] = next_value
    return decayed


def _merge_exposure(history: Iterable[int], shown_ids: Iterable[int]) -> list[int]:
    merged = list(history)
    for item_id in shown_ids:
        if item_id in merged:
            merged.remove(item_id)
        merged.append(item_id)
    return merged[-PROFILE_EXPOSURE_LIMIT:]


def _sanitize_weights(raw: Any) -> dict[str, float]:
    if not isinstance(raw, Mapping):
        return {}
    weights = {}
    for key, value in raw.items():
        if not key:
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.debug(f"Dropping non-numeric profile weight for {key!r}")
            continue
        if math.isfinite(number):
            weights[str(key)] = number
    return weights


def _sanitize_ids(raw: Any) -> list[int]:
    if not isinstance(raw, (list, tuple)):
        return []
    ids: list[int] = []
    for value in raw:
        if isinstance(value, bool):
            logger.debug(f"Dropping boolean id {value!r} from profile snapshot")
            continue
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.debug(f"Dropping invalid id {value!r} from profile snapshot")
            continue
        if math.isfinite(number) and number.is_integer():
            ids.append(int(number))
    # repeated ids keep their most recent position
    return _merge_exposure([], ids)


def create_empty_user_profile() -> UserProfile:
    return UserProfile()


def normalize_user_profile(raw: UserProfile | Mapping[str, Any] | None) -> UserProfile:
    """
    Build a well-formed profile from a stored snapshot.

    Accepts a UserProfile or a plain mapping (snake_case or camelCase keys).
    Non-numeric or non-finite weights and invalid ids are dropped, and the
    exposure history is trimmed to its most recent entries.
    """
    if raw is None:
        return create_empty_user_profile()
    if isinstance(raw, UserProfile):
        data: Mapping[str, Any] = raw.model_dump()
    else:
        data = raw

    def pick(*keys: str) -> Any:
        for key in keys:
            if key in data:
                return data[key]
        return None

    fields: dict[str, Any] = {
        "liked_tags": _sanitize_weights(pick("liked_tags", "likedTags")),
        "disliked_tags": _sanitize_weights(pick("disliked_tags", "dislikedTags")),
        "exposure_history": _sanitize_ids(pick("exposure_history", "exposureHistory"))[-PROFILE_EXPOSURE_LIMIT:],
    }
    updated_at = pick("updated_at", "updatedAt")
    if updated_at is not None:
        fields["updated_at"] = updated_at
    return UserProfile.model_validate(fields)


def update_exposure_history(profile: UserProfile, shown_ids: Iterable[int]) -> UserProfile:
    """
    Move each shown id to the end of the history and keep the latest 300.

    Applying the same ids twice leaves the history unchanged.
    """
    return profile.model_copy(
        update={
            "exposure_history": _merge_exposure(profile.exposure_history, shown_ids),
            "updated_at": _now(),
        }
    )


def update_profile_from_feedback(
    profile: UserProfile, candidate: Candidate, signal: FeedbackSignal | str
) -> UserProfile:
    """
    Fold one like/dislike into the profile.

    Both maps are decayed first. The candidate's rank-weighted top tags are then
    added to the matching map (capped at 24 per tag), and the same tags in the
    opposing map are reduced by half (like) or 35% (dislike) of the added weight.
    A final decay pass prunes anything that fell under the floor.

    Args:
        profile: Current profile snapshot.
        candidate: Item the user reacted to.
        signal: "like" or "dislike".

    Returns:
        Updated profile.
    """
    signal = FeedbackSignal(signal)
    liked = _decay(profile.liked_tags)
    disliked = _decay(profile.disliked_tags)

    if signal is FeedbackSignal.LIKE:
        target, opposing, relief = liked, disliked, PROFILE_LIKE_RELIEF
    else:
        target, opposing, relief = disliked, liked, PROFILE_DISLIKE_RELIEF

    for tag, weight in _profile_tag_weights(candidate).items():
        target[tag] = min(PROFILE_TAG_CAP, target.get(tag, 0.0) + weight)
        if opposing.get(tag):
            opposing[tag] = max(0.0, opposing[tag] - weight * relief)

    logger.debug(f"Profile {signal.value} from {candidate.id}: {len(liked)} liked, {len(disliked)} disliked tags")

    return profile.model_copy(
        update={
            "liked_tags": _decay(liked),
            "disliked_tags": _decay(disliked),
            "exposure_history": profile.exposure_history[-PROFILE_EXPOSURE_LIMIT:],
            "updated_at": _now(),
        }
    )


def score_with_profile(candidate: Candidate, profile: UserProfile) -> ProfileScoreResult:
    """
    Long-term adjustment for one candidate.

    Overlap with each map is normalized by the candidate's own tag weight, so
    ``bonus = liked_overlap * 0.18`` and ``penalty = disliked_overlap * 0.22``.
    A flat 0.08 applies when the candidate was already shown.
    """
    tag_weights = _profile_tag_weights(candidate)
    total_weight = max(1.0, sum(tag_weights.values()))

    liked_overlap = 0.0
    disliked_overlap = 0.0
    matched_liked = []
    matched_disliked = []
    for tag, weight in tag_weights.items():
        liked_weight = clamp(profile.liked_tags.get(tag, 0.0) / PROFILE_TAG_CAP)
        disliked_weight = clamp(profile.disliked_tags.get(tag, 0.0) / PROFILE_TAG_CAP)
        if liked_weight > 0:
            matched_liked.append(tag)
        if disliked_weight > 0:
            matched_disliked.append(tag)
        liked_overlap += weight * liked_weight
        disliked_overlap += weight * disliked_weight

    bonus = clamp(liked_overlap / total_weight) * PROFILE_LIKED_BONUS_WEIGHT
    penalty = clamp(disliked_overlap / total_weight) * PROFILE_DISLIKED_PENALTY_WEIGHT
    exposure_penalty = PROFILE_EXPOSURE_PENALTY if candidate.id in profile.exposure_history else 0.0

    return ProfileScoreResult(
        bonus=bonus,
        penalty=penalty,
        exposure_penalty=exposure_penalty,
        total=bonus - penalty - exposure_penalty,
        matched_liked_tags=matched_liked,
        matched_disliked_tags=matched_disliked,
    )


def top_liked_tags(profile: UserProfile, limit: int = PROFILE_TOP_TAGS_LIMIT) -> list[str]:
    return [tag for tag, _ in profile.get_top_liked(limit)]


def top_disliked_tags(profile: UserProfile, limit: int = PROFILE_TOP_TAGS_LIMIT) -> list[str]:
    return [tag for tag, _ in profile.get_top_disliked(limit)]


def build_session_step(
    step_index: int,
    shown_ids: Iterable[int],
    liked_ids: Iterable[int] = (),
    disliked_ids: Iterable[int] = (),
) -> SessionStep:
    return SessionStep(
        step_index=step_index,
        shown_ids=list(shown_ids),
        liked_ids=list(liked_ids),
        disliked_ids=list(disliked_ids),
    )
