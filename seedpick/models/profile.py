from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class FeedbackSignal(str, Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class UserProfile(BaseModel):
    """
    Long-lived, decaying taste signal for one user.

    Tag weights are capped per tag; the exposure history holds previously shown
    candidate ids, de-duplicated and ordered most-recent-last. The engine only
    produces and consumes snapshots of this value; persistence belongs to the caller.
    """

    liked_tags: dict[str, float] = Field(default_factory=dict, description="Tag name → liked weight")
    disliked_tags: dict[str, float] = Field(default_factory=dict, description="Tag name → disliked weight")
    exposure_history: list[int] = Field(default_factory=list, description="Shown candidate ids, oldest first")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def get_top_liked(self, limit: int = 8) -> list[tuple[str, float]]:
        return sorted(self.liked_tags.items(), key=lambda x: x[1], reverse=True)[:limit]

    def get_top_disliked(self, limit: int = 8) -> list[tuple[str, float]]:
        return sorted(self.disliked_tags.items(), key=lambda x: x[1], reverse=True)[:limit]


class ProfileScoreResult(BaseModel):
    bonus: float = 0.0
    penalty: float = 0.0
    exposure_penalty: float = 0.0
    total: float = 0.0
    matched_liked_tags: list[str] = Field(default_factory=list)
    matched_disliked_tags: list[str] = Field(default_factory=list)


class SessionStep(BaseModel):
    """One browsing step exchanged with the session store."""

    step_index: int
    shown_ids: list[int] = Field(default_factory=list)
    liked_ids: list[int] = Field(default_factory=list)
    disliked_ids: list[int] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @field_validator("shown_ids", "liked_ids", "disliked_ids")
    @classmethod
    def _dedupe(cls, value: list[int]) -> list[int]:
        return list(dict.fromkeys(value))
