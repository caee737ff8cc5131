from typing import Literal

from pydantic import BaseModel, Field

from seedpick.models.candidate import Candidate, MediaFormat

YearBucket = Literal["classic", "mid", "modern"]
FormatBucket = Literal["tv", "other"]


class SeedPreferenceVector(BaseModel):
    """
    Aggregate taste of an ordered list of liked seeds.

    ``tag_weights`` is max-normalized so the strongest tag is exactly 1.0.
    """

    tag_weights: dict[str, float] = Field(default_factory=dict)
    tag_frequency: dict[str, int] = Field(default_factory=dict)
    year_bucket_frequency: dict[str, int] = Field(default_factory=dict)
    seed_years: list[int] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.tag_weights


class FinalScoreBreakdown(BaseModel):
    similarity: float = 0.0
    quality: float = 0.0
    novelty: float = 0.0
    rare_tag_score: float = 0.0
    year_novelty_score: float = 0.0
    profile_bonus: float | None = None
    semantic: float | None = None
    total: float = 0.0


class ScoredFinalCandidate(BaseModel):
    candidate: Candidate
    tag_vector: dict[str, float] = Field(default_factory=dict)
    dominant_tags: list[str] = Field(default_factory=list)
    breakdown: FinalScoreBreakdown = Field(default_factory=FinalScoreBreakdown)
    reason: str = ""


class Step2DebugRow(BaseModel):
    candidate_id: int
    title: str
    year: int | None = None
    format: MediaFormat | None = None
    year_bucket: str
    quality: float
    redundancy_penalty: float
    diversity_gain: float
    exposure_penalty: float
    score: float
    top_tags: list[str] = Field(default_factory=list)
    studios: list[str] = Field(default_factory=list)


class Step2SelectionResult(BaseModel):
    selected: list[Candidate] = Field(default_factory=list)
    debug_rows: list[Step2DebugRow] = Field(default_factory=list)
    year_targets: dict[str, int] = Field(default_factory=dict)
    format_targets: dict[str, int] = Field(default_factory=dict)
    pool_size: int = 0


class MmrDebugRow(BaseModel):
    candidate_id: int
    title: str
    year: int | None = None
    format: MediaFormat | None = None
    base: float
    mmr: float
    redundancy: float
    similarity: float
    quality: float
    novelty: float
    profile_bonus: float | None = None
    key_tags: list[str] = Field(default_factory=list)


class MmrSelectionResult(BaseModel):
    selected: list[ScoredFinalCandidate] = Field(default_factory=list)
    debug_rows: list[MmrDebugRow] = Field(default_factory=list)


class RecommendationResult(BaseModel):
    picks: list[ScoredFinalCandidate] = Field(default_factory=list)
    mmr: MmrSelectionResult = Field(default_factory=MmrSelectionResult)
    preference: SeedPreferenceVector = Field(default_factory=SeedPreferenceVector)
