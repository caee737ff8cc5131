from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class MediaFormat(str, Enum):
    TV = "TV"
    TV_SHORT = "TV_SHORT"
    MOVIE = "MOVIE"
    SPECIAL = "SPECIAL"
    OVA = "OVA"
    ONA = "ONA"
    MUSIC = "MUSIC"
    MANGA = "MANGA"
    NOVEL = "NOVEL"
    ONE_SHOT = "ONE_SHOT"


class CandidateTag(BaseModel):
    """A ranked tag. Rank is relevance strength (0-100), not rarity."""

    model_config = ConfigDict(frozen=True)

    name: str | None = None
    rank: float | None = None


class CandidateTitle(BaseModel):
    model_config = ConfigDict(frozen=True)

    english: str | None = None
    romaji: str | None = None
    native: str | None = None


class Candidate(BaseModel):
    """
    A catalog media item considered for recommendation.

    Accepts catalog-shaped payloads (camelCase keys, ``studios.nodes[].name``)
    as well as snake_case field names. Missing fields mean "unknown".
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, alias_generator=to_camel)

    id: int
    id_mal: int | None = None
    title: CandidateTitle = Field(default_factory=CandidateTitle)
    format: MediaFormat | None = None
    season_year: int | None = None
    genres: list[str] = Field(default_factory=list)
    tags: list[CandidateTag] = Field(default_factory=list)
    average_score: float | None = None
    mean_score: float | None = None
    popularity: int | None = None
    favourites: int | None = None
    trending: int | None = None
    studios: list[str] = Field(default_factory=list)
    synonyms: list[str] = Field(default_factory=list)
    description: str | None = None

    @field_validator("genres", "tags", "synonyms", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("studios", mode="before")
    @classmethod
    def _flatten_studio_nodes(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, dict):
            value = value.get("nodes") or []
        names = []
        for node in value:
            name = node.get("name") if isinstance(node, dict) else node
            if name and str(name).strip():
                names.append(str(name).strip())
        return names

    @property
    def display_title(self) -> str:
        return self.title.english or self.title.romaji or self.title.native or f"#{self.id}"

    @property
    def score_value(self) -> float:
        """Average score, falling back to mean score, then zero."""
        if self.average_score is not None:
            return self.average_score
        if self.mean_score is not None:
            return self.mean_score
        return 0.0
