from pydantic_settings import BaseSettings, SettingsConfigDict

from seedpick.services.constants import (
    FINAL_MMR_LAMBDA,
    FINAL_MMR_TOP_N,
    FINAL_PICK_COUNT,
    STEP2_EXPOSURE_LIMIT,
    STEP2_TARGET_COUNT,
)


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="allow",
    )

    # Browse list
    STEP2_TARGET_COUNT: int = STEP2_TARGET_COUNT
    EXPOSURE_HISTORY_LIMIT: int = STEP2_EXPOSURE_LIMIT

    # Final list
    FINAL_MMR_LAMBDA: float = FINAL_MMR_LAMBDA
    FINAL_MMR_TOP_N: int = FINAL_MMR_TOP_N
    FINAL_PICK_COUNT: int = FINAL_PICK_COUNT
    # Share of the text similarity blended into the tag similarity (0 = tags only)
    SEMANTIC_BLEND_WEIGHT: float = 0.0

    # Discovery pacing, used by callers that fetch candidate pools
    DISCOVERY_REQUEST_GAP_MS: int = 120
    DISCOVERY_RATE_LIMIT: int = 90
    DISCOVERY_RATE_WINDOW_SECONDS: int = 60


settings = Settings()
