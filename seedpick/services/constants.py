from typing import Final

# Tag weighting (rank 0-100 -> weight)
TAG_RANK_DEFAULT: Final[float] = 35.0
TAG_WEIGHT_FLOOR: Final[float] = 0.15  # Seed and candidate vectors
DIVERSITY_TAG_WEIGHT_FLOOR: Final[float] = 0.1  # Browse-list redundancy
TAG_VECTOR_LIMIT: Final[int] = 16
DOMINANT_TAG_LIMIT: Final[int] = 4
STUDIO_LIMIT: Final[int] = 3

# Seed recency (last seed weighs up to 1.4x the first)
SEED_RECENCY_BOOST: Final[float] = 0.4

# Quality score
QUALITY_SCORE_BASELINE: Final[float] = 50.0
QUALITY_SCORE_RANGE: Final[float] = 45.0
QUALITY_POPULARITY_CEILING: Final[float] = 5.4
QUALITY_FAVOURITES_CEILING: Final[float] = 4.8
QUALITY_TRENDING_CEILING: Final[float] = 5.0
QUALITY_WEIGHT_SCORE: Final[float] = 0.52
QUALITY_WEIGHT_POPULARITY: Final[float] = 0.24
QUALITY_WEIGHT_FAVOURITES: Final[float] = 0.16
QUALITY_WEIGHT_TRENDING: Final[float] = 0.08

# Final score
FINAL_WEIGHT_SIMILARITY: Final[float] = 0.65
FINAL_WEIGHT_QUALITY: Final[float] = 0.20
FINAL_WEIGHT_NOVELTY: Final[float] = 0.15
NOVELTY_TAG_LIMIT: Final[int] = 12
NOVELTY_RARE_TAG_WEIGHT: Final[float] = 0.72
NOVELTY_YEAR_WEIGHT: Final[float] = 0.28
NOVELTY_UNTAGGED_SCORE: Final[float] = 0.2

# Reason thresholds
REASON_PROFILE_THRESHOLD: Final[float] = 0.08
REASON_SIMILARITY_THRESHOLD: Final[float] = 0.62
REASON_NOVELTY_THRESHOLD: Final[float] = 0.58
REASON_QUALITY_THRESHOLD: Final[float] = 0.68

# Browse list selection
STEP2_YEAR_RATIOS: Final[dict[str, float]] = {"modern": 0.6, "mid": 0.3, "classic": 0.1}
STEP2_FORMAT_RATIOS: Final[dict[str, float]] = {"tv": 0.7, "other": 0.3}
STEP2_FORMAT_SLACK: Final[int] = 2  # Extra format headroom in the second phase
STEP2_TAG_OVERLAP_PENALTY: Final[float] = 0.1
STEP2_EXPOSURE_PENALTY: Final[float] = 0.12
STEP2_WEIGHT_QUALITY: Final[float] = 0.62
STEP2_WEIGHT_DIVERSITY: Final[float] = 0.28
STEP2_WEIGHT_YEAR_NEED: Final[float] = 0.12
STEP2_WEIGHT_FORMAT_NEED: Final[float] = 0.06
STEP2_WEIGHT_REDUNDANCY: Final[float] = 0.25
FIRST_PICK_DIVERSITY_GAIN: Final[float] = 0.32
FRESH_STUDIO_BONUS: Final[float] = 0.12
YEAR_BUCKET_NOVELTY_BONUS: Final[float] = 0.1
DIVERSITY_GAIN_SPREAD_WEIGHT: Final[float] = 0.68

# Redundancy between two items
REDUNDANCY_TAG_WEIGHT: Final[float] = 0.62
REDUNDANCY_STUDIO_WEIGHT: Final[float] = 0.16
REDUNDANCY_NEAR_YEAR_PENALTY: Final[float] = 0.08  # Gap <= 1 year
REDUNDANCY_CLOSE_YEAR_PENALTY: Final[float] = 0.04  # Gap <= 3 years
REDUNDANCY_FORMAT_PENALTY: Final[float] = 0.08

# MMR pairwise similarity
MMR_WEIGHT_COSINE: Final[float] = 0.5
MMR_WEIGHT_TAG_JACCARD: Final[float] = 0.28
MMR_WEIGHT_GENRE_JACCARD: Final[float] = 0.22

# Semantic similarity
SEMANTIC_DESCRIPTION_MAX_CHARS: Final[int] = 900
SEMANTIC_TAG_LIMIT: Final[int] = 20
SEMANTIC_SYNONYM_LIMIT: Final[int] = 4
SEMANTIC_WEIGHT_TITLE_ENGLISH: Final[float] = 3.2
SEMANTIC_WEIGHT_TITLE_ROMAJI: Final[float] = 2.8
SEMANTIC_WEIGHT_TITLE_NATIVE: Final[float] = 2.8
SEMANTIC_WEIGHT_SYNONYM: Final[float] = 1.2
SEMANTIC_WEIGHT_GENRE: Final[float] = 2.2
SEMANTIC_WEIGHT_TAG: Final[float] = 1.5
SEMANTIC_WEIGHT_DESCRIPTION: Final[float] = 1.0
SEMANTIC_PHRASE_BOOST: Final[float] = 1.15
SEMANTIC_TAG_RANK_DEFAULT: Final[float] = 70.0
SEMANTIC_CENTROID_WEIGHT: Final[float] = 0.62
SEMANTIC_MAX_SEED_WEIGHT: Final[float] = 0.38

# Long-term profile
PROFILE_EXPOSURE_LIMIT: Final[int] = 300
PROFILE_DECAY: Final[float] = 0.98
PROFILE_TAG_CAP: Final[float] = 24.0
PROFILE_VALUE_FLOOR: Final[float] = 0.02
PROFILE_TAG_WEIGHT_FLOOR: Final[float] = 0.12
PROFILE_TAG_LIMIT: Final[int] = 18
PROFILE_LIKE_RELIEF: Final[float] = 0.5  # Share of a like removed from the disliked map
PROFILE_DISLIKE_RELIEF: Final[float] = 0.35  # Share of a dislike removed from the liked map
PROFILE_LIKED_BONUS_WEIGHT: Final[float] = 0.18
PROFILE_DISLIKED_PENALTY_WEIGHT: Final[float] = 0.22
PROFILE_EXPOSURE_PENALTY: Final[float] = 0.08
PROFILE_TOP_TAGS_LIMIT: Final[int] = 8

# Selection sizes and defaults
STEP2_TARGET_COUNT: Final[int] = 50
STEP2_EXPOSURE_LIMIT: Final[int] = 300
FINAL_MMR_LAMBDA: Final[float] = 0.72
FINAL_MMR_TOP_N: Final[int] = 10
FINAL_PICK_COUNT: Final[int] = 4
