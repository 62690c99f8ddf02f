"""
Configuration & Settings
Review Sentiment ETL
"""

from pydantic import BaseModel
from typing import Optional


class Settings(BaseModel):
    # App
    APP_NAME: str = "Review Sentiment ETL"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Extraction
    REQUEST_TIMEOUT: int = 15
    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    )
    MAX_REVIEWS_PER_PAGE: int = 50
    REVIEW_MIN_CHARS: int = 21
    REVIEW_MAX_CHARS: int = 500
    FALLBACK_MIN_REVIEWS: int = 20
    FALLBACK_MAX_REVIEWS: int = 49
    FALLBACK_MAX_AGE_DAYS: int = 30

    # Cleaning
    # Records must be strictly longer than this (in characters) to be analyzed.
    MIN_RECORD_LENGTH: int = 10

    # Sentiment scoring
    POLARITY_THRESHOLD: float = 0.1
    INTENSIFIER_MULTIPLIER: float = 1.5
    CONFIDENCE_PER_MATCH: float = 10.0
    SUBJECTIVITY_PER_MATCH: float = 0.5
    LEXICON_PATH: Optional[str] = None

    # Keywords
    KEYWORD_MIN_LENGTH: int = 4
    KEYWORD_TOP_N: int = 15

    # Data quality
    OUTLIER_STD_MULTIPLIER: float = 2.0
    TIMELINESS_SCORE: float = 95.0

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    # Finished background jobs kept in memory; oldest finished are evicted first.
    MAX_JOBS: int = 100


settings = Settings()
