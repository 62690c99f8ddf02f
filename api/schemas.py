"""
Pydantic schemas for API request/response validation.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime

from config.settings import settings


# ─── Request Schemas ─────────────────────────────────────────────────────────

class ScoreTextRequest(BaseModel):
    text: str = Field(..., max_length=20000)


class RunAnalysisRequest(BaseModel):
    url: str = Field(..., description="http(s) URL of the page to analyze")
    keyword_top_n: int = Field(settings.KEYWORD_TOP_N, ge=1, le=100)


# ─── Response Schemas ────────────────────────────────────────────────────────

class SentimentResponse(BaseModel):
    text: str
    sentiment: str
    polarity: float
    confidence: float
    subjectivity: float


class StageResponse(BaseModel):
    name: str
    status: str
    progress: int
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    records_processed: int
    error_message: Optional[str] = None


class JobResponse(BaseModel):
    job_id: str
    url: str
    status: str
    stages: List[StageResponse]
    error: Optional[str] = None
    failed_stage: Optional[str] = None
    created_at: datetime
    finished_at: Optional[datetime] = None


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: datetime
