"""
Core data models for the Review Sentiment ETL system.
"""

from .schemas import (
    TextRecord,
    ContentMetadata,
    ExtractedContent,
    Sentiment,
    SentimentResult,
    StatisticalMetrics,
    KeywordStat,
    QualityDetails,
    DataQualityMetrics,
    StageStatus,
    ETLStage,
    AnalysisResult,
)
from .exceptions import (
    AnalysisError,
    FetchFailure,
    InvalidURLError,
    EmptySampleError,
    StageFailure,
    PipelineCancelled,
)

__all__ = [
    "TextRecord",
    "ContentMetadata",
    "ExtractedContent",
    "Sentiment",
    "SentimentResult",
    "StatisticalMetrics",
    "KeywordStat",
    "QualityDetails",
    "DataQualityMetrics",
    "StageStatus",
    "ETLStage",
    "AnalysisResult",
    "AnalysisError",
    "FetchFailure",
    "InvalidURLError",
    "EmptySampleError",
    "StageFailure",
    "PipelineCancelled",
]
