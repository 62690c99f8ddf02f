"""
Core data models / schemas for the Review Sentiment ETL system.

Every record is a frozen dataclass: once a stage has produced it, nothing
downstream can change it.
"""

from __future__ import annotations
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TextRecord:
    """One raw review / comment as extracted from the source."""
    text: str
    rating: Optional[float] = None
    author: Optional[str] = None
    date: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "rating": self.rating,
            "author": self.author,
            "date": self.date.isoformat() if self.date else None,
        }


@dataclass(frozen=True)
class ContentMetadata:
    word_count: int
    extracted_at: datetime
    content_type: str               # "text/html" | "generated"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word_count": self.word_count,
            "extracted_at": self.extracted_at.isoformat(),
            "content_type": self.content_type,
        }


@dataclass(frozen=True)
class ExtractedContent:
    title: str
    description: str
    text: str
    metadata: ContentMetadata
    reviews: Tuple[TextRecord, ...] = ()

    @property
    def is_generated(self) -> bool:
        return self.metadata.content_type == "generated"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "text": self.text,
            "metadata": self.metadata.to_dict(),
            "reviews": [r.to_dict() for r in self.reviews],
        }


# ---------------------------------------------------------------------------
# Analysis
# ---------------------------------------------------------------------------

class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"


@dataclass(frozen=True)
class SentimentResult:
    text: str
    sentiment: Sentiment
    polarity: float                 # [-1, 1]
    confidence: float               # [0, 100]
    subjectivity: float             # [0, 1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "sentiment": self.sentiment.value,
            "polarity": self.polarity,
            "confidence": self.confidence,
            "subjectivity": self.subjectivity,
        }


@dataclass(frozen=True)
class StatisticalMetrics:
    mean: float
    median: float
    mode: float
    std_dev: float
    variance: float                 # std_dev ** 2 (population)
    range: float                    # max - min
    skewness: float
    kurtosis: float                 # excess kurtosis

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class KeywordStat:
    word: str
    count: int
    avg_sentiment: float            # mean polarity of the records containing the word

    def to_dict(self) -> Dict[str, Any]:
        return {
            "word": self.word,
            "count": self.count,
            "avg_sentiment": round(self.avg_sentiment, 4),
        }


@dataclass(frozen=True)
class QualityDetails:
    missing_values: int
    duplicates: int
    outliers: int
    total_records: int


@dataclass(frozen=True)
class DataQualityMetrics:
    completeness: float
    accuracy: float
    consistency: float
    timeliness: float
    validity: float
    overall: float
    grade: str                      # A | B | C | D | F
    details: QualityDetails

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

class StageStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ETLStage:
    """Snapshot of one pipeline stage. The orchestrator replaces, never mutates."""
    name: str
    status: StageStatus = StageStatus.PENDING
    progress: int = 0
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    records_processed: int = 0
    error_message: Optional[str] = None

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.start_time and self.end_time:
            return (self.end_time - self.start_time).total_seconds()
        return None

    @property
    def is_terminal(self) -> bool:
        return self.status in (StageStatus.COMPLETED, StageStatus.FAILED)

    def __repr__(self):
        marks = {
            StageStatus.PENDING: "⏳",
            StageStatus.RUNNING: "🔄",
            StageStatus.COMPLETED: "✅",
            StageStatus.FAILED: "❌",
        }
        dur = f" ({self.duration_seconds:.2f}s)" if self.duration_seconds is not None else ""
        return f"{marks[self.status]} {self.name}{dur}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "progress": self.progress,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "records_processed": self.records_processed,
            "error_message": self.error_message,
        }


@dataclass(frozen=True)
class AnalysisResult:
    source_url: str
    domain: str
    extracted_content: ExtractedContent
    sentiment_results: Tuple[SentimentResult, ...]
    statistics: StatisticalMetrics
    keywords: Tuple[KeywordStat, ...]
    quality_metrics: DataQualityMetrics
    etl_stages: Tuple[ETLStage, ...]
    completed_at: datetime = field(default_factory=datetime.utcnow)

    def sentiment_counts(self) -> Dict[str, int]:
        counts = {s.value: 0 for s in Sentiment}
        for r in self.sentiment_results:
            counts[r.sentiment.value] += 1
        return counts

    def summary(self) -> str:
        counts = self.sentiment_counts()
        q = self.quality_metrics
        lines = [
            f"=== SENTIMENT ANALYSIS: {self.domain} ===",
            "",
            f"  Records    : {len(self.sentiment_results)}",
            f"  Positive   : {counts['Positive']}",
            f"  Negative   : {counts['Negative']}",
            f"  Neutral    : {counts['Neutral']}",
            f"  Mean pol.  : {self.statistics.mean:+.3f} (sd={self.statistics.std_dev:.3f})",
            f"  Quality    : {q.overall:.1f} (grade {q.grade})",
        ]
        if self.keywords:
            top = ", ".join(k.word for k in self.keywords[:5])
            lines.append(f"  Keywords   : {top}")
        return "\n".join(lines)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source_url": self.source_url,
            "domain": self.domain,
            "extracted_content": self.extracted_content.to_dict(),
            "sentiment_results": [r.to_dict() for r in self.sentiment_results],
            "statistics": self.statistics.to_dict(),
            "keywords": [k.to_dict() for k in self.keywords],
            "quality_metrics": self.quality_metrics.to_dict(),
            "etl_stages": [s.to_dict() for s in self.etl_stages],
            "completed_at": self.completed_at.isoformat(),
        }
