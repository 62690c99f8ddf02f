"""
Concrete pipeline stages.

  fetch → parse → clean → sentiment → statistics → keywords → quality → finalize

Input:  source URL (first stage)
Output: every stage's output, collected by the Orchestrator
"""

from typing import Any, List, Mapping, Optional, Tuple

from analysis.keywords import KeywordExtractor
from analysis.quality import DataQualityAssessor
from analysis.sentiment import SentimentScorer
from analysis.statistics import summarize
from config.settings import settings
from etl.base import Stage
from etl.extractor import ContentExtractor, clean_text, parse_domain
from models.schemas import (
    DataQualityMetrics, ExtractedContent, KeywordStat,
    SentimentResult, StatisticalMetrics, TextRecord,
)


class FetchStage(Stage):
    def __init__(self, extractor: Optional[ContentExtractor] = None):
        super().__init__(name="Extract: Fetching URL data", key="fetch")
        self.extractor = extractor or ContentExtractor()

    def run(self, url: str, outputs: Mapping[str, Any]) -> ExtractedContent:
        content = self.extractor.extract(url)
        if content.is_generated:
            self.logger.warning(f"Source unavailable, analyzing generated content for {url}")
        return content


class ParseStage(Stage):
    def __init__(self):
        super().__init__(name="Extract: Parsing content", key="parse")

    def run(self, content: ExtractedContent, outputs: Mapping[str, Any]) -> Tuple[TextRecord, ...]:
        self.logger.info(f"{len(content.reviews)} records in '{content.title}'")
        return tuple(content.reviews)


class CleanStage(Stage):
    """Collapses whitespace and drops records too short to carry sentiment."""

    def __init__(self, min_length: int = settings.MIN_RECORD_LENGTH):
        super().__init__(name="Transform: Cleaning text data", key="clean")
        self.min_length = min_length

    def run(self, records: Tuple[TextRecord, ...], outputs: Mapping[str, Any]) -> List[str]:
        cleaned = [clean_text(r.text) for r in records]
        kept = [t for t in cleaned if len(t) > self.min_length]
        dropped = len(records) - len(kept)
        if dropped:
            self.logger.info(f"Dropped {dropped} records of {self.min_length} chars or fewer")
        return kept


class SentimentStage(Stage):
    def __init__(self, scorer: Optional[SentimentScorer] = None):
        super().__init__(name="Transform: Sentiment analysis", key="sentiment")
        self.scorer = scorer or SentimentScorer()

    def run(self, texts: List[str], outputs: Mapping[str, Any]) -> Tuple[SentimentResult, ...]:
        return tuple(self.scorer.score(t) for t in texts)


class StatisticsStage(Stage):
    def __init__(self):
        super().__init__(name="Transform: Statistical analysis", key="statistics")

    def run(self, results: Tuple[SentimentResult, ...], outputs: Mapping[str, Any]) -> StatisticalMetrics:
        return summarize([r.polarity for r in results])


class KeywordStage(Stage):
    def __init__(self, extractor: Optional[KeywordExtractor] = None, top_n: int = settings.KEYWORD_TOP_N):
        super().__init__(name="Transform: Keyword extraction", key="keywords")
        self.extractor = extractor or KeywordExtractor()
        self.top_n = top_n

    def run(self, data: Any, outputs: Mapping[str, Any]) -> Tuple[KeywordStat, ...]:
        # sentiment results line up one-to-one with the cleaned texts
        polarities = [r.polarity for r in outputs["sentiment"]]
        return tuple(self.extractor.extract(outputs["clean"], self.top_n, polarities))


class QualityStage(Stage):
    def __init__(self, assessor: Optional[DataQualityAssessor] = None):
        super().__init__(name="Load: Quality assessment", key="quality")
        self.assessor = assessor or DataQualityAssessor()

    def run(self, data: Any, outputs: Mapping[str, Any]) -> DataQualityMetrics:
        return self.assessor.assess(outputs["sentiment"])


class FinalizeStage(Stage):
    """Checks the run produced every part of the report and resolves the source domain."""

    REQUIRED = ("fetch", "sentiment", "statistics", "keywords", "quality")

    def __init__(self, source_url: str):
        super().__init__(name="Complete: Finalizing report", key="finalize")
        self.source_url = source_url

    def run(self, data: Any, outputs: Mapping[str, Any]) -> str:
        missing = [k for k in self.REQUIRED if k not in outputs]
        if missing:
            raise RuntimeError(f"Report is missing stage outputs: {', '.join(missing)}")
        return parse_domain(self.source_url)
