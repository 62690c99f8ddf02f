"""
Pipeline runner: wires the stages together and returns an AnalysisResult.

Architecture:
  Fetch → Parse → Clean → Sentiment → Statistics → Keywords → Quality → Finalize
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import List, Optional

from analysis.keywords import KeywordExtractor
from analysis.quality import DataQualityAssessor
from analysis.sentiment import SentimentScorer
from config.settings import settings
from etl.base import CancellationToken, Orchestrator, ProgressCallback, Stage
from etl.extractor import ContentExtractor
from etl.stages import (
    FetchStage, ParseStage, CleanStage, SentimentStage,
    StatisticsStage, KeywordStage, QualityStage, FinalizeStage,
)
from models.schemas import AnalysisResult

logger = logging.getLogger(__name__)


class AnalysisPipeline:
    """
    Entry point: `run(url)` (blocking) or `await execute(url)`.

    Collaborators are injected so tests can replace the extractor or the
    lexicon-backed scorer; each run gets its own Orchestrator and stage list.
    """

    def __init__(
        self,
        extractor: Optional[ContentExtractor] = None,
        scorer: Optional[SentimentScorer] = None,
        keyword_extractor: Optional[KeywordExtractor] = None,
        assessor: Optional[DataQualityAssessor] = None,
        on_progress: Optional[ProgressCallback] = None,
        keyword_top_n: int = settings.KEYWORD_TOP_N,
    ):
        self.extractor = extractor or ContentExtractor()
        self.scorer = scorer or SentimentScorer()
        self.keyword_extractor = keyword_extractor or KeywordExtractor(scorer=self.scorer)
        self.assessor = assessor or DataQualityAssessor()
        self.on_progress = on_progress
        self.keyword_top_n = keyword_top_n

    def build_stages(self, url: str) -> List[Stage]:
        return [
            FetchStage(self.extractor),
            ParseStage(),
            CleanStage(),
            SentimentStage(self.scorer),
            StatisticsStage(),
            KeywordStage(self.keyword_extractor, self.keyword_top_n),
            QualityStage(self.assessor),
            FinalizeStage(url),
        ]

    def build_orchestrator(self, url: str, cancel_token: Optional[CancellationToken] = None) -> Orchestrator:
        return Orchestrator(
            stages=self.build_stages(url),
            on_progress=self.on_progress,
            cancel_token=cancel_token,
        )

    def run(self, url: str, cancel_token: Optional[CancellationToken] = None) -> AnalysisResult:
        """
        Execute every stage for `url`. Raises StageFailure (with the stage name)
        on the first failing stage and PipelineCancelled if cancelled; no
        partial result is ever returned.
        """
        orchestrator = self.build_orchestrator(url, cancel_token)
        outputs = orchestrator.execute(url)

        result = AnalysisResult(
            source_url=url,
            domain=outputs["finalize"],
            extracted_content=outputs["fetch"],
            sentiment_results=outputs["sentiment"],
            statistics=outputs["statistics"],
            keywords=outputs["keywords"],
            quality_metrics=outputs["quality"],
            etl_stages=orchestrator.stages,
            completed_at=datetime.utcnow(),
        )
        logger.info(orchestrator.summary())
        return result

    async def execute(self, url: str, cancel_token: Optional[CancellationToken] = None) -> AnalysisResult:
        """Async entry point; the stages themselves run in a worker thread."""
        return await asyncio.to_thread(self.run, url, cancel_token)


def run_analysis(
    url: str,
    on_progress: Optional[ProgressCallback] = None,
    keyword_top_n: int = settings.KEYWORD_TOP_N,
) -> AnalysisResult:
    """Convenience wrapper with default collaborators."""
    return AnalysisPipeline(on_progress=on_progress, keyword_top_n=keyword_top_n).run(url)
