"""
Exceptions raised by the analysis core and the ETL pipeline.
"""


class AnalysisError(Exception):
    """Base exception for the Review Sentiment ETL system."""

    def __init__(self, message: str = "Analysis failed"):
        self.message = message
        super().__init__(self.message)


class FetchFailure(AnalysisError):
    """Network / HTTP error while fetching a source URL. Recovered inside the extractor."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch {url}: {reason}")


class InvalidURLError(AnalysisError, ValueError):
    """The source URL cannot be fetched at all (missing scheme or host)."""


class EmptySampleError(AnalysisError, ValueError):
    """Statistics or quality assessment requested over zero records."""

    def __init__(self, message: str = "Cannot summarize an empty sample"):
        super().__init__(message)


class StageFailure(AnalysisError):
    """A pipeline stage raised; the run was aborted at that stage."""

    def __init__(self, stage_name: str, message: str):
        self.stage_name = stage_name
        super().__init__(f"Stage '{stage_name}' failed: {message}")
        # keep the stage's own message for callers / API responses
        self.message = message


class PipelineCancelled(AnalysisError):
    """The run was cancelled between stages."""

    def __init__(self, next_stage: str):
        self.next_stage = next_stage
        super().__init__(f"Pipeline cancelled before '{next_stage}'")
