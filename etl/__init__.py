from .base import Stage, Orchestrator, CancellationToken
from .extractor import ContentExtractor
from .pipeline import AnalysisPipeline, run_analysis

__all__ = [
    "Stage", "Orchestrator", "CancellationToken",
    "ContentExtractor",
    "AnalysisPipeline", "run_analysis",
]
