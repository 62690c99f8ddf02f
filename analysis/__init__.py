"""
Analytic core: sentiment scoring, statistics, keywords and data quality.
"""

from .sentiment import SentimentScorer, classify, tokenize
from .statistics import summarize
from .keywords import KeywordExtractor
from .quality import DataQualityAssessor, grade_for

__all__ = [
    "SentimentScorer", "classify", "tokenize",
    "summarize",
    "KeywordExtractor",
    "DataQualityAssessor", "grade_for",
]
