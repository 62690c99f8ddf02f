"""
Data Quality Assessor
----------------------
Scores a batch of sentiment results on five dimensions, each in [0, 100]:

  completeness = non-blank texts / total
  accuracy     = min(100, mean confidence)
  consistency  = non-outlier polarities / total      (outlier: |x - μ| > 2σ)
  timeliness   = fixed TIMELINESS_SCORE
  validity     = distinct texts / total

overall = unweighted mean of the five; grade A/B/C/D/F from fixed bands.

Timeliness is a placeholder: no recency signal is measured, so the score is
a constant from settings.
"""

import logging
from typing import Sequence

import numpy as np

from analysis.statistics import summarize
from config.settings import settings
from models.exceptions import EmptySampleError
from models.schemas import DataQualityMetrics, QualityDetails, SentimentResult

logger = logging.getLogger(__name__)


GRADE_BANDS = (
    (90.0, "A"),
    (80.0, "B"),
    (70.0, "C"),
    (60.0, "D"),
)


def grade_for(overall: float) -> str:
    for floor, grade in GRADE_BANDS:
        if overall >= floor:
            return grade
    return "F"


def count_outliers(values: Sequence[float], std_multiplier: float = settings.OUTLIER_STD_MULTIPLIER) -> int:
    stats = summarize(values)
    deviations = np.abs(np.asarray(values, dtype=float) - stats.mean)
    return int(np.count_nonzero(deviations > std_multiplier * stats.std_dev))


class DataQualityAssessor:

    def __init__(
        self,
        timeliness_score: float = settings.TIMELINESS_SCORE,
        outlier_std_multiplier: float = settings.OUTLIER_STD_MULTIPLIER,
    ):
        self.timeliness_score = timeliness_score
        self.outlier_std_multiplier = outlier_std_multiplier

    def assess(self, results: Sequence[SentimentResult]) -> DataQualityMetrics:
        total = len(results)
        if total == 0:
            raise EmptySampleError("Cannot assess data quality of zero records")

        missing = sum(1 for r in results if not r.text or not r.text.strip())
        duplicates = total - len({r.text for r in results})
        outliers = count_outliers([r.polarity for r in results], self.outlier_std_multiplier)

        completeness = (total - missing) / total * 100
        accuracy = min(100.0, sum(r.confidence for r in results) / total)
        consistency = (total - outliers) / total * 100
        timeliness = self.timeliness_score
        validity = (total - duplicates) / total * 100

        overall = (completeness + accuracy + consistency + timeliness + validity) / 5
        grade = grade_for(overall)

        logger.info(
            f"Quality: overall={overall:.1f} grade={grade} "
            f"(missing={missing}, duplicates={duplicates}, outliers={outliers}, n={total})"
        )

        return DataQualityMetrics(
            completeness=completeness,
            accuracy=accuracy,
            consistency=consistency,
            timeliness=timeliness,
            validity=validity,
            overall=overall,
            grade=grade,
            details=QualityDetails(
                missing_values=missing,
                duplicates=duplicates,
                outliers=outliers,
                total_records=total,
            ),
        )
