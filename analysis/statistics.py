"""
Statistics Engine
------------------
Descriptive statistics over the polarity values of one analysis run.

Variance, skewness and kurtosis are POPULATION moments (divide by N): a run
summarizes every record it extracted rather than estimating a wider
population from a sample.

  variance = Σ(x - μ)² / N          std_dev = √variance
  skewness = Σ((x - μ)/σ)³ / N
  kurtosis = Σ((x - μ)/σ)⁴ / N - 3  (excess)

A constant sample has σ = 0; skewness and kurtosis are then reported as 0.0.
"""

import math
import statistics
from collections import Counter
from typing import Sequence

import numpy as np

from models.exceptions import EmptySampleError
from models.schemas import StatisticalMetrics


def mode_of(sorted_values: Sequence[float]) -> float:
    """Most frequent value; ties go to the first one counted (the smallest)."""
    counts = Counter(sorted_values)
    # max() keeps the first maximal item in insertion order
    return max(counts.items(), key=lambda kv: kv[1])[0]


def standardized_moments(values: Sequence[float], mean: float, std_dev: float):
    """(skewness, excess kurtosis). Both 0.0 when std_dev is 0."""
    if std_dev == 0:
        return 0.0, 0.0
    z = (np.asarray(values, dtype=float) - mean) / std_dev
    skewness = float(np.mean(z ** 3))
    kurtosis = float(np.mean(z ** 4)) - 3.0
    return skewness, kurtosis


def summarize(values: Sequence[float]) -> StatisticalMetrics:
    if len(values) == 0:
        raise EmptySampleError("Cannot compute statistics over zero values")

    ordered = sorted(float(v) for v in values)

    mean = statistics.mean(ordered)
    median = statistics.median(ordered)
    mode = mode_of(ordered)

    std_dev = math.sqrt(statistics.pvariance(ordered, mu=mean))
    variance = std_dev * std_dev
    value_range = ordered[-1] - ordered[0]

    skewness, kurtosis = standardized_moments(ordered, mean, std_dev)

    return StatisticalMetrics(
        mean=mean,
        median=median,
        mode=mode,
        std_dev=std_dev,
        variance=variance,
        range=value_range,
        skewness=skewness,
        kurtosis=kurtosis,
    )
