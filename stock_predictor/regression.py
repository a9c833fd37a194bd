"""Ordinary least squares line fitting and error metrics.

Pure Python so it can be tested without QGIS.
"""
from __future__ import annotations
import math
import statistics
from typing import NamedTuple, Optional, Sequence


class LinearModel(NamedTuple):
    """Fitted line ``y = slope * x + intercept``.

    ``predict`` is valid for any real x, including indices beyond the
    fitted range.
    """

    slope: float
    intercept: float

    def predict(self, x: float) -> float:
        return self.slope * x + self.intercept


def fit(xs: Sequence[float], ys: Sequence[float]) -> LinearModel:
    """Fit an OLS line through (xs, ys) using the closed-form normal equations.

    xs: independent values (positions in the series)
    ys: observed values, same length as xs

    When every x is identical (including a single point) the slope is
    defined as 0 and the intercept as the mean of ys.
    """
    if len(xs) != len(ys):
        raise ValueError(f"xs and ys must have equal length, got {len(xs)} and {len(ys)}")
    if len(xs) == 0:
        raise ValueError("xs and ys must be non-empty")

    n = len(xs)
    sum_x = sum(xs)
    sum_y = sum(ys)
    sum_xy = sum(x * y for x, y in zip(xs, ys))
    sum_xx = sum(x * x for x in xs)

    denom = n * sum_xx - sum_x * sum_x
    if denom == 0:
        return LinearModel(0.0, statistics.fmean(ys))

    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n
    return LinearModel(float(slope), float(intercept))


def rmse(actual: Sequence[float], predicted: Sequence[float]) -> Optional[float]:
    """Root mean squared error between two equal-length sequences.

    Returns None for empty input rather than averaging over zero elements.
    """
    if len(actual) != len(predicted):
        raise ValueError(
            f"actual and predicted must have equal length, got {len(actual)} and {len(predicted)}"
        )
    if len(actual) == 0:
        return None
    squared = [(a - p) ** 2 for a, p in zip(actual, predicted)]
    return math.sqrt(sum(squared) / len(squared))
