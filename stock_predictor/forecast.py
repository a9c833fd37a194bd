"""Trend forecasting utilities used by the plugin.

Pure Python (plus pandas for calendar arithmetic) so it can be tested
without QGIS.
"""
from __future__ import annotations
import logging
import math
from typing import Dict, List, NamedTuple, Optional, Sequence, Tuple

import pandas as pd

from .data_validation import PricePoint
from .regression import LinearModel, fit, rmse

LOGGER = logging.getLogger(__name__)

# Trailing share of the series held out for the error metric starts here
VALIDATION_FRACTION = 0.8
PREDICTION_DECIMALS = 2


class ForecastResult(NamedTuple):
    """In-sample and future predictions kept as separate sequences.

    predicted: (index, value) for every observed index
    future: (index, value) for each step beyond the last observed index
    rmse: hold-out error, or None when it cannot be computed
    model: the fitted line, or None when nothing was fitted
    """

    predicted: List[Tuple[int, float]]
    future: List[Tuple[int, float]]
    rmse: Optional[float]
    model: Optional[LinearModel] = None


def evaluate(series: Sequence[float], horizon_days: int) -> ForecastResult:
    """Fit a trend line to ``series`` and extrapolate ``horizon_days`` steps.

    series: observed values ordered by time; position is used as x
    horizon_days: number of future steps to project (bounds are the caller's job)

    Non-finite values are excluded before fitting. The hold-out RMSE is
    computed on the trailing 20% using the rounded predictions.
    """
    ys = [float(v) for v in series if math.isfinite(v)]
    if len(ys) != len(series):
        LOGGER.warning(f"Excluded {len(series) - len(ys)} non-finite value(s) before fitting")
    if not ys:
        return ForecastResult(predicted=[], future=[], rmse=None, model=None)

    n = len(ys)
    xs = list(range(n))
    model = fit(xs, ys)

    predicted_values = [round(model.predict(x), PREDICTION_DECIMALS) for x in xs]

    split = math.floor(n * VALIDATION_FRACTION)
    holdout_rmse = rmse(ys[split:], predicted_values[split:])

    last_index = n - 1
    future = []
    for step in range(1, horizon_days + 1):
        x = last_index + step
        future.append((x, round(model.predict(x), PREDICTION_DECIMALS)))

    LOGGER.debug(
        f"Fitted slope={model.slope:.6f} intercept={model.intercept:.6f} "
        f"on {n} points, hold-out from index {split}"
    )
    return ForecastResult(
        predicted=list(zip(xs, predicted_values)),
        future=future,
        rmse=holdout_rmse,
        model=model,
    )


def future_dates(last_date: str, horizon_days: int) -> List[str]:
    """Calendar labels for each future step, one day apart after ``last_date``."""
    if horizon_days <= 0:
        return []
    start = pd.to_datetime(last_date, errors="coerce")
    if pd.isna(start):
        LOGGER.warning(f"Cannot parse last date {last_date!r}; using step offsets as labels")
        return [f"{last_date}+{step}" for step in range(1, horizon_days + 1)]
    days = pd.date_range(start + pd.Timedelta(days=1), periods=horizon_days, freq="D")
    return [d.strftime("%Y-%m-%d") for d in days]


def build_chart_rows(points: Sequence[PricePoint], result: ForecastResult) -> List[Dict]:
    """Merge observations and predictions into rows on a shared date axis.

    Future rows carry ``actual=None`` so a chart draws only the predicted line there.
    """
    if len(points) != len(result.predicted):
        raise ValueError(
            f"points and predictions must align, got {len(points)} and {len(result.predicted)}"
        )
    rows = [
        {"date": point.date, "actual": point.close, "predicted": value}
        for point, (_, value) in zip(points, result.predicted)
    ]
    if not points:
        return rows

    labels = future_dates(points[-1].date, len(result.future))
    for label, (_, value) in zip(labels, result.future):
        rows.append({"date": label, "actual": None, "predicted": value})
    return rows
