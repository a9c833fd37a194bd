"""Synthetic price series for demonstrating the forecaster."""
from __future__ import annotations
import logging
import math
from datetime import date, timedelta
from typing import List, Optional

import numpy as np

from .data_validation import PricePoint

LOGGER = logging.getLogger(__name__)

DEFAULT_SAMPLE_DAYS = 120
START_PRICE = 100.0


def generate_sample_series(days: int = DEFAULT_SAMPLE_DAYS, seed: Optional[int] = None,
                           end: Optional[date] = None) -> List[PricePoint]:
    """Generate a daily price walk with a gentle uptrend, a sine wave and noise.

    days: number of daily observations
    seed: seed for the random generator; pass one for reproducible series
    end: the series covers the ``days`` days before this date (default today)
    """
    rng = np.random.default_rng(seed)
    end = end or date.today()
    start = end - timedelta(days=days)

    points: List[PricePoint] = []
    base = START_PRICE
    for i in range(days):
        base += math.sin(i / 8) * 0.8 + (rng.random() - 0.5) * 1.2 + 0.15
        day = start + timedelta(days=i)
        points.append(PricePoint(day.isoformat(), max(1.0, round(base, 2))))

    LOGGER.info(f"Generated {len(points)} sample price points (seed={seed})")
    return points
