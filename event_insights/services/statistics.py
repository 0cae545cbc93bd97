"""
Statistical helper functions shared by the insight detectors.

All helpers are pure and deterministic. Array arithmetic uses numpy; results
are returned as plain Python floats so they serialize cleanly in Pydantic
models.

Conventions:
- std_dev() is the SAMPLE standard deviation (ddof=1); history is a sample
  of the partner's behavior, not the whole population.
- percentile_rank() is the INCLUSIVE rank: values equal to the target count
  toward the percentile ("percentage of the pool at or below this value").
- linear_fit() regresses on the sequence index 0..n-1, not on dates, so
  unevenly spaced events do not bias the slope.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np


# Decimal places kept on derived statistics. Rounding removes float noise
# (e.g. 0.19999999999999998) that would otherwise flip threshold checks.
STAT_PRECISION: int = 6


@dataclass(frozen=True)
class LinearFit:
    """
    Least-squares line through (index, value) points.

    Attributes:
        slope: Change in value per period.
        intercept: Fitted value at index 0 (start of the window).
        r_squared: Coefficient of determination, 0 when the series is flat.
        residual_std_error: sqrt(SSres / (n - 2)), 0 for a perfect fit.
        points: Number of points fitted.
    """
    slope: float
    intercept: float
    r_squared: float
    residual_std_error: float
    points: int

    def predict(self, index: float) -> float:
        return self.intercept + self.slope * index


def mean(values: Sequence[float]) -> float:
    """
    Arithmetic mean of a list of values.

    Returns:
        Mean, or 0.0 for an empty list.
    """
    if len(values) == 0:
        return 0.0
    return float(np.mean(np.asarray(values, dtype=np.float64)))


def median(values: Sequence[float]) -> float:
    """Median of a list of values, or 0.0 for an empty list."""
    if len(values) == 0:
        return 0.0
    return float(np.median(np.asarray(values, dtype=np.float64)))


def std_dev(values: Sequence[float]) -> float:
    """
    Sample standard deviation (ddof=1).

    Args:
        values: List of numeric values.

    Returns:
        Sample standard deviation, or 0.0 if fewer than 2 values.
    """
    if len(values) < 2:
        return 0.0
    return float(np.std(np.asarray(values, dtype=np.float64), ddof=1))


def z_score(value: float, avg: float, std: float) -> Optional[float]:
    """
    Standard score of value against (avg, std).

    Returns:
        Z-score rounded to STAT_PRECISION, or None when std is 0 (undefined).
    """
    if std == 0:
        return None
    return round((value - avg) / std, STAT_PRECISION)


def percentile_rank(values: Sequence[float], value: float) -> float:
    """
    Inclusive percentile rank of value within values.

    percentile = count(v <= value) / len(values) * 100

    Ties count toward the percentile, so the largest value in a pool always
    ranks at 100 and a value below the whole pool ranks at 0.

    Args:
        values: Pool of comparison values.
        value: The value to rank.

    Returns:
        Percentile in [0, 100], or 50.0 for an empty pool.
    """
    if len(values) == 0:
        return 50.0
    pool = np.asarray(values, dtype=np.float64)
    at_or_below = int(np.count_nonzero(pool <= value))
    return round(at_or_below * 100.0 / len(pool), STAT_PRECISION)


def linear_fit(values: Sequence[float]) -> Optional[LinearFit]:
    """
    Fit value = intercept + slope * index with np.polyfit (degree 1).

    Args:
        values: Series ordered oldest to newest.

    Returns:
        LinearFit, or None for fewer than 2 points.

    Example:
        >>> fit = linear_fit([10, 12, 14, 16, 18])
        >>> (fit.slope, fit.intercept, fit.r_squared)
        (2.0, 10.0, 1.0)
    """
    n = len(values)
    if n < 2:
        return None

    y = np.asarray(values, dtype=np.float64)
    x = np.arange(n, dtype=np.float64)

    # Index is always distinct, so the fit is well-posed for n >= 2
    slope, intercept = np.polyfit(x, y, 1)
    slope = float(slope)
    intercept = float(intercept)

    fitted = intercept + slope * x
    ss_res = float(np.sum((y - fitted) ** 2))
    ss_tot = float(np.sum((y - y.mean()) ** 2))

    r_squared = 0.0 if ss_tot == 0 else max(0.0, 1.0 - ss_res / ss_tot)
    residual_std_error = float(np.sqrt(ss_res / (n - 2))) if n > 2 else 0.0

    return LinearFit(
        slope=round(slope, STAT_PRECISION),
        intercept=round(intercept, STAT_PRECISION),
        r_squared=round(r_squared, STAT_PRECISION),
        residual_std_error=round(residual_std_error, STAT_PRECISION),
        points=n,
    )


def has_variance(values: List[float]) -> bool:
    """True when the values are not all identical."""
    return len(values) > 1 and max(values) != min(values)
