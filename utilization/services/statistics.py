"""Distribution statistics and workload balance scoring."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Sequence

import pandas as pd

UNDERLOADED = "underloaded"
NORMAL = "normal"
OVERLOADED = "overloaded"


def round2(value: float) -> float:
    """Round half up to 2 decimals, mapping non-finite values to 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    # Halves go toward +inf (0.125 -> 0.13, -0.125 -> -0.12), not to even
    return math.floor(float(value) * 100 + 0.5) / 100


def safe_ratio(numerator: float, denominator: float) -> float:
    """numerator / denominator rounded to 2 decimals; 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return round2(numerator / denominator)


def safe_percent(numerator: float, denominator: float) -> float:
    """Rate in percent, clamped to [0, 100] and rounded; 0 when the denominator is 0."""
    if not denominator:
        return 0.0
    return round2(max(0.0, min(100.0, numerator / denominator * 100)))


@dataclass(frozen=True)
class DistributionStats:
    min: int = 0
    max: int = 0
    avg: float = 0.0
    median: float = 0.0
    stddev: float = 0.0
    q1: int = 0
    q2: int = 0
    q3: int = 0

    def to_dict(self) -> Dict[str, object]:
        """Serialize using the report field names."""
        return {
            "min_tickets": self.min,
            "max_tickets": self.max,
            "avg_tickets": self.avg,
            "median_tickets": self.median,
            "std_deviation": self.stddev,
            "quartiles": {"q1": self.q1, "q2": self.q2, "q3": self.q3},
        }


def calculate_distribution(values: Sequence[int]) -> DistributionStats:
    """
    Compute min/max/avg/median/stddev/quartiles over integer counts.
    
    Standard deviation is the population variant (ddof=0). Quartiles use the
    nearest-rank index ``floor(n * p)`` on the ascending-sorted values with no
    interpolation. Empty input yields all zeros.
    
    Args:
        values: Per-entity counts (e.g. tickets per technician)
    
    Returns:
        DistributionStats
    """
    if len(values) == 0:
        return DistributionStats()
    
    series = pd.Series(sorted(int(v) for v in values), dtype="int64")
    n = len(series)
    
    return DistributionStats(
        min=int(series.iloc[0]),
        max=int(series.iloc[-1]),
        avg=round2(series.mean()),
        median=round2(series.median()),
        stddev=round2(series.std(ddof=0)),
        q1=int(series.iloc[math.floor(n * 0.25)]),
        q2=int(series.iloc[math.floor(n * 0.5)]),
        q3=int(series.iloc[math.floor(n * 0.75)]),
    )


def calculate_balance_score(values: Sequence[int]) -> float:
    """
    Convert workload dispersion into a 0-100 score (100 = perfectly balanced).
    
    Uses the coefficient of variation so that only skew is penalized, not
    volume: ``clamp(0, 100, (1 - stddev / mean) * 100)``.
    """
    if len(values) <= 1:
        return 100.0
    
    series = pd.Series(list(values), dtype="float64")
    mean = series.mean()
    if mean == 0:
        return 100.0
    
    cv = series.std(ddof=0) / mean
    score = max(0.0, min(100.0, (1 - cv) * 100))
    return round2(score)


def workload_status(
    ticket_count: int,
    avg_tickets: float,
    underloaded_ratio: float = 0.5,
    overloaded_ratio: float = 1.5,
) -> str:
    """Classify a technician's load relative to the day's average."""
    if avg_tickets == 0:
        return NORMAL
    
    ratio = ticket_count / avg_tickets
    if ratio < underloaded_ratio:
        return UNDERLOADED
    if ratio > overloaded_ratio:
        return OVERLOADED
    return NORMAL


