"""Pure analytics: aggregation, statistics and trend building."""

from .aggregation import Aggregation, Bucket, aggregate
from .statistics import DistributionStats, calculate_balance_score, calculate_distribution, workload_status
from .trends import PeriodPoint, TrendResult, build_trend, enumerate_period_keys, week_start

__all__ = [
    "Aggregation",
    "Bucket",
    "aggregate",
    "DistributionStats",
    "calculate_balance_score",
    "calculate_distribution",
    "workload_status",
    "PeriodPoint",
    "TrendResult",
    "build_trend",
    "enumerate_period_keys",
    "week_start",
]
