"""Gap-filled daily/weekly time series with summary extremes and direction."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

import pandas as pd

from utilization.domain.facts import DateRange, Fact, format_date
from utilization.errors import ValidationError

from .statistics import round2, safe_percent, safe_ratio

DAILY = "daily"
WEEKLY = "weekly"
INTERVALS = (DAILY, WEEKLY)

INCREASING = "increasing"
DECREASING = "decreasing"
STABLE = "stable"

NOT_AVAILABLE = "N/A"


def validate_interval(interval: str) -> str:
    if interval not in INTERVALS:
        raise ValidationError(f'interval must be "daily" or "weekly", got "{interval}"')
    return interval


def week_start(day: date) -> date:
    """Monday of the ISO week containing ``day`` (Sunday maps back 6 days)."""
    return day - timedelta(days=day.weekday())


def period_key(day: date, interval: str) -> date:
    return week_start(day) if interval == WEEKLY else day


def enumerate_period_keys(date_range: DateRange, interval: str) -> List[date]:
    """
    Every period key spanning the range, in order.
    
    Daily keys are each calendar date; weekly keys step 7 days from the
    Monday of the range start up to the range end.
    """
    validate_interval(interval)
    if interval == WEEKLY:
        index = pd.date_range(week_start(date_range.start), date_range.end, freq="7D")
    else:
        index = pd.date_range(date_range.start, date_range.end, freq="D")
    return [ts.date() for ts in index]


def format_period_label(key: date, interval: str) -> str:
    """'5 Jan' for a day, '5 Jan - 11 Jan' for a week."""
    label = f"{key.day} {key.strftime('%b')}"
    if interval == WEEKLY:
        last = key + timedelta(days=6)
        label = f"{label} - {last.day} {last.strftime('%b')}"
    return label


@dataclass(frozen=True)
class PeriodPoint:
    date: str
    label: str
    active_technicians: int = 0
    total_tickets_assigned: int = 0
    total_tickets_confirmed: int = 0
    utilization_rate: float = 0.0
    confirmation_rate: float = 0.0
    avg_tickets_per_technician: float = 0.0


@dataclass(frozen=True)
class Extreme:
    value: int = 0
    date: str = NOT_AVAILABLE


@dataclass(frozen=True)
class TrendSummary:
    total_technicians: int
    avg_active_technicians: float
    peak_active_technicians: Extreme
    lowest_active_technicians: Extreme
    avg_utilization_rate: float
    avg_confirmation_rate: float
    total_tickets_period: int


@dataclass(frozen=True)
class TrendComparison:
    utilization_change: float
    tickets_change: float
    trend_direction: str


@dataclass(frozen=True)
class TrendResult:
    start: str
    end: str
    interval: str
    data_points: List[PeriodPoint]
    summary: TrendSummary
    comparisons: TrendComparison

    def to_dict(self) -> Dict[str, object]:
        return {
            "period": {"start": self.start, "end": self.end, "interval": self.interval},
            "data_points": [asdict(p) for p in self.data_points],
            "summary": asdict(self.summary),
            "comparisons": asdict(self.comparisons),
        }


@dataclass
class _PeriodAccumulator:
    technicians: Set[str] = field(default_factory=set)
    tickets: Set[str] = field(default_factory=set)
    confirmed_tickets: Set[str] = field(default_factory=set)


def percent_change(first: float, last: float) -> float:
    """Relative change from first to last in percent; 0 when first is 0."""
    if not first:
        return 0.0
    return round2((last - first) / first * 100)


def classify_direction(rates: Sequence[float], threshold_pct: float = 5.0) -> Tuple[str, float]:
    """
    Compare the mean of the second half of a series against the first half.
    
    The split index is ``floor(len / 2)``. Returns the direction and the
    relative change in percent (0 when the first half mean is 0).
    """
    split = len(rates) // 2
    first_half, second_half = rates[:split], rates[split:]
    avg_first = sum(first_half) / len(first_half) if first_half else 0.0
    avg_second = sum(second_half) / len(second_half) if second_half else 0.0

    change = (avg_second - avg_first) / avg_first * 100 if avg_first > 0 else 0.0
    if change > threshold_pct:
        return INCREASING, round2(change)
    if change < -threshold_pct:
        return DECREASING, round2(change)
    return STABLE, round2(change)


def _accumulate(
    keys: Iterable[date],
    assigned: Iterable[Fact],
    confirmed: Iterable[Fact],
    interval: str,
) -> Dict[date, _PeriodAccumulator]:
    periods = {key: _PeriodAccumulator() for key in keys}
    for fact in assigned:
        period = periods.get(period_key(fact.date, interval))
        if period is None:
            continue
        period.technicians.add(fact.employee_id)
        period.tickets.add(fact.ticket_id)
    for fact in confirmed:
        period = periods.get(period_key(fact.date, interval))
        if period is None:
            continue
        period.technicians.add(fact.employee_id)
        period.confirmed_tickets.add(fact.ticket_id)
    return periods


def build_trend(
    assigned: Iterable[Fact],
    confirmed: Iterable[Fact],
    date_range: DateRange,
    interval: str = DAILY,
    total_technicians: int = 0,
    threshold_pct: float = 5.0,
) -> TrendResult:
    """
    Build a complete time series over the range.
    
    Periods with no facts still appear with all-zero metrics. Peak/lowest
    track active technicians; lowest ignores zero-activity periods.
    
    Args:
        assigned: Assignment facts in the range
        confirmed: Confirmation facts in the range
        date_range: Inclusive range to cover
        interval: "daily" or "weekly"
        total_technicians: Roster size used for the utilization rate
        threshold_pct: Relative change needed to call a direction
    
    Returns:
        TrendResult
    """
    keys = enumerate_period_keys(date_range, interval)
    periods = _accumulate(keys, assigned, confirmed, interval)

    points: List[PeriodPoint] = []
    peak: Optional[Extreme] = None
    lowest: Optional[Extreme] = None

    for key in keys:
        period = periods[key]
        active = len(period.technicians)
        assigned_count = len(period.tickets)
        confirmed_count = len(period.confirmed_tickets)
        key_str = format_date(key)

        points.append(PeriodPoint(
            date=key_str,
            label=format_period_label(key, interval),
            active_technicians=active,
            total_tickets_assigned=assigned_count,
            total_tickets_confirmed=confirmed_count,
            utilization_rate=safe_percent(active, total_technicians),
            confirmation_rate=safe_percent(confirmed_count, assigned_count),
            avg_tickets_per_technician=safe_ratio(assigned_count, active),
        ))

        if active > (peak.value if peak else 0):
            peak = Extreme(active, key_str)
        if active > 0 and (lowest is None or active < lowest.value):
            lowest = Extreme(active, key_str)

    n = len(points)
    utilization = [p.utilization_rate for p in points]
    direction, _ = classify_direction(utilization, threshold_pct)

    first, last = (points[0], points[-1]) if points else (None, None)
    comparisons = TrendComparison(
        utilization_change=percent_change(first.utilization_rate, last.utilization_rate) if first else 0.0,
        tickets_change=percent_change(first.total_tickets_assigned, last.total_tickets_assigned) if first else 0.0,
        trend_direction=direction,
    )

    summary = TrendSummary(
        total_technicians=total_technicians,
        avg_active_technicians=safe_ratio(sum(p.active_technicians for p in points), n),
        peak_active_technicians=peak or Extreme(),
        lowest_active_technicians=lowest or Extreme(),
        avg_utilization_rate=safe_ratio(sum(utilization), n),
        avg_confirmation_rate=safe_ratio(sum(p.confirmation_rate for p in points), n),
        total_tickets_period=sum(p.total_tickets_assigned for p in points),
    )

    return TrendResult(
        start=format_date(date_range.start),
        end=format_date(date_range.end),
        interval=interval,
        data_points=points,
        summary=summary,
        comparisons=comparisons,
    )
