"""Summary composer - assembles each report shape from the fact reader."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Dict

from utilization.config import AnalyticsConfig, load_config
from utilization.domain.db import get_session_factory
from utilization.domain.facts import DateRange
from utilization.domain.repositories import FactReader

from .trends import build_technician_detail, build_trend_report
from .utilization import build_daily_snapshot, build_range_summary
from .workload import build_workload_distribution, build_workload_for_date

logger = logging.getLogger(__name__)


def _stamp(report: Dict[str, object]) -> Dict[str, object]:
    report["generated_at"] = datetime.now(timezone.utc).isoformat()
    return report


class SummaryComposer:
    """
    Read-only orchestration of the analytics reports.
    
    Each call reads fresh facts, computes the report and returns a plain,
    JSON-serializable dict. Nothing is cached or persisted; a failed read
    aborts the whole report.
    """
    
    def __init__(self, reader: FactReader, cfg: AnalyticsConfig | None = None):
        """
        Initialize composer.
        
        Args:
            reader: Fact reader bound to the store
            cfg: AnalyticsConfig (defaults when omitted)
        """
        self.reader = reader
        self.cfg = cfg or AnalyticsConfig()
    
    def daily_snapshot(self, day: str | date) -> Dict[str, object]:
        """Utilization metrics for a single date."""
        date_range = DateRange.single(day)
        report = build_daily_snapshot(self.reader, self.cfg, date_range)
        logger.info(
            "Snapshot %s: %s/%s technicians active",
            report["date"], report["active_technicians"], report["total_technicians"],
        )
        return _stamp(report)
    
    def range_summary(self, start: str | date, end: str | date) -> Dict[str, object]:
        """Per-technician utilization with top performers and underutilized lists."""
        date_range = DateRange.parse(start, end)
        report = build_range_summary(self.reader, self.cfg, date_range)
        logger.info("Range summary %s..%s: %s technicians", date_range.start, date_range.end,
                    report["overall"]["total_technicians"])
        return _stamp(report)
    
    def workload(self, day: str | date) -> Dict[str, object]:
        """Workload distribution and balance for one appointment date."""
        date_range = DateRange.single(day)
        report = build_workload_for_date(self.reader, self.cfg, date_range)
        logger.info("Workload %s: balance score %s", report["date"], report["balance_score"])
        return _stamp(report)
    
    def workload_distribution(self, start: str | date, end: str | date) -> Dict[str, object]:
        """Daily workload balance over a date range."""
        date_range = DateRange.parse(start, end)
        report = build_workload_distribution(self.reader, self.cfg, date_range)
        logger.info("Workload distribution %s..%s: avg balance %s", date_range.start, date_range.end,
                    report["workload_balance"]["avg_balance_score"])
        return _stamp(report)
    
    def trends(self, start: str | date, end: str | date, interval: str = "daily") -> Dict[str, object]:
        """Gap-filled utilization trend with summary and direction."""
        date_range = DateRange.parse(start, end)
        result = build_trend_report(self.reader, self.cfg, date_range, interval)
        logger.info("Trend %s..%s (%s): %s points, %s", date_range.start, date_range.end, interval,
                    len(result.data_points), result.comparisons.trend_direction)
        return _stamp(result.to_dict())
    
    def technician_detail(self, technician_id: str, start: str | date, end: str | date) -> Dict[str, object]:
        """Detailed breakdown for one technician; raises NotFoundError when unknown."""
        date_range = DateRange.parse(start, end)
        report = build_technician_detail(self.reader, self.cfg, technician_id, date_range)
        logger.info("Technician detail %s: %s days active", technician_id, report["summary"]["days_active"])
        return _stamp(report)


def build_composer(cfg: AnalyticsConfig | None = None, db_url: str | None = None) -> SummaryComposer:
    """
    Convenience function wiring a composer to a database.
    
    Args:
        cfg: AnalyticsConfig (loaded defaults when omitted)
        db_url: Overrides cfg.db_url when given
    
    Returns:
        SummaryComposer
    """
    cfg = cfg or load_config()
    session_factory = get_session_factory(db_url or cfg.db_url)
    reader = FactReader(session_factory, max_workers=cfg.max_workers)
    return SummaryComposer(reader, cfg)
