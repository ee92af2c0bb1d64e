"""Utilization trend report and per-technician detail."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Set

from utilization.config import AnalyticsConfig
from utilization.domain.facts import DateRange, format_date
from utilization.domain.repositories import FactReader
from utilization.errors import NotFoundError
from utilization.services.aggregation import TECHNICIAN, aggregate, ticket_day_key
from utilization.services.statistics import safe_ratio
from utilization.services.trends import TrendResult, build_trend, validate_interval


def build_trend_report(
    reader: FactReader,
    cfg: AnalyticsConfig,
    date_range: DateRange,
    interval: str = "daily",
) -> TrendResult:
    """Gap-filled utilization trend over the range at daily or weekly resolution."""
    validate_interval(interval)
    data = reader.fetch_concurrently(
        roster=lambda: reader.read_technician_roster(cfg.technician_role_codes),
        assigned=lambda: reader.read_assigned_facts(date_range),
        confirmed=lambda: reader.read_confirmed_facts(date_range),
    )
    return build_trend(
        data["assigned"],
        data["confirmed"],
        date_range,
        interval=interval,
        total_technicians=len(data["roster"]),
        threshold_pct=cfg.trend_threshold_pct,
    )


@dataclass
class _TechnicianDay:
    tickets: Set[str] = field(default_factory=set)
    key_tickets: Set[str] = field(default_factory=set)
    work_types: List[str] = field(default_factory=list)


def build_technician_detail(
    reader: FactReader,
    cfg: AnalyticsConfig,
    technician_id: str,
    date_range: DateRange,
) -> Dict[str, object]:
    """
    Daily, work type and geographic breakdown for one technician.
    
    Raises:
        NotFoundError: If the technician does not exist
    """
    data = reader.fetch_concurrently(
        technician=lambda: reader.get_technician(technician_id),
        facts=lambda: reader.read_appointment_facts(date_range, employee_id=technician_id),
    )
    technician = data["technician"]
    if technician is None:
        raise NotFoundError(f"Technician {technician_id} not found")
    facts = data["facts"]
    
    daily: Dict[date, _TechnicianDay] = {}
    work_type_names: Dict[str, str] = {}
    for fact in facts:
        day = daily.setdefault(fact.date, _TechnicianDay())
        day.tickets.add(fact.ticket_id)
        if fact.is_key_employee:
            day.key_tickets.add(fact.ticket_id)
        if fact.work_type_code:
            if fact.work_type_code not in day.work_types:
                day.work_types.append(fact.work_type_code)
            work_type_names.setdefault(fact.work_type_code, fact.work_type_name or "")
    
    bucket = aggregate(facts, dimensions=(TECHNICIAN,), ticket_key=ticket_day_key).get(TECHNICIAN, technician.id)
    work_type_counts = bucket.work_type_counts() if bucket else []
    province_counts = bucket.province_counts() if bucket else []
    province_names = reader.resolve_geography_names(code for code, _ in province_counts)
    
    daily_breakdown = []
    for day_date in sorted(daily):
        day = daily[day_date]
        # Appointment facts come from confirmations, so assigned and confirmed coincide
        daily_breakdown.append({
            "date": format_date(day_date),
            "tickets_assigned": len(day.tickets),
            "tickets_confirmed": len(day.tickets),
            "is_key_employee_count": len(day.key_tickets),
            "work_types": list(day.work_types),
        })
    
    total_assigned = sum(d["tickets_assigned"] for d in daily_breakdown)
    total_confirmed = sum(d["tickets_confirmed"] for d in daily_breakdown)
    days_active = len(daily_breakdown)
    
    work_type_breakdown = [
        {"code": code, "name": work_type_names.get(code, ""), "count": count}
        for code, count in work_type_counts
    ]
    geographic_breakdown = [
        {"province_code": code, "province_name": province_names.get(code, ""), "count": count}
        for code, count in province_counts
    ]
    
    most_common_work_type = None
    if work_type_breakdown:
        top = work_type_breakdown[0]
        most_common_work_type = {"code": top["code"], "count": top["count"]}
    most_common_province = None
    if geographic_breakdown:
        top = geographic_breakdown[0]
        most_common_province = {"code": top["province_code"], "name": top["province_name"], "count": top["count"]}
    
    return {
        "employee_id": technician.id,
        "employee_name": technician.name,
        "employee_code": technician.code,
        "role_code": technician.role_code,
        "period": {"start": format_date(date_range.start), "end": format_date(date_range.end)},
        "summary": {
            "total_tickets_assigned": total_assigned,
            "total_tickets_confirmed": total_confirmed,
            "days_active": days_active,
            "avg_tickets_per_day": safe_ratio(total_assigned, days_active),
            "most_common_work_type": most_common_work_type,
            "most_common_province": most_common_province,
        },
        "daily_breakdown": daily_breakdown,
        "work_type_breakdown": work_type_breakdown,
        "geographic_breakdown": geographic_breakdown,
    }
