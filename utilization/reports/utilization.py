"""Daily utilization snapshot and date-range utilization summary."""

from __future__ import annotations

from typing import Dict, List

from utilization.config import AnalyticsConfig
from utilization.domain.facts import DateRange, Technician, format_date
from utilization.domain.repositories import FactReader
from utilization.services.aggregation import (
    APPOINTMENT_TYPE,
    TECHNICIAN,
    WORK_TYPE,
    aggregate,
    ticket_day_key,
)
from utilization.services.statistics import round2, safe_percent, safe_ratio


def build_daily_snapshot(reader: FactReader, cfg: AnalyticsConfig, date_range: DateRange) -> Dict[str, object]:
    """
    Utilization metrics for a single date.
    
    Active technicians are everyone with at least one assignment or
    confirmation on the date; work type and appointment type breakdowns come
    from the assignments.
    """
    data = reader.fetch_concurrently(
        roster=lambda: reader.read_technician_roster(cfg.technician_role_codes),
        assigned=lambda: reader.read_assigned_facts(date_range),
        confirmed=lambda: reader.read_confirmed_facts(date_range),
    )
    roster: List[Technician] = data["roster"]
    assigned = data["assigned"]
    confirmed = data["confirmed"]
    
    by_assignment = aggregate(assigned, dimensions=(WORK_TYPE, APPOINTMENT_TYPE))
    by_confirmation = aggregate(confirmed, dimensions=())
    
    active = len(by_assignment.technicians | by_confirmation.technicians)
    total_assigned = by_assignment.ticket_count
    total_confirmed = by_confirmation.ticket_count
    
    by_work_type = [
        {
            "work_type_id": bucket.key,
            "work_type_code": bucket.work_type_code,
            "work_type_name": bucket.work_type_name,
            "ticket_count": bucket.ticket_count,
            "technician_count": bucket.technician_count,
        }
        for bucket in by_assignment.ranked(WORK_TYPE)
    ]
    by_appointment_type = [
        {
            "appointment_type": bucket.key,
            "ticket_count": bucket.ticket_count,
            "technician_count": bucket.technician_count,
        }
        for bucket in by_assignment.ranked(APPOINTMENT_TYPE)
    ]
    
    return {
        "date": format_date(date_range.start),
        "total_technicians": len(roster),
        "active_technicians": active,
        "utilization_rate": safe_percent(active, len(roster)),
        "total_tickets_assigned": total_assigned,
        "total_tickets_confirmed": total_confirmed,
        "confirmation_rate": safe_percent(total_confirmed, total_assigned),
        "avg_tickets_per_active_technician": safe_ratio(total_assigned, active),
        "by_work_type": by_work_type,
        "by_appointment_type": by_appointment_type,
    }


def build_range_summary(reader: FactReader, cfg: AnalyticsConfig, date_range: DateRange) -> Dict[str, object]:
    """
    Per-technician utilization over a date range with top/bottom rankings.
    
    A ticket worked on several days counts once per day. The underutilized
    list only considers technicians active on at least one day.
    """
    data = reader.fetch_concurrently(
        roster=lambda: reader.read_technician_roster(cfg.technician_role_codes),
        assigned=lambda: reader.read_assigned_facts(date_range),
        confirmed=lambda: reader.read_confirmed_facts(date_range),
    )
    roster: List[Technician] = data["roster"]
    by_assignment = aggregate(data["assigned"], dimensions=(TECHNICIAN,), ticket_key=ticket_day_key)
    by_confirmation = aggregate(data["confirmed"], dimensions=(TECHNICIAN,), ticket_key=ticket_day_key)
    
    days = date_range.days
    rows: List[Dict[str, object]] = []
    for tech in roster:
        assigned_bucket = by_assignment.get(TECHNICIAN, tech.id)
        confirmed_bucket = by_confirmation.get(TECHNICIAN, tech.id)
        
        tickets_assigned = assigned_bucket.ticket_count if assigned_bucket else 0
        tickets_confirmed = confirmed_bucket.ticket_count if confirmed_bucket else 0
        active_dates = set()
        if assigned_bucket:
            active_dates |= assigned_bucket.dates
        if confirmed_bucket:
            active_dates |= confirmed_bucket.dates
        days_active = len(active_dates)
        
        rows.append({
            "employee_id": tech.id,
            "employee_name": tech.name,
            "employee_code": tech.code,
            "role_code": tech.role_code,
            "tickets_assigned": tickets_assigned,
            "tickets_confirmed": tickets_confirmed,
            "days_active": days_active,
            "utilization_rate": safe_percent(days_active, days),
            "avg_tickets_per_day": safe_ratio(tickets_assigned, days_active),
            "key_employee_count": assigned_bucket.key_employee_count if assigned_bucket else 0,
        })
    
    ranked = sorted(rows, key=lambda r: -r["tickets_assigned"])
    active_rows = [r for r in ranked if r["days_active"] > 0]
    underutilized = list(reversed(active_rows[-cfg.ranking_size:]))
    
    total_assigned = sum(r["tickets_assigned"] for r in rows)
    total_confirmed = sum(r["tickets_confirmed"] for r in rows)
    total_active_days = sum(r["days_active"] for r in rows)
    
    return {
        "period": {
            "start": format_date(date_range.start),
            "end": format_date(date_range.end),
            "days": days,
        },
        "overall": {
            "total_technicians": len(roster),
            "avg_active_technicians": safe_ratio(total_active_days, days),
            "avg_utilization_rate": round2(sum(r["utilization_rate"] for r in rows) / len(rows)) if rows else 0.0,
            "total_tickets_assigned": total_assigned,
            "total_tickets_confirmed": total_confirmed,
            "overall_confirmation_rate": safe_percent(total_confirmed, total_assigned),
        },
        "by_technician": ranked,
        "top_performers": ranked[:cfg.ranking_size],
        "underutilized": underutilized,
    }
