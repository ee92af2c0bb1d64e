"""Workload distribution and balance reports keyed by appointment date."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Set

from utilization.config import AnalyticsConfig
from utilization.domain.facts import DateRange, format_date
from utilization.domain.repositories import FactReader
from utilization.services.aggregation import PROVINCE, TECHNICIAN, WORK_TYPE, aggregate
from utilization.services.statistics import (
    DistributionStats,
    calculate_balance_score,
    calculate_distribution,
    round2,
    safe_ratio,
    workload_status,
)
from utilization.services.trends import NOT_AVAILABLE

logger = logging.getLogger(__name__)


def _empty_workload(day: str) -> Dict[str, object]:
    return {
        "date": day,
        "distribution": DistributionStats().to_dict(),
        "balance_score": 100.0,
        "technician_workloads": [],
        "by_work_type": [],
        "geographic_distribution": [],
    }


def build_workload_for_date(reader: FactReader, cfg: AnalyticsConfig, date_range: DateRange) -> Dict[str, object]:
    """
    Workload distribution across technicians for one appointment date.
    
    Facts are read first; employee names and province names depend on them
    and are then resolved concurrently in batched reads.
    """
    day = format_date(date_range.start)
    facts = reader.read_appointment_facts(date_range)
    if not facts:
        logger.info("No appointments on %s, returning empty workload", day)
        return _empty_workload(day)
    
    agg = aggregate(facts, dimensions=(TECHNICIAN, WORK_TYPE, PROVINCE))
    lookups = reader.fetch_concurrently(
        employees=lambda: reader.get_employees(agg.technicians),
        provinces=lambda: reader.resolve_geography_names(agg.buckets[PROVINCE].keys()),
    )
    employees = lookups["employees"]
    province_names: Dict[str, str] = lookups["provinces"]
    
    technicians = agg.ranked(TECHNICIAN)
    counts = [b.ticket_count for b in technicians]
    distribution = calculate_distribution(counts)
    balance_score = calculate_balance_score(counts)
    
    technician_workloads = []
    for bucket in technicians:
        employee = employees.get(bucket.key)
        technician_workloads.append({
            "employee_id": bucket.key,
            "employee_name": employee.name if employee else "",
            "employee_code": employee.code if employee else "",
            "tickets_count": bucket.ticket_count,
            "is_key_employee_count": bucket.key_employee_count,
            "work_types": [{"code": code, "count": count} for code, count in bucket.work_type_counts()],
            "provinces": [
                {"code": code, "name": province_names.get(code, ""), "count": count}
                for code, count in bucket.province_counts()
            ],
            "workload_status": workload_status(
                bucket.ticket_count,
                distribution.avg,
                cfg.workload_status.underloaded_ratio,
                cfg.workload_status.overloaded_ratio,
            ),
        })
    
    by_work_type = [
        {
            "work_type_id": bucket.key,
            "work_type_code": bucket.work_type_code,
            "work_type_name": bucket.work_type_name,
            "ticket_count": bucket.ticket_count,
            "avg_technicians_per_ticket": safe_ratio(bucket.technician_count, bucket.ticket_count),
            "technician_ids": sorted(bucket.technicians),
        }
        for bucket in agg.ranked(WORK_TYPE)
    ]
    
    geographic_distribution = [
        {
            "province_code": bucket.key,
            "province_name": province_names.get(bucket.key, ""),
            "ticket_count": bucket.ticket_count,
            "technician_count": bucket.technician_count,
            "avg_tickets_per_technician": safe_ratio(bucket.ticket_count, bucket.technician_count),
        }
        for bucket in agg.ranked(PROVINCE)
    ]
    
    return {
        "date": day,
        "distribution": distribution.to_dict(),
        "balance_score": balance_score,
        "technician_workloads": technician_workloads,
        "by_work_type": by_work_type,
        "geographic_distribution": geographic_distribution,
    }


@dataclass
class _DayWorkload:
    tickets: Set[str] = field(default_factory=set)
    per_technician: Dict[str, Set[str]] = field(default_factory=dict)


def build_workload_distribution(
    reader: FactReader,
    cfg: AnalyticsConfig,
    date_range: DateRange,
) -> Dict[str, object]:
    """
    Daily workload balance over a range.
    
    Every date in the range gets a row; averages and best/worst day only
    consider days with at least one active technician.
    """
    facts = reader.read_appointment_facts(date_range)
    
    days: Dict[date, _DayWorkload] = {d: _DayWorkload() for d in date_range.dates()}
    for fact in facts:
        day = days.get(fact.date)
        if day is None:
            continue
        day.tickets.add(fact.ticket_id)
        day.per_technician.setdefault(fact.employee_id, set()).add(fact.ticket_id)
    
    trend: List[Dict[str, object]] = []
    active_rows: List[Dict[str, object]] = []
    best = None
    worst = None
    for day_date, day in days.items():
        active = len(day.per_technician)
        row = {
            "date": format_date(day_date),
            "active_technicians": active,
            "total_tickets": len(day.tickets),
            "avg_tickets_per_technician": safe_ratio(len(day.tickets), active),
            "balance_score": calculate_balance_score([len(t) for t in day.per_technician.values()]),
        }
        trend.append(row)
        if active == 0:
            continue
        active_rows.append(row)
        if best is None or row["balance_score"] > best["score"]:
            best = {"date": row["date"], "score": row["balance_score"]}
        if worst is None or row["balance_score"] < worst["score"]:
            worst = {"date": row["date"], "score": row["balance_score"]}
    
    days_with_data = len(active_rows)
    total_tickets = sum(r["total_tickets"] for r in active_rows)
    total_active = sum(r["active_technicians"] for r in active_rows)
    
    return {
        "period": {
            "start": format_date(date_range.start),
            "end": format_date(date_range.end),
            "days": date_range.days,
        },
        "daily_averages": {
            "avg_tickets_per_day": safe_ratio(total_tickets, days_with_data),
            "avg_active_technicians": safe_ratio(total_active, days_with_data),
            "avg_tickets_per_technician": safe_ratio(total_tickets, total_active),
        },
        "workload_balance": {
            "avg_balance_score": round2(sum(r["balance_score"] for r in active_rows) / days_with_data)
            if days_with_data else 0.0,
            "best_day": best or {"date": NOT_AVAILABLE, "score": 0},
            "worst_day": worst or {"date": NOT_AVAILABLE, "score": 0},
        },
        "distribution_trend": trend,
    }
