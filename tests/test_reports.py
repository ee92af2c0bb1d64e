"""End-to-end tests for each report shape through the summary composer."""

import json

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from utilization.config import AnalyticsConfig
from utilization.domain.repositories import FactReader
from utilization.errors import DataAccessError, NotFoundError, ValidationError
from utilization.reports.composer import SummaryComposer, build_composer


@pytest.mark.integration
def test_daily_snapshot_end_to_end(composer):
    report = composer.daily_snapshot("2026-02-01")
    
    assert report["date"] == "2026-02-01"
    assert report["total_technicians"] == 4
    assert report["active_technicians"] == 2
    assert report["utilization_rate"] == 50.0
    assert report["total_tickets_assigned"] == 4
    assert report["total_tickets_confirmed"] == 3
    assert report["confirmation_rate"] == 75.0
    assert report["avg_tickets_per_active_technician"] == 2.0
    assert "generated_at" in report


def test_daily_snapshot_breakdowns(composer):
    report = composer.daily_snapshot("2026-02-01")
    
    assert report["by_work_type"] == [
        {"work_type_id": "wt-pm", "work_type_code": "PM", "work_type_name": "Preventive maintenance",
         "ticket_count": 2, "technician_count": 1},
        {"work_type_id": "wt-rpr", "work_type_code": "RPR", "work_type_name": "Repair",
         "ticket_count": 1, "technician_count": 1},
    ]
    assert [r["appointment_type"] for r in report["by_appointment_type"]] == ["full_day", "half_morning"]
    assert report["by_appointment_type"][0]["ticket_count"] == 2


def test_daily_snapshot_without_activity_is_all_zero(composer):
    report = composer.daily_snapshot("2026-02-05")
    
    assert report["total_technicians"] == 4
    assert report["active_technicians"] == 0
    assert report["utilization_rate"] == 0.0
    assert report["confirmation_rate"] == 0.0
    assert report["by_work_type"] == []


def test_report_is_json_serializable(composer):
    json.dumps(composer.daily_snapshot("2026-02-01"))
    json.dumps(composer.trends("2026-02-01", "2026-02-03", "weekly"))


def test_range_summary(composer):
    report = composer.range_summary("2026-02-01", "2026-02-02")
    
    assert report["period"] == {"start": "2026-02-01", "end": "2026-02-02", "days": 2}
    assert report["overall"] == {
        "total_technicians": 4,
        "avg_active_technicians": 1.0,
        "avg_utilization_rate": 25.0,
        "total_tickets_assigned": 4,
        "total_tickets_confirmed": 3,
        "overall_confirmation_rate": 75.0,
    }
    
    by_id = {r["employee_id"]: r for r in report["by_technician"]}
    assert by_id["tech-a"]["tickets_assigned"] == 3
    assert by_id["tech-a"]["tickets_confirmed"] == 2
    assert by_id["tech-a"]["days_active"] == 1
    assert by_id["tech-a"]["utilization_rate"] == 50.0
    assert by_id["tech-a"]["avg_tickets_per_day"] == 3.0
    assert by_id["tech-a"]["key_employee_count"] == 1
    assert by_id["tech-c"]["days_active"] == 0
    
    assert [r["employee_id"] for r in report["by_technician"]] == ["tech-a", "tech-b", "tech-c", "tech-d"]
    assert [r["employee_id"] for r in report["top_performers"]] == ["tech-a", "tech-b", "tech-c", "tech-d"]
    # Zero-activity technicians never appear in the bottom list
    assert [r["employee_id"] for r in report["underutilized"]] == ["tech-b", "tech-a"]


def test_range_summary_respects_ranking_size(reader, seeded_store):
    composer = SummaryComposer(reader, AnalyticsConfig(ranking_size=1))
    report = composer.range_summary("2026-02-01", "2026-02-01")
    
    assert [r["employee_id"] for r in report["top_performers"]] == ["tech-a"]
    assert [r["employee_id"] for r in report["underutilized"]] == ["tech-b"]


def test_workload_for_date(composer):
    report = composer.workload("2026-02-01")
    
    assert report["distribution"] == {
        "min_tickets": 1,
        "max_tickets": 2,
        "avg_tickets": 1.5,
        "median_tickets": 1.5,
        "std_deviation": 0.5,
        "quartiles": {"q1": 1, "q2": 2, "q3": 2},
    }
    assert report["balance_score"] == 66.67
    
    tech_a, tech_b = report["technician_workloads"]
    assert tech_a["employee_id"] == "tech-a"
    assert tech_a["employee_name"] == "Anan"
    assert tech_a["tickets_count"] == 2
    assert tech_a["is_key_employee_count"] == 1
    assert tech_a["work_types"] == [{"code": "PM", "count": 2}]
    assert tech_a["provinces"] == [
        {"code": "10", "name": "Bangkok", "count": 1},
        {"code": "20", "name": "Chonburi", "count": 1},
    ]
    assert tech_a["workload_status"] == "normal"
    assert tech_b["tickets_count"] == 1
    assert tech_b["work_types"] == []
    
    assert report["by_work_type"] == [{
        "work_type_id": "wt-pm",
        "work_type_code": "PM",
        "work_type_name": "Preventive maintenance",
        "ticket_count": 2,
        "avg_technicians_per_ticket": 0.5,
        "technician_ids": ["tech-a"],
    }]
    assert [g["province_name"] for g in report["geographic_distribution"]] == ["Bangkok", "Chonburi"]
    assert report["geographic_distribution"][0]["avg_tickets_per_technician"] == 1.0


def test_workload_without_appointments(composer):
    report = composer.workload("2026-02-10")
    
    assert report["balance_score"] == 100.0
    assert report["distribution"]["max_tickets"] == 0
    assert report["technician_workloads"] == []
    assert report["geographic_distribution"] == []


def test_workload_distribution_range(composer):
    report = composer.workload_distribution("2026-01-31", "2026-02-02")
    
    assert [d["date"] for d in report["distribution_trend"]] == ["2026-01-31", "2026-02-01", "2026-02-02"]
    busy = report["distribution_trend"][1]
    assert busy["active_technicians"] == 2
    assert busy["total_tickets"] == 3
    assert busy["balance_score"] == 66.67
    assert report["distribution_trend"][0]["active_technicians"] == 0
    
    assert report["daily_averages"] == {
        "avg_tickets_per_day": 3.0,
        "avg_active_technicians": 2.0,
        "avg_tickets_per_technician": 1.5,
    }
    assert report["workload_balance"]["best_day"] == {"date": "2026-02-01", "score": 66.67}
    assert report["workload_balance"]["worst_day"] == {"date": "2026-02-01", "score": 66.67}


def test_workload_distribution_empty_range(composer):
    report = composer.workload_distribution("2026-05-01", "2026-05-03")
    
    assert len(report["distribution_trend"]) == 3
    assert report["workload_balance"]["best_day"] == {"date": "N/A", "score": 0}
    assert report["workload_balance"]["avg_balance_score"] == 0.0


def test_trends_report(composer):
    report = composer.trends("2026-02-01", "2026-02-03", "daily")
    
    assert report["period"] == {"start": "2026-02-01", "end": "2026-02-03", "interval": "daily"}
    assert len(report["data_points"]) == 3
    first = report["data_points"][0]
    assert first["active_technicians"] == 2
    assert first["utilization_rate"] == 50.0
    assert first["confirmation_rate"] == 75.0
    assert report["summary"]["total_technicians"] == 4
    assert report["summary"]["peak_active_technicians"] == {"value": 2, "date": "2026-02-01"}
    assert report["comparisons"]["trend_direction"] == "decreasing"


def test_trends_rejects_unknown_interval(composer):
    with pytest.raises(ValidationError):
        composer.trends("2026-02-01", "2026-02-03", "hourly")


def test_inverted_range_fails_fast(composer):
    with pytest.raises(ValidationError):
        composer.range_summary("2026-02-03", "2026-02-01")


def test_technician_detail(composer):
    report = composer.technician_detail("tech-a", "2026-02-01", "2026-02-07")
    
    assert report["employee_name"] == "Anan"
    assert report["summary"]["total_tickets_assigned"] == 2
    assert report["summary"]["total_tickets_confirmed"] == 2
    assert report["summary"]["days_active"] == 1
    assert report["summary"]["avg_tickets_per_day"] == 2.0
    assert report["summary"]["most_common_work_type"] == {"code": "PM", "count": 2}
    assert report["summary"]["most_common_province"] == {"code": "10", "name": "Bangkok", "count": 1}
    assert report["daily_breakdown"] == [{
        "date": "2026-02-01",
        "tickets_assigned": 2,
        "tickets_confirmed": 2,
        "is_key_employee_count": 1,
        "work_types": ["PM"],
    }]
    assert report["work_type_breakdown"] == [{"code": "PM", "name": "Preventive maintenance", "count": 2}]


def test_technician_detail_without_activity(composer):
    report = composer.technician_detail("tech-c", "2026-02-01", "2026-02-07")
    
    assert report["summary"]["days_active"] == 0
    assert report["summary"]["most_common_work_type"] is None
    assert report["summary"]["most_common_province"] is None
    assert report["daily_breakdown"] == []


def test_technician_detail_unknown_technician(composer):
    with pytest.raises(NotFoundError):
        composer.technician_detail("ghost", "2026-02-01", "2026-02-07")


def test_failed_read_aborts_report(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'no_tables.db'}")
    composer = SummaryComposer(FactReader(sessionmaker(bind=engine)))
    
    with pytest.raises(DataAccessError):
        composer.daily_snapshot("2026-02-01")


def test_build_composer_uses_db_url(db_url, seeded_store):
    composer = build_composer(AnalyticsConfig(), db_url=db_url)
    assert composer.daily_snapshot("2026-02-01")["active_technicians"] == 2
