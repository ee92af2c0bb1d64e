"""Tests for the fact reader (typed conversion, batching, error wrapping)."""

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from utilization.domain.facts import DateRange, Fact, Technician
from utilization.domain.models import TicketEmployee, TicketEmployeeConfirmed
from utilization.domain.repositories import FactReader
from utilization.errors import DataAccessError

SNAPSHOT_DAY = date(2026, 2, 1)


def test_read_assigned_facts_converts_rows(reader, seeded_store):
    facts = reader.read_assigned_facts(DateRange.single(SNAPSHOT_DAY))
    
    assert len(facts) == 4
    assert all(isinstance(f, Fact) for f in facts)
    assert all(not f.confirmed for f in facts)
    
    t1 = next(f for f in facts if f.ticket_id == "T1")
    assert t1.employee_id == "tech-a"
    assert t1.date == SNAPSHOT_DAY
    assert t1.work_type_code == "PM"
    assert t1.work_type_name == "Preventive maintenance"
    assert t1.appointment_type == "full_day"
    assert t1.province_code == "10"
    assert t1.is_key_employee is True
    
    t4 = next(f for f in facts if f.ticket_id == "T4")
    assert t4.work_type_id is None
    assert t4.province_code is None


def test_read_confirmed_facts_marks_confirmed(reader, seeded_store):
    facts = reader.read_confirmed_facts(DateRange.single(SNAPSHOT_DAY))
    assert {f.ticket_id for f in facts} == {"T1", "T2", "T4"}
    assert all(f.confirmed for f in facts)


def test_confirmation_without_ticket_row_is_still_read(reader, seeded_store):
    seeded_store.add(TicketEmployeeConfirmed(ticket_id="T-gone", employee_id="tech-c", date=SNAPSHOT_DAY))
    seeded_store.add(TicketEmployee(ticket_id="T-gone", employee_id="tech-c", date=SNAPSHOT_DAY))
    seeded_store.commit()

    confirmed = reader.read_confirmed_facts(DateRange.single(SNAPSHOT_DAY))
    orphan = next(f for f in confirmed if f.ticket_id == "T-gone")
    assert orphan.employee_id == "tech-c"
    assert orphan.work_type_id is None
    assert orphan.province_code is None

    # Assignments still require their ticket
    assigned = reader.read_assigned_facts(DateRange.single(SNAPSHOT_DAY))
    assert "T-gone" not in {f.ticket_id for f in assigned}


def test_read_facts_outside_range_is_empty(reader, seeded_store):
    assert reader.read_assigned_facts(DateRange.parse("2026-03-01", "2026-03-31")) == []


def test_rows_without_employee_are_skipped(reader, seeded_store):
    seeded_store.add(TicketEmployee(ticket_id="T3", employee_id=None, date=SNAPSHOT_DAY))
    seeded_store.commit()
    
    facts = reader.read_assigned_facts(DateRange.single(SNAPSHOT_DAY))
    assert len(facts) == 4


def test_read_appointment_facts_filters_employee(reader, seeded_store):
    facts = reader.read_appointment_facts(DateRange.single(SNAPSHOT_DAY), employee_id="tech-a")
    assert [f.ticket_id for f in facts] == ["T1", "T2"]
    assert all(f.date == SNAPSHOT_DAY for f in facts)


def test_roster_contains_only_active_technicians(reader, seeded_store):
    roster = reader.read_technician_roster(("technician", "technician_l1", "technician_l2"))
    
    assert [t.id for t in roster] == ["tech-a", "tech-b", "tech-c", "tech-d"]
    assert roster[0] == Technician(
        id="tech-a", name="Anan", code="T001", role_code="technician", role_name="Technician"
    )


def test_get_technician(reader, seeded_store):
    assert reader.get_technician("tech-b").name == "Boon"
    assert reader.get_technician("missing") is None


def test_resolve_geography_names_batched(reader, seeded_store):
    names = reader.resolve_geography_names(["10", "20", "99", None, "abc"])
    assert names == {"10": "Bangkok", "20": "Chonburi"}
    assert reader.resolve_geography_names([]) == {}


def test_get_employees(reader, seeded_store):
    employees = reader.get_employees(["tech-a", "mgr-1", "nobody"])
    assert set(employees) == {"tech-a", "mgr-1"}


def test_fetch_concurrently_returns_results_by_name(reader):
    results = reader.fetch_concurrently(one=lambda: 1, two=lambda: 2)
    assert results == {"one": 1, "two": 2}


def test_fetch_concurrently_propagates_failure(reader):
    def boom():
        raise DataAccessError("store down")
    
    with pytest.raises(DataAccessError):
        reader.fetch_concurrently(ok=lambda: 1, bad=boom)


def test_store_errors_become_data_access_error(tmp_path):
    # No tables were created, so every query fails
    engine = create_engine(f"sqlite:///{tmp_path / 'empty.db'}")
    reader = FactReader(sessionmaker(bind=engine))
    
    with pytest.raises(DataAccessError) as excinfo:
        reader.read_assigned_facts(DateRange.single(date(2026, 2, 1)))
    assert excinfo.value.status_code == 500
    assert excinfo.value.__cause__ is not None
