"""Pytest configuration and shared fixtures."""

from datetime import date

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from utilization.config import AnalyticsConfig
from utilization.domain.models import (
    Appointment,
    Base,
    Employee,
    Province,
    Site,
    Ticket,
    TicketEmployee,
    TicketEmployeeConfirmed,
    WorkType,
)
from utilization.domain.repositories import FactReader
from utilization.reports.composer import SummaryComposer

SNAPSHOT_DAY = date(2026, 2, 1)


def pytest_configure(config):
    """Configure pytest."""
    # Add custom markers
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (deselect with '-m \"not integration\"')"
    )


@pytest.fixture
def db_url(tmp_path):
    """File-backed SQLite so worker threads see the same database."""
    return f"sqlite:///{tmp_path / 'analytics.db'}"


@pytest.fixture
def session_factory(db_url):
    """Create a fresh schema and return its session factory."""
    engine = create_engine(db_url)
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def reader(session_factory):
    return FactReader(session_factory, max_workers=3)


@pytest.fixture
def seeded_store(db_session):
    """
    Four technicians A-D plus a manager and an inactive technician.
    
    On 2026-02-01 A is assigned T1, T2, T3 and B is assigned T4; A confirms
    T1 and T2 and B confirms T4.
    """
    db_session.add_all([
        Employee(id="tech-a", name="Anan", code="T001", role_code="technician", role_name="Technician"),
        Employee(id="tech-b", name="Boon", code="T002", role_code="technician_l1", role_name="Technician L1"),
        Employee(id="tech-c", name="Chai", code="T003", role_code="technician_l2", role_name="Technician L2"),
        Employee(id="tech-d", name="Dao", code="T004", role_code="technician", role_name="Technician"),
        Employee(id="mgr-1", name="Mali", code="M001", role_code="manager", role_name="Manager"),
        Employee(id="tech-x", name="Xen", code="T999", role_code="technician", is_active=False),
        WorkType(id="wt-pm", code="PM", name="Preventive maintenance"),
        WorkType(id="wt-rpr", code="RPR", name="Repair"),
        Province(id=10, name="Bangkok"),
        Province(id=20, name="Chonburi"),
        Site(id="site-1", name="Head office", province_code=10),
        Site(id="site-2", name="Factory", province_code=20),
        Site(id="site-3", name="Unmapped", province_code=None),
        Appointment(id="ap-1", appointment_date=SNAPSHOT_DAY, appointment_type="full_day"),
        Appointment(id="ap-2", appointment_date=SNAPSHOT_DAY, appointment_type="full_day"),
        Appointment(id="ap-3", appointment_date=SNAPSHOT_DAY, appointment_type="half_morning"),
        Appointment(id="ap-4", appointment_date=SNAPSHOT_DAY, appointment_type=None),
        Ticket(id="T1", work_type_id="wt-pm", appointment_id="ap-1", site_id="site-1"),
        Ticket(id="T2", work_type_id="wt-pm", appointment_id="ap-2", site_id="site-2"),
        Ticket(id="T3", work_type_id="wt-rpr", appointment_id="ap-3", site_id="site-1"),
        Ticket(id="T4", work_type_id=None, appointment_id="ap-4", site_id="site-3"),
    ])
    db_session.flush()
    db_session.add_all([
        TicketEmployee(ticket_id="T1", employee_id="tech-a", date=SNAPSHOT_DAY, is_key_employee=True),
        TicketEmployee(ticket_id="T2", employee_id="tech-a", date=SNAPSHOT_DAY),
        TicketEmployee(ticket_id="T3", employee_id="tech-a", date=SNAPSHOT_DAY),
        TicketEmployee(ticket_id="T4", employee_id="tech-b", date=SNAPSHOT_DAY, is_key_employee=True),
        TicketEmployeeConfirmed(ticket_id="T1", employee_id="tech-a", date=SNAPSHOT_DAY, is_key_employee=True),
        TicketEmployeeConfirmed(ticket_id="T2", employee_id="tech-a", date=SNAPSHOT_DAY),
        TicketEmployeeConfirmed(ticket_id="T4", employee_id="tech-b", date=SNAPSHOT_DAY, is_key_employee=True),
    ])
    db_session.commit()
    return db_session


@pytest.fixture
def composer(reader, seeded_store):
    return SummaryComposer(reader, AnalyticsConfig())
