"""Fact reader: typed, read-only access to assignment and roster data."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from utilization.errors import DataAccessError

from .facts import DateRange, Fact, Technician
from .models import (
    Appointment,
    Employee,
    Province,
    Site,
    Ticket,
    TicketEmployee,
    TicketEmployeeConfirmed,
    WorkType,
)

logger = logging.getLogger(__name__)


def _to_technician(employee: Employee) -> Technician:
    return Technician(
        id=str(employee.id),
        name=employee.name or "",
        code=employee.code or "",
        role_code=employee.role_code or "",
        role_name=employee.role_name or "",
    )


def _to_fact(link, ticket: Ticket, work_type, appointment, site, confirmed: bool, fact_date=None) -> Fact:
    province_code = None
    if site is not None and site.province_code is not None:
        province_code = str(site.province_code)
    return Fact(
        employee_id=str(link.employee_id),
        date=fact_date or link.date,
        ticket_id=str(link.ticket_id),
        confirmed=confirmed,
        work_type_id=str(work_type.id) if work_type is not None else None,
        work_type_code=work_type.code if work_type is not None else None,
        work_type_name=work_type.name if work_type is not None else None,
        appointment_type=appointment.appointment_type if appointment is not None else None,
        province_code=province_code,
        is_key_employee=bool(link.is_key_employee),
    )


class FactReader:
    """
    Reads raw assignment/confirmation rows and roster data from the store.

    Every public read opens its own short-lived session so independent reads
    can run concurrently on worker threads (see ``fetch_concurrently``).
    Store failures are raised as ``DataAccessError`` and never retried.
    """
    
    def __init__(self, session_factory: sessionmaker | Callable[[], Session], max_workers: int = 4):
        """
        Initialize the reader.
        
        Args:
            session_factory: Callable returning a new SQLAlchemy session
            max_workers: Thread pool size used by fetch_concurrently
        """
        self.session_factory = session_factory
        self.max_workers = max_workers
    
    @contextmanager
    def _reading(self, what: str) -> Iterator[Session]:
        session = self.session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            logger.error("Error reading %s: %s", what, e)
            raise DataAccessError(f"Failed to read {what}") from e
        finally:
            session.close()
    
    def _read_link_facts(self, link_model, date_range: DateRange, confirmed: bool) -> List[Fact]:
        what = "confirmed facts" if confirmed else "assigned facts"
        with self._reading(what) as session:
            query = session.query(link_model, Ticket, WorkType, Appointment, Site)
            # Confirmations count even when their ticket row is gone
            if confirmed:
                query = query.outerjoin(Ticket, link_model.ticket_id == Ticket.id)
            else:
                query = query.join(Ticket, link_model.ticket_id == Ticket.id)
            rows = (
                query
                .outerjoin(WorkType, Ticket.work_type_id == WorkType.id)
                .outerjoin(Appointment, Ticket.appointment_id == Appointment.id)
                .outerjoin(Site, Ticket.site_id == Site.id)
                .filter(link_model.date >= date_range.start, link_model.date <= date_range.end)
                .order_by(link_model.date, link_model.id)
                .all()
            )
            # Rows without an employee cannot be attributed to anyone
            return [
                _to_fact(link, ticket, work_type, appointment, site, confirmed)
                for link, ticket, work_type, appointment, site in rows
                if link.employee_id
            ]
    
    def read_assigned_facts(self, date_range: DateRange) -> List[Fact]:
        """Get assignment facts whose assignment date falls within the range."""
        return self._read_link_facts(TicketEmployee, date_range, confirmed=False)
    
    def read_confirmed_facts(self, date_range: DateRange) -> List[Fact]:
        """Get confirmation facts whose assignment date falls within the range."""
        return self._read_link_facts(TicketEmployeeConfirmed, date_range, confirmed=True)
    
    def read_appointment_facts(self, date_range: DateRange, employee_id: Optional[str] = None) -> List[Fact]:
        """
        Get confirmation facts keyed by the ticket's appointment date.
        
        Args:
            date_range: Appointment dates to include
            employee_id: Optional filter for a single technician
        
        Returns:
            Facts whose ``date`` is the appointment date
        """
        with self._reading("appointment facts") as session:
            query = (
                session.query(TicketEmployeeConfirmed, Ticket, WorkType, Appointment, Site)
                .join(Ticket, TicketEmployeeConfirmed.ticket_id == Ticket.id)
                .join(Appointment, Ticket.appointment_id == Appointment.id)
                .join(Employee, TicketEmployeeConfirmed.employee_id == Employee.id)
                .outerjoin(WorkType, Ticket.work_type_id == WorkType.id)
                .outerjoin(Site, Ticket.site_id == Site.id)
                .filter(
                    Appointment.appointment_date >= date_range.start,
                    Appointment.appointment_date <= date_range.end,
                )
            )
            if employee_id is not None:
                query = query.filter(TicketEmployeeConfirmed.employee_id == employee_id)
            rows = query.order_by(Appointment.appointment_date, TicketEmployeeConfirmed.id).all()
            return [
                _to_fact(link, ticket, work_type, appointment, site, True, fact_date=appointment.appointment_date)
                for link, ticket, work_type, appointment, site in rows
            ]
    
    def read_technician_roster(self, role_codes: Sequence[str]) -> List[Technician]:
        """Get all active employees holding one of the technician role codes."""
        with self._reading("technician roster") as session:
            employees = (
                session.query(Employee)
                .filter(Employee.role_code.in_(list(role_codes)), Employee.is_active.is_(True))
                .order_by(Employee.name, Employee.id)
                .all()
            )
            return [_to_technician(e) for e in employees]
    
    def get_technician(self, employee_id: str) -> Optional[Technician]:
        """Get a single employee by ID, or None when absent."""
        with self._reading("technician") as session:
            employee = session.query(Employee).filter(Employee.id == employee_id).first()
            return _to_technician(employee) if employee is not None else None
    
    def get_employees(self, employee_ids: Iterable[str]) -> Dict[str, Technician]:
        """Get employees by ID in one batched query, keyed by ID."""
        ids = sorted({str(i) for i in employee_ids if i})
        if not ids:
            return {}
        with self._reading("employees") as session:
            employees = session.query(Employee).filter(Employee.id.in_(ids)).all()
            return {str(e.id): _to_technician(e) for e in employees}

    def resolve_geography_names(self, codes: Iterable[str]) -> Dict[str, str]:
        """
        Resolve province names for a set of codes in one batched query.
        
        Codes that are not numeric or not found are simply absent from the result.
        """
        ids = sorted({int(c) for c in codes if c is not None and str(c).isdigit()})
        if not ids:
            return {}
        with self._reading("province names") as session:
            provinces = session.query(Province).filter(Province.id.in_(ids)).all()
            return {str(p.id): p.name for p in provinces}
    
    def fetch_concurrently(self, **reads: Callable[[], object]) -> Dict[str, object]:
        """
        Run independent reads on a thread pool and collect their results by name.
        
        The first failing read propagates its exception; pending reads are cancelled.
        """
        if not reads:
            return {}
        results: Dict[str, object] = {}
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(reads))) as executor:
            futures = {name: executor.submit(read) for name, read in reads.items()}
            try:
                for name, future in futures.items():
                    results[name] = future.result()
            except BaseException:
                for future in futures.values():
                    future.cancel()
                raise
        return results
