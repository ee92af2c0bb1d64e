"""CSV import utilities to load store data into the database."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import pandas as pd
from sqlalchemy.orm import Session

from utilization.domain.models import (
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

TRUE_VALUES = {"TRUE", "T", "1", "YES", "Y"}


def _read_csv(csv_path: str | Path) -> pd.DataFrame:
    # Keep ids as strings so leading zeros survive
    df = pd.read_csv(csv_path, dtype=str, keep_default_na=False, na_values=[""])
    df.columns = df.columns.str.lower().str.strip()
    return df


def _text(row: pd.Series, column: str) -> Optional[str]:
    value = row.get(column)
    if value is None or pd.isna(value):
        return None
    value = str(value).strip()
    return value or None


def _flag(row: pd.Series, column: str, default: bool = False) -> bool:
    value = _text(row, column)
    if value is None:
        return default
    return value.upper() in TRUE_VALUES


def _date(row: pd.Series, column: str):
    value = _text(row, column)
    return pd.Timestamp(value).date() if value else None


def _commit(session: Session, objects: list, csv_path: str | Path, what: str) -> int:
    session.add_all(objects)
    session.commit()
    logger.info("Imported %d %s from %s", len(objects), what, csv_path)
    return len(objects)


def import_employees_csv(session: Session, csv_path: str | Path) -> int:
    """
    Import employees from CSV into database.
    
    Columns: id, name, code, role_code, role_name, is_active (optional, default TRUE)
    
    Returns:
        Number of employees imported
    """
    df = _read_csv(csv_path)
    employees = [
        Employee(
            id=_text(row, "id"),
            name=_text(row, "name") or "",
            code=_text(row, "code"),
            role_code=(_text(row, "role_code") or "").lower() or None,
            role_name=_text(row, "role_name"),
            is_active=_flag(row, "is_active", default=True),
        )
        for _, row in df.iterrows()
    ]
    return _commit(session, employees, csv_path, "employees")


def import_work_types_csv(session: Session, csv_path: str | Path) -> int:
    """Import ticket work types (id, code, name)."""
    df = _read_csv(csv_path)
    work_types = [
        WorkType(id=_text(row, "id"), code=_text(row, "code"), name=_text(row, "name"))
        for _, row in df.iterrows()
    ]
    return _commit(session, work_types, csv_path, "work types")


def import_provinces_csv(session: Session, csv_path: str | Path) -> int:
    """Import provinces (id, name)."""
    df = _read_csv(csv_path)
    provinces = [
        Province(id=int(_text(row, "id")), name=_text(row, "name") or "")
        for _, row in df.iterrows()
    ]
    return _commit(session, provinces, csv_path, "provinces")


def import_sites_csv(session: Session, csv_path: str | Path) -> int:
    """Import sites (id, name, province_code)."""
    df = _read_csv(csv_path)
    sites = []
    for _, row in df.iterrows():
        province = _text(row, "province_code")
        sites.append(Site(
            id=_text(row, "id"),
            name=_text(row, "name"),
            province_code=int(province) if province else None,
        ))
    return _commit(session, sites, csv_path, "sites")


def import_appointments_csv(session: Session, csv_path: str | Path) -> int:
    """Import appointments (id, appointment_date, appointment_type)."""
    df = _read_csv(csv_path)
    appointments = [
        Appointment(
            id=_text(row, "id"),
            appointment_date=_date(row, "appointment_date"),
            appointment_type=_text(row, "appointment_type"),
        )
        for _, row in df.iterrows()
    ]
    return _commit(session, appointments, csv_path, "appointments")


def import_tickets_csv(session: Session, csv_path: str | Path) -> int:
    """Import tickets (id, work_type_id, appointment_id, site_id)."""
    df = _read_csv(csv_path)
    tickets = [
        Ticket(
            id=_text(row, "id"),
            work_type_id=_text(row, "work_type_id"),
            appointment_id=_text(row, "appointment_id"),
            site_id=_text(row, "site_id"),
        )
        for _, row in df.iterrows()
    ]
    return _commit(session, tickets, csv_path, "tickets")


def import_ticket_employees_csv(session: Session, csv_path: str | Path, confirmed: bool = False) -> int:
    """
    Import technician-ticket links from CSV into database.
    
    Args:
        session: Database session
        csv_path: CSV with ticket_id, employee_id, date, is_key_employee
        confirmed: Load into the confirmation table instead of assignments
    
    Returns:
        Number of rows imported
    """
    df = _read_csv(csv_path)
    
    # Drop exact duplicates of the same link on the same day
    df = df.drop_duplicates(subset=["ticket_id", "employee_id", "date"], keep="last")
    
    model = TicketEmployeeConfirmed if confirmed else TicketEmployee
    links = [
        model(
            ticket_id=_text(row, "ticket_id"),
            employee_id=_text(row, "employee_id"),
            date=_date(row, "date"),
            is_key_employee=_flag(row, "is_key_employee"),
        )
        for _, row in df.iterrows()
    ]
    return _commit(session, links, csv_path, "confirmations" if confirmed else "assignments")
