"""Domain models, typed facts and data access layer."""

from .facts import DateRange, Fact, Technician, format_date, parse_date
from .models import (
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
from .repositories import FactReader

__all__ = [
    "Appointment",
    "Base",
    "DateRange",
    "Employee",
    "Fact",
    "FactReader",
    "Province",
    "Site",
    "Technician",
    "Ticket",
    "TicketEmployee",
    "TicketEmployeeConfirmed",
    "WorkType",
    "format_date",
    "parse_date",
]
