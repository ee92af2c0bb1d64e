"""Typed values produced by the fact reader and consumed by the analytics."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Iterator, Optional

from utilization.errors import ValidationError

DATE_FORMAT = "%Y-%m-%d"


def parse_date(value: str | date, field_name: str = "date") -> date:
    """Parse a ``YYYY-MM-DD`` string (dates pass through unchanged)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return datetime.strptime(str(value), DATE_FORMAT).date()
    except ValueError as e:
        raise ValidationError(f"Invalid {field_name} '{value}' (expected YYYY-MM-DD)") from e


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range."""

    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise ValidationError(
                f"start_date {format_date(self.start)} must be on or before end_date {format_date(self.end)}"
            )

    @classmethod
    def parse(cls, start: str | date, end: str | date) -> "DateRange":
        return cls(parse_date(start, "start_date"), parse_date(end, "end_date"))

    @classmethod
    def single(cls, day: str | date) -> "DateRange":
        d = parse_date(day)
        return cls(d, d)

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def dates(self) -> Iterator[date]:
        for offset in range(self.days):
            yield self.start + timedelta(days=offset)

    def __contains__(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class Fact:
    """One observed assignment or confirmation of a technician on a ticket."""

    employee_id: str
    date: date
    ticket_id: str
    confirmed: bool = False
    work_type_id: Optional[str] = None
    work_type_code: Optional[str] = None
    work_type_name: Optional[str] = None
    appointment_type: Optional[str] = None
    province_code: Optional[str] = None
    is_key_employee: bool = False


@dataclass(frozen=True)
class Technician:
    """Roster entry for an employee holding a technician role."""

    id: str
    name: str
    code: str = ""
    role_code: str = ""
    role_name: str = ""
