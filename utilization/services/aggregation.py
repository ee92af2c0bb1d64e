"""Fold facts into per-dimension buckets with deduplicated counts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Dict, Hashable, Iterable, List, Optional, Sequence, Set

from utilization.domain.facts import Fact

TECHNICIAN = "technician"
WORK_TYPE = "work_type"
APPOINTMENT_TYPE = "appointment_type"
PROVINCE = "province"

DIMENSION_KEYS: Dict[str, Callable[[Fact], Optional[str]]] = {
    TECHNICIAN: lambda f: f.employee_id,
    WORK_TYPE: lambda f: f.work_type_id,
    APPOINTMENT_TYPE: lambda f: f.appointment_type,
    PROVINCE: lambda f: f.province_code,
}

ALL_DIMENSIONS = (TECHNICIAN, WORK_TYPE, APPOINTMENT_TYPE, PROVINCE)


def ticket_id_key(fact: Fact) -> Hashable:
    return fact.ticket_id


def ticket_day_key(fact: Fact) -> Hashable:
    """Count the same ticket on different days separately."""
    return (fact.ticket_id, fact.date)


@dataclass
class Bucket:
    """Accumulator for one dimension value; all counts are set cardinalities."""

    key: str
    tickets: Set[Hashable] = field(default_factory=set)
    technicians: Set[str] = field(default_factory=set)
    dates: Set[date] = field(default_factory=set)
    key_employee_tickets: Set[Hashable] = field(default_factory=set)
    work_types: Dict[str, Set[Hashable]] = field(default_factory=dict)
    provinces: Dict[str, Set[Hashable]] = field(default_factory=dict)
    work_type_code: Optional[str] = None
    work_type_name: Optional[str] = None

    def add(self, fact: Fact, ticket: Hashable) -> None:
        self.tickets.add(ticket)
        self.technicians.add(fact.employee_id)
        self.dates.add(fact.date)
        if fact.is_key_employee:
            self.key_employee_tickets.add(ticket)
        if fact.work_type_code:
            self.work_types.setdefault(fact.work_type_code, set()).add(ticket)
            if self.work_type_code is None:
                self.work_type_code = fact.work_type_code
                self.work_type_name = fact.work_type_name
        if fact.province_code:
            self.provinces.setdefault(fact.province_code, set()).add(ticket)

    @property
    def ticket_count(self) -> int:
        return len(self.tickets)

    @property
    def technician_count(self) -> int:
        return len(self.technicians)

    @property
    def days_active(self) -> int:
        return len(self.dates)

    @property
    def key_employee_count(self) -> int:
        return len(self.key_employee_tickets)

    def work_type_counts(self) -> List[tuple]:
        """(code, ticket count) pairs, most frequent first."""
        return rank_counts({code: len(t) for code, t in self.work_types.items()})

    def province_counts(self) -> List[tuple]:
        """(province code, ticket count) pairs, most frequent first."""
        return rank_counts({code: len(t) for code, t in self.provinces.items()})


def rank_counts(counts: Dict[str, int]) -> List[tuple]:
    """Sort (key, count) pairs by count descending, ties in insertion order."""
    return sorted(counts.items(), key=lambda item: -item[1])


def rank_buckets(buckets: Iterable[Bucket]) -> List[Bucket]:
    """Sort buckets by ticket count descending; ties keep encounter order."""
    return sorted(buckets, key=lambda b: -b.ticket_count)


class Aggregation:
    """
    Single-pass aggregation of facts over one or more dimensions.
    
    A fact that does not resolve a dimension (e.g. no work type) is skipped for
    that dimension only; it still counts toward the others and toward totals.
    """
    
    def __init__(
        self,
        dimensions: Sequence[str] = ALL_DIMENSIONS,
        ticket_key: Callable[[Fact], Hashable] = ticket_id_key,
    ):
        unknown = [d for d in dimensions if d not in DIMENSION_KEYS]
        if unknown:
            raise ValueError(f"Unknown aggregation dimensions: {unknown}")
        self.dimensions = tuple(dimensions)
        self.ticket_key = ticket_key
        self.buckets: Dict[str, Dict[str, Bucket]] = {d: {} for d in self.dimensions}
        self.tickets: Set[Hashable] = set()
        self.technicians: Set[str] = set()
    
    def add(self, fact: Fact) -> None:
        ticket = self.ticket_key(fact)
        self.tickets.add(ticket)
        self.technicians.add(fact.employee_id)
        for dimension in self.dimensions:
            key = DIMENSION_KEYS[dimension](fact)
            if not key:
                continue
            bucket = self.buckets[dimension].get(key)
            if bucket is None:
                bucket = self.buckets[dimension][key] = Bucket(key=key)
            bucket.add(fact, ticket)
    
    def add_all(self, facts: Iterable[Fact]) -> "Aggregation":
        for fact in facts:
            self.add(fact)
        return self
    
    def get(self, dimension: str, key: str) -> Optional[Bucket]:
        return self.buckets[dimension].get(key)
    
    def ranked(self, dimension: str) -> List[Bucket]:
        """Buckets for a dimension ordered by descending ticket count."""
        return rank_buckets(self.buckets[dimension].values())
    
    @property
    def ticket_count(self) -> int:
        return len(self.tickets)
    
    @property
    def technician_count(self) -> int:
        return len(self.technicians)


def aggregate(
    facts: Iterable[Fact],
    dimensions: Sequence[str] = ALL_DIMENSIONS,
    ticket_key: Callable[[Fact], Hashable] = ticket_id_key,
) -> Aggregation:
    """Aggregate facts over the given dimensions in one pass."""
    return Aggregation(dimensions, ticket_key).add_all(facts)
