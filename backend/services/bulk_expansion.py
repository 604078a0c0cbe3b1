"""Bulk request expansion and outcome reporting."""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import product
from typing import Hashable, Iterable, Sequence, TypeVar

from backend.domain.models import Booking


T = TypeVar("T", bound=Hashable)


@dataclass(frozen=True)
class BookingCombination:
    seat_id: str
    date: str
    slot: str


@dataclass(frozen=True)
class BulkBookingReport:
    """Partitioned outcome of a bulk request."""

    created: list[Booking] = field(default_factory=list)
    conflicts: list[str] = field(default_factory=list)

    @property
    def created_count(self) -> int:
        return len(self.created)

    @property
    def failed_count(self) -> int:
        return len(self.conflicts)

    @property
    def requested_count(self) -> int:
        return self.created_count + self.failed_count

    def summary(self) -> str:
        return f"created {self.created_count} of {self.requested_count} requested"


def dedupe(values: Iterable[T]) -> list[T]:
    """Drop repeated values, keeping the first occurrence order."""
    seen: set[T] = set()
    ordered: list[T] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        ordered.append(value)
    return ordered


def expand(
    seat_ids: Sequence[str],
    dates: Sequence[str],
    slots: Sequence[str],
) -> list[BookingCombination]:
    """Cartesian product seat x date x slot in caller order."""
    return [
        BookingCombination(seat_id=seat_id, date=date, slot=slot)
        for seat_id, date, slot in product(dedupe(seat_ids), dedupe(dates), dedupe(slots))
    ]


def slot_conflict_message(seat_name: str, date: str, slot: str) -> str:
    return f"{seat_name} on {date} {slot} already booked"


def missing_seat_message(seat_id: str) -> str:
    return f"Seat {seat_id} not found"


def blocked_seat_message(seat_name: str) -> str:
    return f"Seat {seat_name} is blocked"


def long_term_seat_message(seat_name: str) -> str:
    return f"Seat {seat_name} is reserved for long-term use"
