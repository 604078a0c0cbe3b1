"""Seat bookability checks combining administrative state with booking history."""

from __future__ import annotations

from typing import Iterable, Optional

from backend.domain.errors import SeatNotFoundError
from backend.domain.models import Availability, Booking, Seat
from backend.repository.data_repository import DataRepository
from backend.utils.config import Settings, get_settings


REASON_BLOCKED = "blocked"
REASON_LONG_TERM_RESERVED = "long-term reserved"
REASON_SLOT_TAKEN = "slot taken"


def seat_level_reason(seat: Seat) -> Optional[str]:
    """Return why a seat can never be booked ad hoc, or None."""
    if seat.is_blocked:
        return REASON_BLOCKED
    if seat.is_long_term_reserved:
        return REASON_LONG_TERM_RESERVED
    return None


def evaluate(seat: Seat, slot: str, existing: Iterable[Booking]) -> Availability:
    """Decide bookability from already-fetched state.

    Seat-level status wins over booking history so callers see the most
    actionable reason first.
    """
    reason = seat_level_reason(seat)
    if reason is not None:
        return Availability(bookable=False, reason=reason)
    if any(booking.slot == slot and booking.is_active for booking in existing):
        return Availability(bookable=False, reason=REASON_SLOT_TAKEN)
    return Availability(bookable=True)


class AvailabilityService:
    """Read-only availability queries; never writes."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def check(self, seat_id: str, date: str, slot: str) -> Availability:
        seat = self._repository.find_seat(seat_id)
        if seat is None:
            raise SeatNotFoundError(seat_id)
        return self.check_seat(seat, date, slot)

    def check_seat(self, seat: Seat, date: str, slot: str) -> Availability:
        # blocked/long-term seats skip the booking lookup entirely
        if seat_level_reason(seat) is not None:
            return evaluate(seat, slot, ())
        existing = self._repository.find_active_bookings(seat.id, date)
        return evaluate(seat, slot, existing)
