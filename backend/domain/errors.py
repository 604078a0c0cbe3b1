"""Error taxonomy shared by the seat, booking and role services."""

from __future__ import annotations

from typing import Sequence


class DeskBookingError(Exception):
    """Base exception for all desk reservation failures."""


class InputValidationError(DeskBookingError):
    """Raised when input is malformed; no storage access has happened."""


class NotFoundError(DeskBookingError):
    """Raised when a referenced record does not exist."""


class SeatNotFoundError(NotFoundError):
    def __init__(self, seat_id: str) -> None:
        self.seat_id = seat_id
        super().__init__(f"Seat {seat_id} not found")


class BookingNotFoundError(NotFoundError):
    def __init__(self, booking_id: str) -> None:
        self.booking_id = booking_id
        super().__init__(f"Booking {booking_id} not found")


class ClusterNotFoundError(NotFoundError):
    def __init__(self, cluster_id: str) -> None:
        self.cluster_id = cluster_id
        super().__init__(f"Cluster {cluster_id} not found")


class ForbiddenError(DeskBookingError):
    """Raised when the caller lacks the rights for the requested mutation."""


class ConflictError(DeskBookingError):
    """Raised when a request collides with existing state.

    ``reason`` is a short machine-friendly tag; ``str(exc)`` is the
    human-readable message shown to callers.
    """

    reason = "conflict"

    def __init__(self, message: str, reason: str | None = None) -> None:
        if reason is not None:
            self.reason = reason
        super().__init__(message)


class SeatBlockedError(ConflictError):
    reason = "blocked"


class SeatLongTermReservedError(ConflictError):
    reason = "long-term reserved"


class SlotTakenError(ConflictError):
    reason = "slot taken"


class DuplicateSeatError(ConflictError):
    reason = "duplicate seat"


class ClusterCapacityError(ConflictError):
    reason = "cluster full"


class NoBookingsCreatedError(ConflictError):
    """Raised when a bulk request ends with an empty accepted set."""

    reason = "no bookings created"

    def __init__(self, conflicts: Sequence[str]) -> None:
        self.conflicts = list(conflicts)
        super().__init__("No bookings could be created")
