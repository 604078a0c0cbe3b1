"""Owner-or-admin booking cancellation."""

from __future__ import annotations

from typing import Optional

from backend.domain.errors import BookingNotFoundError, ForbiddenError
from backend.domain.models import ROLE_ADMIN, Booking
from backend.repository.data_repository import DataRepository, utc_now
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class CancellationService:
    """Moves bookings from active to cancelled, never back."""

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def cancel_booking(
        self,
        booking_id: str,
        requesting_user_id: str,
        requesting_user_role: str,
    ) -> Booking:
        booking = self._repository.find_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        if booking.user_id != requesting_user_id and requesting_user_role != ROLE_ADMIN:
            raise ForbiddenError("Not authorized to cancel this booking")
        if not booking.is_active:
            return booking

        cancelled = self._repository.mark_booking_cancelled(booking_id, utc_now())
        if cancelled is None:
            # removed by a concurrent seat deletion
            raise BookingNotFoundError(booking_id)
        logger.info(
            "Booking %s cancelled by user=%s role=%s",
            booking_id,
            requesting_user_id,
            requesting_user_role,
        )
        return cancelled
