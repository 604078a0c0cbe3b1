from __future__ import annotations

from dataclasses import replace

import pytest

from backend.domain.errors import BookingNotFoundError, ForbiddenError
from backend.domain.models import ROLE_ADMIN, ROLE_EMPLOYEE, Seat, UserContext
from backend.repository.data_repository import DataRepository
from backend.services.booking_service import BookingService
from backend.services.cancellation_service import CancellationService
from backend.utils.config import get_settings


ALICE = UserContext(user_id="alice", user_name="Alice")
BOB = UserContext(user_id="bob", user_name="Bob")


def _build_test_settings(tmp_path, filename: str):
    get_settings.cache_clear()
    return replace(
        get_settings(),
        database_path=tmp_path / filename,
        seed_floor_plan=False,
        bootstrap_admin_user_ids=(),
    )


@pytest.fixture
def services(tmp_path) -> tuple[BookingService, CancellationService, DataRepository]:
    repository = DataRepository(_build_test_settings(tmp_path, "cancellation.db"))
    repository.initialize_database()
    repository.insert_seat(Seat(id="seat-a", name="A", type="solo"))
    return (
        BookingService(repository=repository),
        CancellationService(repository=repository),
        repository,
    )


def test_owner_can_cancel_and_slot_is_freed(services) -> None:
    booking_service, cancellation_service, _ = services
    booking = booking_service.create_booking("seat-a", ALICE, "2030-03-04", "AM")

    cancelled = cancellation_service.cancel_booking(booking.id, "alice", ROLE_EMPLOYEE)

    assert cancelled.cancelled_at is not None
    assert booking_service.check_availability("seat-a", "2030-03-04", "AM").bookable is True
    rebooked = booking_service.create_booking("seat-a", BOB, "2030-03-04", "AM")
    assert rebooked.id != booking.id


def test_admin_can_cancel_any_booking(services) -> None:
    booking_service, cancellation_service, _ = services
    booking = booking_service.create_booking("seat-a", ALICE, "2030-03-04", "AM")

    cancelled = cancellation_service.cancel_booking(booking.id, "facilities", ROLE_ADMIN)
    assert cancelled.cancelled_at is not None


def test_other_employee_is_forbidden_and_booking_is_untouched(services) -> None:
    booking_service, cancellation_service, repository = services
    booking = booking_service.create_booking("seat-a", ALICE, "2030-03-04", "AM")

    with pytest.raises(ForbiddenError, match="Not authorized to cancel this booking"):
        cancellation_service.cancel_booking(booking.id, "bob", ROLE_EMPLOYEE)

    assert repository.find_booking(booking.id).cancelled_at is None


def test_repeat_cancel_keeps_first_timestamp(services) -> None:
    booking_service, cancellation_service, _ = services
    booking = booking_service.create_booking("seat-a", ALICE, "2030-03-04", "PM")

    first = cancellation_service.cancel_booking(booking.id, "alice", ROLE_EMPLOYEE)
    second = cancellation_service.cancel_booking(booking.id, "alice", ROLE_EMPLOYEE)

    assert second.cancelled_at == first.cancelled_at


def test_unknown_booking_is_not_found(services) -> None:
    _, cancellation_service, _ = services
    with pytest.raises(BookingNotFoundError):
        cancellation_service.cancel_booking("missing", "alice", ROLE_ADMIN)
