from __future__ import annotations

from dataclasses import replace

import pytest

from backend.domain.errors import SeatNotFoundError
from backend.domain.models import NewBooking, Seat
from backend.repository.data_repository import DataRepository
from backend.services.availability_service import (
    REASON_BLOCKED,
    REASON_LONG_TERM_RESERVED,
    REASON_SLOT_TAKEN,
    AvailabilityService,
)
from backend.utils.config import get_settings


def _build_test_settings(tmp_path, filename: str):
    get_settings.cache_clear()
    return replace(
        get_settings(),
        database_path=tmp_path / filename,
        seed_floor_plan=False,
        bootstrap_admin_user_ids=(),
    )


@pytest.fixture
def repository(tmp_path) -> DataRepository:
    repository = DataRepository(_build_test_settings(tmp_path, "availability.db"))
    repository.initialize_database()
    repository.insert_seat(Seat(id="seat-a", name="A", type="solo"))
    return repository


def _book(repository: DataRepository, seat_id: str, date: str, slot: str) -> None:
    repository.insert_booking(
        NewBooking(
            seat_id=seat_id,
            user_id="someone",
            user_name=None,
            user_email=None,
            date=date,
            slot=slot,
        )
    )


def test_free_seat_is_bookable(repository: DataRepository) -> None:
    service = AvailabilityService(repository=repository)
    result = service.check("seat-a", "2030-03-04", "AM")
    assert result.bookable is True
    assert result.reason is None


def test_booked_slot_is_taken_but_other_slot_is_free(repository: DataRepository) -> None:
    _book(repository, "seat-a", "2030-03-04", "AM")
    service = AvailabilityService(repository=repository)

    assert service.check("seat-a", "2030-03-04", "AM").reason == REASON_SLOT_TAKEN
    assert service.check("seat-a", "2030-03-04", "PM").bookable is True
    assert service.check("seat-a", "2030-03-05", "AM").bookable is True


def test_cancelled_booking_does_not_hold_the_slot(repository: DataRepository) -> None:
    _book(repository, "seat-a", "2030-03-04", "AM")
    booking = repository.find_active_bookings("seat-a", "2030-03-04")[0]
    repository.mark_booking_cancelled(booking.id, "2030-03-01T00:00:00+00:00")

    service = AvailabilityService(repository=repository)
    assert service.check("seat-a", "2030-03-04", "AM").bookable is True


def test_blocked_reason_wins_over_every_other_reason(repository: DataRepository) -> None:
    _book(repository, "seat-a", "2030-03-04", "AM")
    repository.update_seat("seat-a", {"is_blocked": True, "is_long_term_reserved": True})
    service = AvailabilityService(repository=repository)

    result = service.check("seat-a", "2030-03-04", "AM")
    assert result.bookable is False
    assert result.reason == REASON_BLOCKED


def test_long_term_reason_wins_over_taken_slot(repository: DataRepository) -> None:
    _book(repository, "seat-a", "2030-03-04", "AM")
    repository.update_seat("seat-a", {"is_long_term_reserved": True})
    service = AvailabilityService(repository=repository)

    assert service.check("seat-a", "2030-03-04", "AM").reason == REASON_LONG_TERM_RESERVED


def test_check_is_read_only_and_repeatable(repository: DataRepository) -> None:
    service = AvailabilityService(repository=repository)
    first = service.check("seat-a", "2030-03-04", "PM")
    second = service.check("seat-a", "2030-03-04", "PM")
    assert first == second
    assert repository.count_bookings() == 0


def test_unknown_seat_raises_not_found(repository: DataRepository) -> None:
    service = AvailabilityService(repository=repository)
    with pytest.raises(SeatNotFoundError, match="Seat seat-missing not found"):
        service.check("seat-missing", "2030-03-04", "AM")
