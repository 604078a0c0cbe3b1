from __future__ import annotations

from dataclasses import replace

import pytest

from backend.domain.errors import InputValidationError, NoBookingsCreatedError
from backend.domain.models import Seat, UserContext
from backend.repository.data_repository import DataRepository
from backend.services.booking_service import BookingService
from backend.services.bulk_expansion import expand
from backend.utils.config import get_settings


ALICE = UserContext(user_id="alice", user_name="Alice")
BOB = UserContext(user_id="bob", user_name="Bob")
DATES = ["2030-03-04", "2030-03-05"]


def _build_test_settings(tmp_path, filename: str, **overrides):
    get_settings.cache_clear()
    return replace(
        get_settings(),
        database_path=tmp_path / filename,
        seed_floor_plan=False,
        bootstrap_admin_user_ids=(),
        **overrides,
    )


@pytest.fixture
def repository(tmp_path) -> DataRepository:
    repository = DataRepository(_build_test_settings(tmp_path, "bulk_booking.db"))
    repository.initialize_database()
    repository.insert_seat(Seat(id="seat-a", name="A", type="solo"))
    repository.insert_seat(Seat(id="seat-b", name="B", type="solo", is_blocked=True))
    repository.insert_seat(Seat(id="seat-c", name="C", type="solo"))
    return repository


def test_expand_dedupes_and_keeps_caller_order() -> None:
    combos = expand(["b", "a", "b"], ["d1", "d1"], ["PM", "AM"])
    assert [(c.seat_id, c.date, c.slot) for c in combos] == [
        ("b", "d1", "PM"),
        ("b", "d1", "AM"),
        ("a", "d1", "PM"),
        ("a", "d1", "AM"),
    ]


def test_blocked_seat_is_reported_once_and_the_rest_is_booked(repository: DataRepository) -> None:
    service = BookingService(repository=repository)
    report = service.create_bulk_bookings(["seat-a", "seat-b"], DATES, ["AM", "PM"], ALICE)

    assert report.created_count == 4
    assert report.conflicts == ["Seat B is blocked"]
    assert report.failed_count == 1
    assert report.summary() == "created 4 of 5 requested"
    assert {(b.date, b.slot) for b in report.created} == {
        (date, slot) for date in DATES for slot in ("AM", "PM")
    }
    assert all(booking.user_id == "alice" for booking in report.created)


def test_taken_slots_become_itemized_conflicts(repository: DataRepository) -> None:
    service = BookingService(repository=repository)
    service.create_booking("seat-a", BOB, "2030-03-05", "AM")

    report = service.create_bulk_bookings(["seat-a"], DATES, ["AM", "PM"], ALICE)

    assert report.created_count == 3
    assert report.conflicts == ["A on 2030-03-05 AM already booked"]


def test_conflicts_follow_request_order(repository: DataRepository) -> None:
    service = BookingService(repository=repository)
    service.create_booking("seat-c", BOB, "2030-03-04", "PM")

    report = service.create_bulk_bookings(
        ["seat-missing", "seat-c", "seat-b"],
        ["2030-03-04"],
        ["AM", "PM"],
        ALICE,
    )

    assert report.conflicts == [
        "Seat seat-missing not found",
        "C on 2030-03-04 PM already booked",
        "Seat B is blocked",
    ]
    assert [(b.seat_id, b.slot) for b in report.created] == [("seat-c", "AM")]


def test_nothing_bookable_raises_with_every_conflict(repository: DataRepository) -> None:
    service = BookingService(repository=repository)
    service.create_booking("seat-a", BOB, "2030-03-04", "AM")

    with pytest.raises(NoBookingsCreatedError) as excinfo:
        service.create_bulk_bookings(["seat-a", "seat-b"], ["2030-03-04"], ["AM"], ALICE)

    assert str(excinfo.value) == "No bookings could be created"
    assert excinfo.value.conflicts == [
        "A on 2030-03-04 AM already booked",
        "Seat B is blocked",
    ]
    assert repository.count_bookings() == 1


def test_duplicate_inputs_do_not_conflict_with_themselves(repository: DataRepository) -> None:
    service = BookingService(repository=repository)
    report = service.create_bulk_bookings(
        ["seat-a", "seat-a"],
        ["2030-03-04", "2030-03-04"],
        ["AM", "AM"],
        ALICE,
    )
    assert report.created_count == 1
    assert report.conflicts == []


def test_row_lost_to_concurrent_writer_becomes_conflict(
    repository: DataRepository,
    monkeypatch,
) -> None:
    service = BookingService(repository=repository)
    service.create_booking("seat-a", BOB, "2030-03-04", "AM")
    # availability read happened before the competing commit
    monkeypatch.setattr(repository, "find_active_bookings", lambda seat_id, date: [])

    report = service.create_bulk_bookings(["seat-a"], ["2030-03-04"], ["AM", "PM"], ALICE)

    assert [b.slot for b in report.created] == ["PM"]
    assert report.conflicts == ["A on 2030-03-04 AM already booked"]
    assert len(repository.find_active_bookings_for_date("2030-03-04")) == 2


@pytest.mark.parametrize(
    ("seat_ids", "dates", "slots"),
    [
        ([], DATES, ["AM"]),
        (["seat-a"], [], ["AM"]),
        (["seat-a"], DATES, []),
        (["seat-a"], ["not-a-date"], ["AM"]),
        (["seat-a"], DATES, ["NOON"]),
    ],
)
def test_malformed_bulk_request_is_rejected(
    repository: DataRepository,
    seat_ids,
    dates,
    slots,
) -> None:
    service = BookingService(repository=repository)
    with pytest.raises(InputValidationError):
        service.create_bulk_bookings(seat_ids, dates, slots, ALICE)
    assert repository.count_bookings() == 0


def test_bulk_size_limits_apply_after_dedupe(tmp_path) -> None:
    settings = _build_test_settings(tmp_path, "bulk_limits.db", max_bulk_dates=1)
    repository = DataRepository(settings)
    repository.initialize_database()
    repository.insert_seat(Seat(id="seat-a", name="A", type="solo"))
    service = BookingService(repository=repository, settings=settings)

    report = service.create_bulk_bookings(["seat-a"], ["2030-03-04"] * 3, ["AM"], ALICE)
    assert report.created_count == 1

    with pytest.raises(InputValidationError, match="at most 1 dates"):
        service.create_bulk_bookings(["seat-a"], DATES, ["AM"], ALICE)


def test_seat_deleted_during_bulk_booking_is_one_missing_conflict(
    repository: DataRepository,
    monkeypatch,
) -> None:
    stale = repository.find_seat("seat-c")
    repository.delete_seat("seat-c")
    original_find_seat = repository.find_seat
    monkeypatch.setattr(
        repository,
        "find_seat",
        lambda seat_id: stale if seat_id == "seat-c" else original_find_seat(seat_id),
    )

    service = BookingService(repository=repository)
    report = service.create_bulk_bookings(["seat-a", "seat-c"], DATES, ["AM", "PM"], ALICE)

    assert report.created_count == 4
    assert {booking.seat_id for booking in report.created} == {"seat-a"}
    assert report.conflicts == ["Seat seat-c not found"]
    assert repository.count_bookings() == 4
