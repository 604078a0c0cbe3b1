"""Conflict-resolving booking engine for single and bulk seat reservations."""

from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence, Union

from backend.domain.errors import (
    BookingNotFoundError,
    ConflictError,
    InputValidationError,
    NoBookingsCreatedError,
    SeatBlockedError,
    SeatLongTermReservedError,
    SeatNotFoundError,
    SlotTakenError,
)
from backend.domain.models import TIME_SLOTS, Availability, Booking, NewBooking, Seat, UserContext
from backend.repository.data_repository import (
    ACTIVE_SLOT_INDEX,
    SEAT_FOREIGN_KEY,
    DataRepository,
    StorageConstraintViolation,
)
from backend.services.availability_service import (
    REASON_BLOCKED,
    REASON_LONG_TERM_RESERVED,
    AvailabilityService,
    evaluate,
    seat_level_reason,
)
from backend.services.bulk_expansion import (
    BulkBookingReport,
    blocked_seat_message,
    dedupe,
    expand,
    long_term_seat_message,
    missing_seat_message,
    slot_conflict_message,
)
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


def validate_booking_date(value: str) -> str:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date().isoformat()
    except (TypeError, ValueError) as exc:
        raise InputValidationError(f"date must follow YYYY-MM-DD format, got {value!r}") from exc


def validate_slot(value: str) -> str:
    if value not in TIME_SLOTS:
        raise InputValidationError(f"slot must be one of {TIME_SLOTS}, got {value!r}")
    return value


class BookingService:
    """Creates bookings while guaranteeing one active booking per seat slot.

    The availability pre-check produces readable conflicts; the storage
    index on active (seat, date, slot) rows is the real guarantee, and its
    violations are translated back into ``SlotTakenError``.
    """

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        availability_service: Optional[AvailabilityService] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)
        self._availability = availability_service or AvailabilityService(
            repository=self._repository,
            settings=self._settings,
        )

    def check_availability(self, seat_id: str, date: str, slot: str) -> Availability:
        return self._availability.check(seat_id, validate_booking_date(date), validate_slot(slot))

    def create_booking(
        self,
        seat_id: str,
        user: UserContext,
        date: str,
        slot: str,
    ) -> Booking:
        date = validate_booking_date(date)
        slot = validate_slot(slot)

        seat = self._repository.find_seat(seat_id)
        if seat is None:
            raise SeatNotFoundError(seat_id)

        availability = self._availability.check_seat(seat, date, slot)
        if not availability.bookable:
            raise self._conflict_for(seat, date, slot, availability.reason)

        record = NewBooking(
            seat_id=seat.id,
            user_id=user.user_id,
            user_name=user.user_name,
            user_email=user.user_email,
            date=date,
            slot=slot,
        )
        try:
            booking = self._repository.insert_booking(record)
        except StorageConstraintViolation as exc:
            if exc.constraint == SEAT_FOREIGN_KEY:
                logger.warning(
                    "Seat %s was deleted before booking by user=%s",
                    seat.id,
                    user.user_id,
                )
                raise SeatNotFoundError(seat.id) from exc
            if exc.constraint != ACTIVE_SLOT_INDEX:
                raise
            logger.warning(
                "Concurrent booking lost race for seat=%s date=%s slot=%s user=%s",
                seat.id,
                date,
                slot,
                user.user_id,
            )
            raise SlotTakenError(slot_conflict_message(seat.name, date, slot)) from exc

        logger.info(
            "Booking %s created for seat=%s date=%s slot=%s user=%s",
            booking.id,
            seat.id,
            date,
            slot,
            user.user_id,
        )
        return booking

    def create_bulk_bookings(
        self,
        seat_ids: Sequence[str],
        dates: Sequence[str],
        slots: Sequence[str],
        user: UserContext,
    ) -> BulkBookingReport:
        """Book every seat x date x slot combination that is free.

        Rejections are collected, never raised, unless nothing at all could be
        booked. A blocked, long-term reserved or missing seat yields one
        conflict for the seat instead of one per combination.
        """
        unique_seat_ids, unique_dates, unique_slots = self._validate_bulk_inputs(
            seat_ids,
            dates,
            slots,
        )
        logger.info(
            "Bulk booking by user=%s covers %s combinations",
            user.user_id,
            len(expand(unique_seat_ids, unique_dates, unique_slots)),
        )

        # each outcome is either a conflict message or a record to insert
        outcomes: list[Union[str, NewBooking]] = []
        seat_names: dict[str, str] = {}
        for seat_id in unique_seat_ids:
            seat = self._repository.find_seat(seat_id)
            if seat is None:
                outcomes.append(missing_seat_message(seat_id))
                continue
            reason = seat_level_reason(seat)
            if reason == REASON_BLOCKED:
                outcomes.append(blocked_seat_message(seat.name))
                continue
            if reason == REASON_LONG_TERM_RESERVED:
                outcomes.append(long_term_seat_message(seat.name))
                continue

            seat_names[seat.id] = seat.name
            for date in unique_dates:
                existing = self._repository.find_active_bookings(seat.id, date)
                for slot in unique_slots:
                    if not evaluate(seat, slot, existing).bookable:
                        outcomes.append(slot_conflict_message(seat.name, date, slot))
                        continue
                    outcomes.append(
                        NewBooking(
                            seat_id=seat.id,
                            user_id=user.user_id,
                            user_name=user.user_name,
                            user_email=user.user_email,
                            date=date,
                            slot=slot,
                        )
                    )

        pending = [outcome for outcome in outcomes if isinstance(outcome, NewBooking)]
        if not pending:
            collected = [outcome for outcome in outcomes if isinstance(outcome, str)]
            logger.info(
                "Bulk booking by user=%s created nothing (%s conflicts)",
                user.user_id,
                len(collected),
            )
            raise NoBookingsCreatedError(collected)

        created, rejected = self._repository.insert_bookings(pending)
        if rejected:
            logger.warning(
                "Bulk booking by user=%s lost %s combinations to concurrent writers",
                user.user_id,
                len(rejected),
            )

        lost = {record for record, constraint in rejected if constraint == ACTIVE_SLOT_INDEX}
        vanished = {
            record.seat_id for record, constraint in rejected if constraint == SEAT_FOREIGN_KEY
        }
        conflicts: list[str] = []
        for outcome in outcomes:
            if isinstance(outcome, str):
                conflicts.append(outcome)
            elif outcome.seat_id in vanished:
                # one conflict per deleted seat
                conflicts.append(missing_seat_message(outcome.seat_id))
                vanished.discard(outcome.seat_id)
            elif outcome in lost:
                conflicts.append(
                    slot_conflict_message(seat_names[outcome.seat_id], outcome.date, outcome.slot)
                )

        if not created:
            raise NoBookingsCreatedError(conflicts)

        report = BulkBookingReport(created=created, conflicts=conflicts)
        logger.info("Bulk booking by user=%s %s", user.user_id, report.summary())
        return report

    def get_booking(self, booking_id: str) -> Booking:
        booking = self._repository.find_booking(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        return booking

    def list_active_bookings_for_date(self, date: str) -> list[Booking]:
        return self._repository.find_active_bookings_for_date(validate_booking_date(date))

    def list_bookings_for_user(self, user_id: str) -> list[Booking]:
        return self._repository.list_bookings_for_user(user_id)

    def list_all_bookings(self) -> list[Booking]:
        return self._repository.list_bookings()

    def _validate_bulk_inputs(
        self,
        seat_ids: Sequence[str],
        dates: Sequence[str],
        slots: Sequence[str],
    ) -> tuple[list[str], list[str], list[str]]:
        if not seat_ids:
            raise InputValidationError("seatIds must contain at least one seat id")
        if not dates:
            raise InputValidationError("dates must contain at least one date")
        if not slots:
            raise InputValidationError("slots must contain at least one slot")

        unique_seat_ids = dedupe(seat_ids)
        unique_dates = dedupe(validate_booking_date(value) for value in dates)
        unique_slots = dedupe(validate_slot(value) for value in slots)

        if len(unique_seat_ids) > self._settings.max_bulk_seats:
            raise InputValidationError(
                f"at most {self._settings.max_bulk_seats} seats per bulk request"
            )
        if len(unique_dates) > self._settings.max_bulk_dates:
            raise InputValidationError(
                f"at most {self._settings.max_bulk_dates} dates per bulk request"
            )
        return unique_seat_ids, unique_dates, unique_slots

    @staticmethod
    def _conflict_for(seat: Seat, date: str, slot: str, reason: Optional[str]) -> ConflictError:
        if reason == REASON_BLOCKED:
            return SeatBlockedError(blocked_seat_message(seat.name))
        if reason == REASON_LONG_TERM_RESERVED:
            return SeatLongTermReservedError(long_term_seat_message(seat.name))
        return SlotTakenError(slot_conflict_message(seat.name, date, slot))
