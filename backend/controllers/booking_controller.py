"""HTTP controller layer for availability, booking and cancellation."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import JSONResponse

from backend.controllers.dependencies import (
    get_booking_service,
    get_cancellation_service,
    get_current_role,
    get_current_user,
)
from backend.controllers.schemas import (
    AvailabilityResponse,
    BookingResponse,
    BulkBookingRequest,
    BulkBookingResponse,
    CreateBookingRequest,
    SlotLiteral,
)
from backend.domain.errors import (
    ConflictError,
    ForbiddenError,
    InputValidationError,
    NoBookingsCreatedError,
    NotFoundError,
)
from backend.domain.models import UserContext, UserRole
from backend.services.booking_service import BookingService
from backend.services.cancellation_service import CancellationService


router = APIRouter(prefix="/api", tags=["bookings"])


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    status_code=status.HTTP_200_OK,
)
def check_availability(
    seat_id: str = Query(alias="seatId", min_length=1),
    target_date: date = Query(alias="date"),
    slot: SlotLiteral = Query(),
    service: BookingService = Depends(get_booking_service),
) -> AvailabilityResponse:
    """Pure query: reports whether the seat could be booked right now."""
    try:
        availability = service.check_availability(seat_id, target_date.isoformat(), slot)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InputValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return AvailabilityResponse(
        seat_id=seat_id,
        date=target_date,
        slot=slot,
        bookable=availability.bookable,
        reason=availability.reason,
    )


@router.get("/bookings", response_model=list[BookingResponse])
def list_bookings(
    _: UserContext = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> list[BookingResponse]:
    return [BookingResponse.model_validate(item) for item in service.list_all_bookings()]


@router.get("/bookings/my", response_model=list[BookingResponse])
def list_my_bookings(
    user: UserContext = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> list[BookingResponse]:
    return [
        BookingResponse.model_validate(item)
        for item in service.list_bookings_for_user(user.user_id)
    ]


@router.get("/bookings/date/{target_date}", response_model=list[BookingResponse])
def list_bookings_for_date(
    target_date: date,
    _: UserContext = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> list[BookingResponse]:
    """Who is in: active bookings across all seats for one day."""
    return [
        BookingResponse.model_validate(item)
        for item in service.list_active_bookings_for_date(target_date.isoformat())
    ]


@router.get("/bookings/{booking_id}", response_model=BookingResponse)
def get_booking(
    booking_id: str,
    _: UserContext = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        return BookingResponse.model_validate(service.get_booking(booking_id))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc


@router.post(
    "/bookings",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_booking(
    payload: CreateBookingRequest,
    user: UserContext = Depends(get_current_user),
    _: UserRole = Depends(get_current_role),
    service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = service.create_booking(
            seat_id=payload.seat_id,
            user=user,
            date=payload.date.isoformat(),
            slot=payload.slot,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except InputValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return BookingResponse.model_validate(booking)


@router.post(
    "/bookings/bulk",
    response_model=BulkBookingResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_bulk_bookings(
    payload: BulkBookingRequest,
    user: UserContext = Depends(get_current_user),
    _: UserRole = Depends(get_current_role),
    service: BookingService = Depends(get_booking_service),
) -> BulkBookingResponse:
    """Book every seat x date x slot combination; conflicts are itemized."""
    try:
        report = service.create_bulk_bookings(
            seat_ids=payload.seat_ids,
            dates=[item.isoformat() for item in payload.dates],
            slots=list(payload.slots),
            user=user,
        )
    except NoBookingsCreatedError as exc:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"message": str(exc), "conflicts": exc.conflicts},
        )
    except InputValidationError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    return BulkBookingResponse(
        created=[BookingResponse.model_validate(item) for item in report.created],
        conflicts=report.conflicts,
        created_count=report.created_count,
        failed_count=report.failed_count,
        summary=report.summary(),
    )


@router.delete("/bookings/{booking_id}", response_model=BookingResponse)
def cancel_booking(
    booking_id: str,
    role: UserRole = Depends(get_current_role),
    service: CancellationService = Depends(get_cancellation_service),
) -> BookingResponse:
    try:
        booking = service.cancel_booking(
            booking_id=booking_id,
            requesting_user_id=role.user_id,
            requesting_user_role=role.role,
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ForbiddenError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return BookingResponse.model_validate(booking)
