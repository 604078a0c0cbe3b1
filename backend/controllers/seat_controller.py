"""HTTP controller layer for seat inventory and cluster layout."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from backend.controllers.dependencies import get_seat_service, require_admin
from backend.controllers.schemas import (
    BlockSeatRequest,
    ClusterCreateRequest,
    ClusterDeletedResponse,
    ClusterResponse,
    ClusterUpdateRequest,
    LongTermReservationRequest,
    SeatCreateRequest,
    SeatDeletedResponse,
    SeatResponse,
    SeatUpdateRequest,
    patch_from,
)
from backend.domain.errors import ConflictError, InputValidationError, NotFoundError
from backend.domain.models import Cluster, ClusterPatch, Seat, SeatPatch
from backend.services.seat_service import SeatRegistryService


router = APIRouter(prefix="/api", tags=["seats"])


def _to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/seats", response_model=list[SeatResponse])
def list_seats(service: SeatRegistryService = Depends(get_seat_service)) -> list[SeatResponse]:
    return [SeatResponse.model_validate(seat) for seat in service.list_seats()]


@router.get("/seats/by-name/{name}", response_model=SeatResponse)
def get_seat_by_name(
    name: str,
    service: SeatRegistryService = Depends(get_seat_service),
) -> SeatResponse:
    try:
        return SeatResponse.model_validate(service.get_seat_by_name(name))
    except NotFoundError as exc:
        raise _to_http(exc) from exc


@router.get("/seats/{seat_id}", response_model=SeatResponse)
def get_seat(
    seat_id: str,
    service: SeatRegistryService = Depends(get_seat_service),
) -> SeatResponse:
    try:
        return SeatResponse.model_validate(service.get_seat(seat_id))
    except NotFoundError as exc:
        raise _to_http(exc) from exc


@router.post(
    "/seats",
    response_model=SeatResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_seat(
    payload: SeatCreateRequest,
    service: SeatRegistryService = Depends(get_seat_service),
) -> SeatResponse:
    seat = Seat(
        id=payload.id,
        name=payload.name,
        type=payload.type,
        has_monitor=payload.has_monitor,
        is_blocked=payload.is_blocked,
        is_long_term_reserved=payload.is_long_term_reserved,
        long_term_reserved_by=payload.long_term_reserved_by,
        long_term_reserved_until=(
            payload.long_term_reserved_until.isoformat()
            if payload.long_term_reserved_until is not None
            else None
        ),
        position_x=payload.position_x,
        position_y=payload.position_y,
        cluster_group=payload.cluster_group,
        metadata=dict(payload.metadata),
    )
    try:
        return SeatResponse.model_validate(service.create_seat(seat))
    except (NotFoundError, ConflictError, InputValidationError) as exc:
        raise _to_http(exc) from exc


@router.patch(
    "/seats/{seat_id}",
    response_model=SeatResponse,
    dependencies=[Depends(require_admin)],
)
def update_seat(
    seat_id: str,
    payload: SeatUpdateRequest,
    service: SeatRegistryService = Depends(get_seat_service),
) -> SeatResponse:
    try:
        seat = service.update_seat(seat_id, patch_from(payload, SeatPatch))
    except (NotFoundError, ConflictError, InputValidationError) as exc:
        raise _to_http(exc) from exc
    return SeatResponse.model_validate(seat)


@router.patch(
    "/seats/{seat_id}/block",
    response_model=SeatResponse,
    dependencies=[Depends(require_admin)],
)
def block_seat(
    seat_id: str,
    payload: BlockSeatRequest,
    service: SeatRegistryService = Depends(get_seat_service),
) -> SeatResponse:
    try:
        seat = service.set_blocked(seat_id, payload.is_blocked)
    except NotFoundError as exc:
        raise _to_http(exc) from exc
    return SeatResponse.model_validate(seat)


@router.patch(
    "/seats/{seat_id}/long-term",
    response_model=SeatResponse,
    dependencies=[Depends(require_admin)],
)
def set_long_term_reservation(
    seat_id: str,
    payload: LongTermReservationRequest,
    service: SeatRegistryService = Depends(get_seat_service),
) -> SeatResponse:
    try:
        seat = service.set_long_term_reservation(
            seat_id,
            is_reserved=payload.is_long_term_reserved,
            reserved_by=payload.long_term_reserved_by,
            reserved_until=(
                payload.long_term_reserved_until.isoformat()
                if payload.long_term_reserved_until is not None
                else None
            ),
        )
    except (NotFoundError, InputValidationError) as exc:
        raise _to_http(exc) from exc
    return SeatResponse.model_validate(seat)


@router.delete(
    "/seats/{seat_id}",
    response_model=SeatDeletedResponse,
    dependencies=[Depends(require_admin)],
)
def delete_seat(
    seat_id: str,
    service: SeatRegistryService = Depends(get_seat_service),
) -> SeatDeletedResponse:
    try:
        removed = service.delete_seat(seat_id)
    except NotFoundError as exc:
        raise _to_http(exc) from exc
    return SeatDeletedResponse(message="Seat deleted successfully", removed_bookings=removed)


@router.get("/clusters", response_model=list[ClusterResponse])
def list_clusters(
    service: SeatRegistryService = Depends(get_seat_service),
) -> list[ClusterResponse]:
    return [ClusterResponse.model_validate(cluster) for cluster in service.list_clusters()]


@router.post(
    "/clusters",
    response_model=ClusterResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_cluster(
    payload: ClusterCreateRequest,
    service: SeatRegistryService = Depends(get_seat_service),
) -> ClusterResponse:
    cluster = Cluster(
        id=payload.id,
        label=payload.label,
        position_x=payload.position_x,
        position_y=payload.position_y,
        rotation=payload.rotation,
        grid_cols=payload.grid_cols,
        grid_rows=payload.grid_rows,
    )
    try:
        return ClusterResponse.model_validate(service.create_cluster(cluster))
    except (ConflictError, InputValidationError) as exc:
        raise _to_http(exc) from exc


@router.patch(
    "/clusters/{cluster_id}",
    response_model=ClusterResponse,
    dependencies=[Depends(require_admin)],
)
def update_cluster(
    cluster_id: str,
    payload: ClusterUpdateRequest,
    service: SeatRegistryService = Depends(get_seat_service),
) -> ClusterResponse:
    try:
        cluster = service.update_cluster(cluster_id, patch_from(payload, ClusterPatch))
    except (NotFoundError, ConflictError, InputValidationError) as exc:
        raise _to_http(exc) from exc
    return ClusterResponse.model_validate(cluster)


@router.delete(
    "/clusters/{cluster_id}",
    response_model=ClusterDeletedResponse,
    dependencies=[Depends(require_admin)],
)
def delete_cluster(
    cluster_id: str,
    service: SeatRegistryService = Depends(get_seat_service),
) -> ClusterDeletedResponse:
    try:
        detached = service.delete_cluster(cluster_id)
    except NotFoundError as exc:
        raise _to_http(exc) from exc
    return ClusterDeletedResponse(message="Cluster deleted successfully", detached_seats=detached)
