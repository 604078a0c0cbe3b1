"""Request/response DTOs shared by the HTTP controllers.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


PatchT = TypeVar("PatchT")

SlotLiteral = Literal["AM", "PM"]
SeatTypeLiteral = Literal["solo", "team_cluster"]
RoleLiteral = Literal["employee", "admin"]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def patch_from(payload: BaseModel, patch_type: type[PatchT]) -> PatchT:
    """Build a patch struct carrying only the fields the client sent."""
    values: dict[str, Any] = {}
    for name in payload.model_fields_set:
        value = getattr(payload, name)
        if isinstance(value, date):
            value = value.isoformat()
        values[name] = value
    return patch_type(**values)


# --- Seats & clusters ---


class SeatResponse(ApiModel):
    id: str
    name: str
    type: str
    has_monitor: bool
    is_blocked: bool
    is_long_term_reserved: bool
    long_term_reserved_by: Optional[str] = None
    long_term_reserved_until: Optional[str] = None
    position_x: int
    position_y: int
    cluster_group: Optional[str] = None
    metadata: dict[str, str] = Field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class SeatCreateRequest(ApiModel):
    id: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=10)
    type: SeatTypeLiteral
    has_monitor: bool = False
    is_blocked: bool = False
    is_long_term_reserved: bool = False
    long_term_reserved_by: Optional[str] = None
    long_term_reserved_until: Optional[date] = None
    position_x: int = Field(default=0, ge=0)
    position_y: int = Field(default=0, ge=0)
    cluster_group: Optional[str] = None
    metadata: dict[str, str] = Field(default_factory=dict)


class SeatUpdateRequest(ApiModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=10)
    type: Optional[SeatTypeLiteral] = None
    has_monitor: Optional[bool] = None
    is_blocked: Optional[bool] = None
    is_long_term_reserved: Optional[bool] = None
    long_term_reserved_by: Optional[str] = None
    long_term_reserved_until: Optional[date] = None
    position_x: Optional[int] = Field(default=None, ge=0)
    position_y: Optional[int] = Field(default=None, ge=0)
    cluster_group: Optional[str] = None
    metadata: Optional[dict[str, str]] = None


class BlockSeatRequest(ApiModel):
    is_blocked: bool


class LongTermReservationRequest(ApiModel):
    is_long_term_reserved: bool
    long_term_reserved_by: Optional[str] = None
    long_term_reserved_until: Optional[date] = None


class SeatDeletedResponse(ApiModel):
    message: str
    removed_bookings: int = Field(ge=0)


class ClusterResponse(ApiModel):
    id: str
    label: Optional[str] = None
    position_x: int
    position_y: int
    rotation: int
    grid_cols: int
    grid_rows: int
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ClusterCreateRequest(ApiModel):
    id: str = Field(min_length=1)
    label: Optional[str] = None
    position_x: int = Field(default=0, ge=0)
    position_y: int = Field(default=0, ge=0)
    rotation: int = 0
    grid_cols: int = Field(default=2, ge=1, le=10)
    grid_rows: int = Field(default=2, ge=1, le=10)


class ClusterUpdateRequest(ApiModel):
    label: Optional[str] = None
    position_x: Optional[int] = Field(default=None, ge=0)
    position_y: Optional[int] = Field(default=None, ge=0)
    rotation: Optional[int] = None
    grid_cols: Optional[int] = Field(default=None, ge=1, le=10)
    grid_rows: Optional[int] = Field(default=None, ge=1, le=10)


class ClusterDeletedResponse(ApiModel):
    message: str
    detached_seats: int = Field(ge=0)


# --- Bookings ---


class BookingResponse(ApiModel):
    id: str
    seat_id: str
    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None
    date: str
    slot: str
    created_at: str
    cancelled_at: Optional[str] = None


class CreateBookingRequest(ApiModel):
    seat_id: str = Field(min_length=1)
    date: date
    slot: SlotLiteral


class BulkBookingRequest(ApiModel):
    seat_ids: list[str] = Field(min_length=1)
    dates: list[date] = Field(min_length=1)
    slots: list[SlotLiteral] = Field(min_length=1)


class BulkBookingResponse(ApiModel):
    created: list[BookingResponse]
    conflicts: list[str]
    created_count: int = Field(ge=0)
    failed_count: int = Field(ge=0)
    summary: str


class AvailabilityResponse(ApiModel):
    seat_id: str
    date: date
    slot: SlotLiteral
    bookable: bool
    reason: Optional[str] = None


# --- Users ---


class UserRoleResponse(ApiModel):
    user_id: str
    role: RoleLiteral
    is_active: bool
    created_at: Optional[str] = None


class UpdateRoleRequest(ApiModel):
    role: Optional[RoleLiteral] = None
    is_active: Optional[bool] = None


class UpdateStatusRequest(ApiModel):
    is_active: bool


class MessageResponse(ApiModel):
    message: str
