"""Domain models for seats, clusters, bookings and user roles."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Optional


SLOT_AM = "AM"
SLOT_PM = "PM"
TIME_SLOTS = (SLOT_AM, SLOT_PM)

SEAT_TYPE_SOLO = "solo"
SEAT_TYPE_TEAM_CLUSTER = "team_cluster"
SEAT_TYPES = (SEAT_TYPE_SOLO, SEAT_TYPE_TEAM_CLUSTER)

ROLE_EMPLOYEE = "employee"
ROLE_ADMIN = "admin"
ROLES = (ROLE_EMPLOYEE, ROLE_ADMIN)

CLUSTER_ROTATIONS = (0, 90, 180, 270)


class _Unset:
    """Marker for patch fields the caller did not supply."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET: Any = _Unset()


@dataclass(frozen=True)
class Seat:
    id: str
    name: str
    type: str
    has_monitor: bool = False
    is_blocked: bool = False
    is_long_term_reserved: bool = False
    long_term_reserved_by: Optional[str] = None
    long_term_reserved_until: Optional[str] = None
    position_x: int = 0
    position_y: int = 0
    cluster_group: Optional[str] = None
    metadata: dict[str, str] = field(default_factory=dict)
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class Cluster:
    id: str
    label: Optional[str] = None
    position_x: int = 0
    position_y: int = 0
    rotation: int = 0
    grid_cols: int = 2
    grid_rows: int = 2
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def capacity(self) -> int:
        return self.grid_cols * self.grid_rows


@dataclass(frozen=True)
class Booking:
    id: str
    seat_id: str
    user_id: str
    user_name: Optional[str]
    user_email: Optional[str]
    date: str
    slot: str
    created_at: str
    cancelled_at: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.cancelled_at is None


@dataclass(frozen=True)
class NewBooking:
    """Accepted combination waiting to be persisted."""

    seat_id: str
    user_id: str
    user_name: Optional[str]
    user_email: Optional[str]
    date: str
    slot: str


@dataclass(frozen=True)
class UserContext:
    """Caller identity captured at request time and frozen onto bookings."""

    user_id: str
    user_name: Optional[str] = None
    user_email: Optional[str] = None


@dataclass(frozen=True)
class UserRole:
    user_id: str
    role: str = ROLE_EMPLOYEE
    is_active: bool = True
    created_at: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass(frozen=True)
class Availability:
    bookable: bool
    reason: Optional[str] = None


class _Patch:
    """Mixin for patch structs whose fields default to ``UNSET``."""

    def supplied(self) -> dict[str, Any]:
        return {
            item.name: getattr(self, item.name)
            for item in fields(self)  # type: ignore[arg-type]
            if getattr(self, item.name) is not UNSET
        }

    def is_empty(self) -> bool:
        return not self.supplied()


@dataclass(frozen=True)
class SeatPatch(_Patch):
    name: Any = UNSET
    type: Any = UNSET
    has_monitor: Any = UNSET
    is_blocked: Any = UNSET
    is_long_term_reserved: Any = UNSET
    long_term_reserved_by: Any = UNSET
    long_term_reserved_until: Any = UNSET
    position_x: Any = UNSET
    position_y: Any = UNSET
    cluster_group: Any = UNSET
    metadata: Any = UNSET


@dataclass(frozen=True)
class ClusterPatch(_Patch):
    label: Any = UNSET
    position_x: Any = UNSET
    position_y: Any = UNSET
    rotation: Any = UNSET
    grid_cols: Any = UNSET
    grid_rows: Any = UNSET


@dataclass(frozen=True)
class RolePatch(_Patch):
    role: Any = UNSET
    is_active: Any = UNSET
