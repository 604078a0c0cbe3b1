"""Seat and cluster registry with admin mutation rules."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Optional

from backend.domain.constraints import (
    first_free_position,
    occupied_positions,
    validate_cluster_layout,
    validate_seat_position,
)
from backend.domain.errors import (
    ClusterCapacityError,
    ClusterNotFoundError,
    ConflictError,
    DuplicateSeatError,
    InputValidationError,
    SeatNotFoundError,
)
from backend.domain.models import SEAT_TYPES, Cluster, ClusterPatch, Seat, SeatPatch
from backend.repository.data_repository import DataRepository, StorageConstraintViolation
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


MAX_SEAT_NAME_LENGTH = 10

_PLACEMENT_FIELDS = frozenset(("cluster_group", "position_x", "position_y"))
_REQUIRED_SEAT_FIELDS = (
    "name",
    "type",
    "has_monitor",
    "is_blocked",
    "is_long_term_reserved",
    "position_x",
    "position_y",
)
_REQUIRED_CLUSTER_FIELDS = ("position_x", "position_y", "rotation", "grid_cols", "grid_rows")


def _reject_nulls(updates: dict[str, Any], fields: tuple[str, ...]) -> None:
    for name in fields:
        if name in updates and updates[name] is None:
            raise InputValidationError(f"{name} cannot be null")


def _validate_seat_name(name: Any) -> str:
    if not isinstance(name, str) or not name.strip():
        raise InputValidationError("name must be a non-empty string")
    if len(name) > MAX_SEAT_NAME_LENGTH:
        raise InputValidationError(f"name must be at most {MAX_SEAT_NAME_LENGTH} characters")
    return name


def _validate_seat_type(seat_type: Any) -> str:
    if seat_type not in SEAT_TYPES:
        raise InputValidationError(f"type must be one of {SEAT_TYPES}")
    return seat_type


def _validate_optional_date(value: Any, field_name: str) -> Optional[str]:
    if value is None:
        return None
    try:
        return datetime.strptime(str(value), "%Y-%m-%d").date().isoformat()
    except ValueError as exc:
        raise InputValidationError(f"{field_name} must follow YYYY-MM-DD format") from exc


class SeatRegistryService:
    """Owns seat inventory and the cluster grid layout.

    Seat edits are last-write-wins; uniqueness of seat id and name is checked
    up front and backed by the storage constraints.
    """

    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    # --- Seats ---

    def get_seat(self, seat_id: str) -> Seat:
        seat = self._repository.find_seat(seat_id)
        if seat is None:
            raise SeatNotFoundError(seat_id)
        return seat

    def get_seat_by_name(self, name: str) -> Seat:
        seat = self._repository.find_seat_by_name(name)
        if seat is None:
            raise SeatNotFoundError(name)
        return seat

    def list_seats(self) -> list[Seat]:
        return self._repository.list_seats()

    def create_seat(self, seat: Seat) -> Seat:
        if not seat.id or not seat.id.strip():
            raise InputValidationError("id must be a non-empty string")
        _validate_seat_name(seat.name)
        _validate_seat_type(seat.type)
        seat = replace(
            seat,
            long_term_reserved_until=_validate_optional_date(
                seat.long_term_reserved_until,
                "long_term_reserved_until",
            ),
        )
        if not seat.is_long_term_reserved:
            seat = replace(seat, long_term_reserved_by=None, long_term_reserved_until=None)

        if self._repository.find_seat(seat.id) is not None:
            raise DuplicateSeatError("Seat with this ID already exists")
        if self._repository.find_seat_by_name(seat.name) is not None:
            raise DuplicateSeatError("Seat with this name already exists")
        self._validate_placement(seat.id, seat.cluster_group, seat.position_x, seat.position_y)

        try:
            created = self._repository.insert_seat(seat)
        except StorageConstraintViolation as exc:
            raise DuplicateSeatError("Seat with this ID or name already exists") from exc
        logger.info("Seat %s (%s) created", created.id, created.name)
        return created

    def update_seat(self, seat_id: str, patch: SeatPatch) -> Seat:
        current = self.get_seat(seat_id)
        updates = patch.supplied()
        if not updates:
            return current
        _reject_nulls(updates, _REQUIRED_SEAT_FIELDS)

        if "name" in updates:
            _validate_seat_name(updates["name"])
            existing = self._repository.find_seat_by_name(updates["name"])
            if existing is not None and existing.id != seat_id:
                raise DuplicateSeatError("Seat with this name already exists")
        if "type" in updates:
            _validate_seat_type(updates["type"])
        if "long_term_reserved_until" in updates:
            updates["long_term_reserved_until"] = _validate_optional_date(
                updates["long_term_reserved_until"],
                "long_term_reserved_until",
            )
        if "metadata" in updates and updates["metadata"] is None:
            updates["metadata"] = {}
        if updates.get("is_long_term_reserved") is False:
            updates["long_term_reserved_by"] = None
            updates["long_term_reserved_until"] = None

        if _PLACEMENT_FIELDS & set(updates):
            self._validate_placement(
                seat_id,
                updates.get("cluster_group", current.cluster_group),
                updates.get("position_x", current.position_x),
                updates.get("position_y", current.position_y),
            )

        try:
            updated = self._repository.update_seat(seat_id, updates)
        except StorageConstraintViolation as exc:
            raise DuplicateSeatError("Seat with this name already exists") from exc
        if updated is None:
            raise SeatNotFoundError(seat_id)
        logger.info("Seat %s updated: %s", seat_id, sorted(updates))
        return updated

    def delete_seat(self, seat_id: str) -> int:
        """Delete a seat together with all of its bookings."""
        removed = self._repository.delete_seat(seat_id)
        if removed is None:
            raise SeatNotFoundError(seat_id)
        logger.info("Seat %s deleted with %s bookings", seat_id, removed)
        return removed

    def set_blocked(self, seat_id: str, is_blocked: bool) -> Seat:
        return self.update_seat(seat_id, SeatPatch(is_blocked=bool(is_blocked)))

    def set_long_term_reservation(
        self,
        seat_id: str,
        is_reserved: bool,
        reserved_by: Optional[str] = None,
        reserved_until: Optional[str] = None,
    ) -> Seat:
        if is_reserved:
            patch = SeatPatch(
                is_long_term_reserved=True,
                long_term_reserved_by=reserved_by,
                long_term_reserved_until=reserved_until,
            )
        else:
            patch = SeatPatch(is_long_term_reserved=False)
        return self.update_seat(seat_id, patch)

    # --- Clusters ---

    def get_cluster(self, cluster_id: str) -> Cluster:
        cluster = self._repository.find_cluster(cluster_id)
        if cluster is None:
            raise ClusterNotFoundError(cluster_id)
        return cluster

    def list_clusters(self) -> list[Cluster]:
        return self._repository.list_clusters()

    def create_cluster(self, cluster: Cluster) -> Cluster:
        if not cluster.id or not cluster.id.strip():
            raise InputValidationError("id must be a non-empty string")
        self._validate_layout(cluster)
        if self._repository.find_cluster(cluster.id) is not None:
            raise ConflictError("Cluster with this ID already exists", reason="duplicate cluster")
        try:
            created = self._repository.insert_cluster(cluster)
        except StorageConstraintViolation as exc:
            raise ConflictError(
                "Cluster with this ID already exists",
                reason="duplicate cluster",
            ) from exc
        logger.info("Cluster %s created (%sx%s)", created.id, created.grid_cols, created.grid_rows)
        return created

    def update_cluster(self, cluster_id: str, patch: ClusterPatch) -> Cluster:
        current = self.get_cluster(cluster_id)
        updates = patch.supplied()
        if not updates:
            return current
        _reject_nulls(updates, _REQUIRED_CLUSTER_FIELDS)
        merged = replace(current, **updates)
        self._validate_layout(merged)

        members = self._repository.list_seats_in_cluster(cluster_id)
        if len(members) > merged.capacity:
            raise ClusterCapacityError(
                f"Cluster {cluster_id} holds {len(members)} seats; "
                f"{merged.grid_cols}x{merged.grid_rows} is too small"
            )
        for seat in members:
            try:
                validate_seat_position(merged, seat.position_x, seat.position_y)
            except ValueError as exc:
                raise ClusterCapacityError(f"Seat {seat.name}: {exc}") from exc

        updated = self._repository.update_cluster(cluster_id, updates)
        if updated is None:
            raise ClusterNotFoundError(cluster_id)
        logger.info("Cluster %s updated: %s", cluster_id, sorted(updates))
        return updated

    def delete_cluster(self, cluster_id: str) -> int:
        """Delete a cluster; its seats stay but lose their grouping."""
        detached = self._repository.delete_cluster(cluster_id)
        if detached is None:
            raise ClusterNotFoundError(cluster_id)
        logger.info("Cluster %s deleted, %s seats detached", cluster_id, detached)
        return detached

    def next_free_position(self, cluster_id: str) -> Optional[tuple[int, int]]:
        cluster = self.get_cluster(cluster_id)
        taken = occupied_positions(self._repository.list_seats_in_cluster(cluster_id))
        return first_free_position(cluster, taken)

    @staticmethod
    def _validate_layout(cluster: Cluster) -> None:
        try:
            validate_cluster_layout(cluster.grid_cols, cluster.grid_rows, cluster.rotation)
        except ValueError as exc:
            raise InputValidationError(str(exc)) from exc

    def _validate_placement(
        self,
        seat_id: str,
        cluster_id: Optional[str],
        position_x: int,
        position_y: int,
    ) -> None:
        if cluster_id is None:
            return
        cluster = self._repository.find_cluster(cluster_id)
        if cluster is None:
            # free-form group without a grid definition
            return
        try:
            validate_seat_position(cluster, position_x, position_y)
        except ValueError as exc:
            raise InputValidationError(str(exc)) from exc

        others = [
            seat
            for seat in self._repository.list_seats_in_cluster(cluster_id)
            if seat.id != seat_id
        ]
        if len(others) >= cluster.capacity:
            raise ClusterCapacityError(
                f"Cluster {cluster_id} is full ({cluster.capacity} seats)"
            )
        if (position_x, position_y) in occupied_positions(others):
            raise ConflictError(
                f"Position ({position_x}, {position_y}) in cluster {cluster_id} is already taken",
                reason="position taken",
            )
