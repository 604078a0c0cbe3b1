"""Floor-plan validation rules for clusters and seat placement."""

from __future__ import annotations

from typing import Iterable, Optional

from backend.domain.models import CLUSTER_ROTATIONS, Cluster, Seat


MAX_GRID_DIMENSION = 10
MAX_REACHABLE_DEPTH = 2


def validate_cluster_layout(grid_cols: int, grid_rows: int, rotation: int) -> None:
    if not 1 <= grid_cols <= MAX_GRID_DIMENSION:
        raise ValueError(f"grid_cols must be between 1 and {MAX_GRID_DIMENSION}")
    if not 1 <= grid_rows <= MAX_GRID_DIMENSION:
        raise ValueError(f"grid_rows must be between 1 and {MAX_GRID_DIMENSION}")
    # every desk must be reachable from an aisle
    if grid_cols > MAX_REACHABLE_DEPTH and grid_rows > MAX_REACHABLE_DEPTH:
        raise ValueError(
            f"at least one of grid_cols or grid_rows must be <= {MAX_REACHABLE_DEPTH}"
        )
    if rotation not in CLUSTER_ROTATIONS:
        raise ValueError(f"rotation must be one of {CLUSTER_ROTATIONS}")


def validate_seat_position(cluster: Cluster, position_x: int, position_y: int) -> None:
    if not 0 <= position_x < cluster.grid_cols:
        raise ValueError(
            f"position_x {position_x} is outside cluster {cluster.id} "
            f"(0..{cluster.grid_cols - 1})"
        )
    if not 0 <= position_y < cluster.grid_rows:
        raise ValueError(
            f"position_y {position_y} is outside cluster {cluster.id} "
            f"(0..{cluster.grid_rows - 1})"
        )


def occupied_positions(seats: Iterable[Seat], exclude_seat_id: Optional[str] = None) -> set[tuple[int, int]]:
    return {
        (seat.position_x, seat.position_y)
        for seat in seats
        if seat.id != exclude_seat_id
    }


def first_free_position(cluster: Cluster, taken: set[tuple[int, int]]) -> Optional[tuple[int, int]]:
    """Return the first free cell scanning row by row, or None when full."""
    for row in range(cluster.grid_rows):
        for col in range(cluster.grid_cols):
            if (col, row) not in taken:
                return col, row
    return None
