"""Tests for cluster layout and seat placement validation logic."""

from __future__ import annotations

import pytest

from backend.domain.constraints import (
    first_free_position,
    occupied_positions,
    validate_cluster_layout,
    validate_seat_position,
)
from backend.domain.models import Cluster, Seat


def cluster(**overrides) -> Cluster:
    """Return a valid baseline 2x4 cluster, optionally overriding fields."""
    defaults = {"id": "cluster-a", "grid_cols": 2, "grid_rows": 4, "rotation": 0}
    defaults.update(overrides)
    return Cluster(**defaults)


# --- Baseline pass ---

def test_valid_layout_passes() -> None:
    validate_cluster_layout(2, 4, 0)


@pytest.mark.parametrize("rotation", [0, 90, 180, 270])
def test_quarter_turn_rotations_pass(rotation: int) -> None:
    validate_cluster_layout(2, 2, rotation)


# --- grid dimensions ---

def test_grid_cols_zero_raises() -> None:
    with pytest.raises(ValueError):
        validate_cluster_layout(0, 2, 0)


def test_grid_rows_above_ten_raises() -> None:
    with pytest.raises(ValueError):
        validate_cluster_layout(2, 11, 0)


def test_both_dimensions_deeper_than_two_raises() -> None:
    """A 3x3 block leaves the middle desk without aisle access."""
    with pytest.raises(ValueError):
        validate_cluster_layout(3, 3, 0)


def test_long_single_row_passes() -> None:
    validate_cluster_layout(10, 1, 0)


# --- rotation ---

@pytest.mark.parametrize("rotation", [45, -90, 360])
def test_non_quarter_rotation_raises(rotation: int) -> None:
    with pytest.raises(ValueError):
        validate_cluster_layout(2, 2, rotation)


# --- seat positions ---

def test_position_inside_grid_passes() -> None:
    validate_seat_position(cluster(), 1, 3)


def test_position_x_outside_grid_raises() -> None:
    with pytest.raises(ValueError, match="position_x"):
        validate_seat_position(cluster(), 2, 0)


def test_position_y_outside_grid_raises() -> None:
    with pytest.raises(ValueError, match="position_y"):
        validate_seat_position(cluster(), 0, 4)


def test_occupied_positions_excludes_seat_being_moved() -> None:
    seats = [
        Seat(id="a", name="A", type="team_cluster", position_x=0, position_y=0),
        Seat(id="b", name="B", type="team_cluster", position_x=1, position_y=0),
    ]
    assert occupied_positions(seats) == {(0, 0), (1, 0)}
    assert occupied_positions(seats, exclude_seat_id="a") == {(1, 0)}


def test_first_free_position_scans_row_by_row() -> None:
    grid = cluster(grid_cols=2, grid_rows=2)
    assert first_free_position(grid, set()) == (0, 0)
    assert first_free_position(grid, {(0, 0)}) == (1, 0)
    assert first_free_position(grid, {(0, 0), (1, 0)}) == (0, 1)


def test_first_free_position_returns_none_when_full() -> None:
    grid = cluster(grid_cols=1, grid_rows=2)
    assert first_free_position(grid, {(0, 0), (0, 1)}) is None
