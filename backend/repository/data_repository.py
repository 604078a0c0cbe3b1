"""Repository layer responsible for all database access."""

from __future__ import annotations

import json
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, List, Mapping, Optional, Sequence
from uuid import uuid4

from backend.domain.models import (
    ROLE_EMPLOYEE,
    SEAT_TYPE_SOLO,
    SEAT_TYPE_TEAM_CLUSTER,
    Booking,
    Cluster,
    NewBooking,
    Seat,
    UserRole,
)
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


ACTIVE_SLOT_INDEX = "ux_bookings_active_slot"
SEAT_FOREIGN_KEY = "Bookings.seat_id -> Seats.id"

SOLO_DESKS = ("S1", "S2", "S3", "S4")

TEAM_CLUSTER_DESKS = (
    "T56", "T55", "T54", "T53", "T49", "T50", "T51", "T52",
    "T48", "T47", "T46", "T45", "T41", "T42", "T43", "T44",
    "T60", "T61", "T59", "T62", "T58", "T63", "T57", "T64",
    "T68", "T69", "T67", "T70", "T66", "T71", "T65", "T72",
    "T76", "T77", "T75", "T78", "T74", "T79", "T73", "T80",
    "T8", "T9", "T7", "T10", "T6", "T11", "T5", "T12",
    "T16", "T17", "T15", "T18", "T14", "T19", "T13", "T20",
    "T40", "T39", "T38", "T37", "T36", "T31", "T32", "T33", "T34", "T35",
    "T30", "T29", "T28", "T27", "T26", "T21", "T22", "T23", "T24", "T25",
)

LONG_TERM_RESERVED_DESKS = frozenset(
    (
        "S1", "S2", "S3", "S4",
        "T5", "T6", "T7", "T8", "T9", "T10", "T11", "T12",
        "T13", "T14", "T15", "T16", "T17", "T18", "T19", "T20",
        "T43", "T44", "T45", "T46",
    )
)

_SEAT_COLUMNS = (
    "id",
    "name",
    "type",
    "has_monitor",
    "is_blocked",
    "is_long_term_reserved",
    "long_term_reserved_by",
    "long_term_reserved_until",
    "position_x",
    "position_y",
    "cluster_group",
    "metadata",
    "created_at",
    "updated_at",
)

_SEAT_MUTABLE_COLUMNS = frozenset(_SEAT_COLUMNS) - {"id", "created_at", "updated_at"}

_CLUSTER_MUTABLE_COLUMNS = frozenset(
    ("label", "position_x", "position_y", "rotation", "grid_cols", "grid_rows")
)

_BOOLEAN_COLUMNS = frozenset(("has_monitor", "is_blocked", "is_long_term_reserved", "is_active"))


class StorageConstraintViolation(Exception):
    """Raised when a write is rejected by a uniqueness or foreign-key constraint."""

    def __init__(self, message: str, constraint: str) -> None:
        self.constraint = constraint
        super().__init__(message)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _constraint_from_error(exc: sqlite3.IntegrityError) -> Optional[str]:
    message = str(exc)
    if "FOREIGN KEY constraint failed" in message:
        return SEAT_FOREIGN_KEY
    if "UNIQUE constraint failed" not in message:
        return None
    if "Bookings.seat_id" in message:
        return ACTIVE_SLOT_INDEX
    if "Seats.name" in message:
        return "Seats.name"
    if "Seats.id" in message:
        return "Seats.id"
    if "Clusters.id" in message:
        return "Clusters.id"
    return message.split(":", 1)[-1].strip()


def _to_storage(column: str, value: Any) -> Any:
    if column == "metadata":
        return json.dumps(value or {}, sort_keys=True)
    if column in _BOOLEAN_COLUMNS:
        return 1 if value else 0
    return value


def _row_to_seat(row: sqlite3.Row) -> Seat:
    return Seat(
        id=str(row["id"]),
        name=str(row["name"]),
        type=str(row["type"]),
        has_monitor=bool(row["has_monitor"]),
        is_blocked=bool(row["is_blocked"]),
        is_long_term_reserved=bool(row["is_long_term_reserved"]),
        long_term_reserved_by=row["long_term_reserved_by"],
        long_term_reserved_until=row["long_term_reserved_until"],
        position_x=int(row["position_x"]),
        position_y=int(row["position_y"]),
        cluster_group=row["cluster_group"],
        metadata=json.loads(row["metadata"]) if row["metadata"] else {},
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_cluster(row: sqlite3.Row) -> Cluster:
    return Cluster(
        id=str(row["id"]),
        label=row["label"],
        position_x=int(row["position_x"]),
        position_y=int(row["position_y"]),
        rotation=int(row["rotation"]),
        grid_cols=int(row["grid_cols"]),
        grid_rows=int(row["grid_rows"]),
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_booking(row: sqlite3.Row) -> Booking:
    return Booking(
        id=str(row["id"]),
        seat_id=str(row["seat_id"]),
        user_id=str(row["user_id"]),
        user_name=row["user_name"],
        user_email=row["user_email"],
        date=str(row["date"]),
        slot=str(row["slot"]),
        created_at=str(row["created_at"]),
        cancelled_at=row["cancelled_at"],
    )


def _row_to_user_role(row: sqlite3.Row) -> UserRole:
    return UserRole(
        user_id=str(row["user_id"]),
        role=str(row["role"]),
        is_active=bool(row["is_active"]),
        created_at=row["created_at"],
    )


class DataRepository:
    """Encapsulates SQLite access so business logic stays storage-agnostic.

    Every call opens its own connection; the partial unique index on
    active bookings is what keeps concurrent writers honest.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()
        self._db_path = Path(self._settings.database_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def database_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        connection = sqlite3.connect(
            self._db_path,
            timeout=self._settings.database_timeout_seconds,
        )
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON;")
        return connection

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        """Yield a connection that commits on success and always closes."""
        connection = self._connect()
        try:
            with connection:
                yield connection
        finally:
            connection.close()

    def initialize_database(self) -> None:
        """Create all persistence artifacts before API startup."""
        try:
            with self._session() as conn:
                cursor = conn.cursor()

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Clusters (
                        id TEXT PRIMARY KEY,
                        label TEXT,
                        position_x INTEGER NOT NULL DEFAULT 0,
                        position_y INTEGER NOT NULL DEFAULT 0,
                        rotation INTEGER NOT NULL DEFAULT 0
                            CHECK (rotation IN (0, 90, 180, 270)),
                        grid_cols INTEGER NOT NULL DEFAULT 2 CHECK (grid_cols > 0),
                        grid_rows INTEGER NOT NULL DEFAULT 2 CHECK (grid_rows > 0),
                        created_at TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Seats (
                        id TEXT PRIMARY KEY,
                        name TEXT NOT NULL UNIQUE CHECK (length(name) <= 10),
                        type TEXT NOT NULL CHECK (type IN ('solo', 'team_cluster')),
                        has_monitor INTEGER NOT NULL DEFAULT 0,
                        is_blocked INTEGER NOT NULL DEFAULT 0,
                        is_long_term_reserved INTEGER NOT NULL DEFAULT 0,
                        long_term_reserved_by TEXT,
                        long_term_reserved_until TEXT,
                        position_x INTEGER NOT NULL DEFAULT 0,
                        position_y INTEGER NOT NULL DEFAULT 0,
                        cluster_group TEXT,
                        metadata TEXT NOT NULL DEFAULT '{}',
                        created_at TEXT NOT NULL,
                        updated_at TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS Bookings (
                        id TEXT PRIMARY KEY,
                        seat_id TEXT NOT NULL,
                        user_id TEXT NOT NULL,
                        user_name TEXT,
                        user_email TEXT,
                        date TEXT NOT NULL,
                        slot TEXT NOT NULL CHECK (slot IN ('AM', 'PM')),
                        created_at TEXT NOT NULL,
                        cancelled_at TEXT,
                        FOREIGN KEY (seat_id) REFERENCES Seats(id) ON DELETE CASCADE
                    );
                    """
                )

                cursor.execute(
                    """
                    CREATE TABLE IF NOT EXISTS UserRoles (
                        user_id TEXT PRIMARY KEY,
                        role TEXT NOT NULL DEFAULT 'employee'
                            CHECK (role IN ('employee', 'admin')),
                        is_active INTEGER NOT NULL DEFAULT 1,
                        created_at TEXT NOT NULL
                    );
                    """
                )

                cursor.execute(
                    f"""
                    CREATE UNIQUE INDEX IF NOT EXISTS {ACTIVE_SLOT_INDEX}
                    ON Bookings(seat_id, date, slot)
                    WHERE cancelled_at IS NULL;
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_bookings_date
                    ON Bookings(date, cancelled_at);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_bookings_user
                    ON Bookings(user_id, date);
                    """
                )
                cursor.execute(
                    """
                    CREATE INDEX IF NOT EXISTS idx_seats_cluster
                    ON Seats(cluster_group);
                    """
                )
            logger.info("Database initialized at %s", self._db_path)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Database initialization failed: {exc}") from exc

    def seed_floor_plan_if_empty(self) -> int:
        """Insert the office floor plan only when no seats exist yet."""
        try:
            with self._session() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) AS count FROM Seats;")
                seat_count = int(cursor.fetchone()["count"])
                if seat_count > 0:
                    logger.info("Found %s existing seats; skipping floor plan seed", seat_count)
                    return 0

                now = utc_now()
                holder = self._settings.default_long_term_holder
                rows = []
                for index, name in enumerate(SOLO_DESKS):
                    reserved = name in LONG_TERM_RESERVED_DESKS
                    rows.append(
                        (
                            f"seat-{name.lower()}",
                            name,
                            SEAT_TYPE_SOLO,
                            0,
                            int(reserved),
                            holder if reserved else None,
                            0,
                            index,
                            "solo",
                            now,
                            now,
                        )
                    )
                for name in TEAM_CLUSTER_DESKS:
                    reserved = name in LONG_TERM_RESERVED_DESKS
                    rows.append(
                        (
                            f"seat-{name.lower()}",
                            name,
                            SEAT_TYPE_TEAM_CLUSTER,
                            1,
                            int(reserved),
                            holder if reserved else None,
                            0,
                            0,
                            f"cluster-{int(name[1:]) // 8}",
                            now,
                            now,
                        )
                    )
                cursor.executemany(
                    """
                    INSERT INTO Seats (
                        id, name, type, has_monitor, is_long_term_reserved,
                        long_term_reserved_by, position_x, position_y,
                        cluster_group, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    rows,
                )
            logger.info(
                "Floor plan seeded with %s seats (%s long-term reserved)",
                len(rows),
                len(LONG_TERM_RESERVED_DESKS),
            )
            return len(rows)
        except sqlite3.Error as exc:
            raise RuntimeError(f"Floor plan seeding failed: {exc}") from exc

    # --- Seats ---

    def find_seat(self, seat_id: str) -> Optional[Seat]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM Seats WHERE id = ?;", (seat_id,)).fetchone()
            return _row_to_seat(row) if row is not None else None

    def find_seat_by_name(self, name: str) -> Optional[Seat]:
        with self._session() as conn:
            row = conn.execute("SELECT * FROM Seats WHERE name = ?;", (name,)).fetchone()
            return _row_to_seat(row) if row is not None else None

    def list_seats(self) -> List[Seat]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM Seats ORDER BY name ASC;").fetchall()
            return [_row_to_seat(row) for row in rows]

    def list_seats_in_cluster(self, cluster_id: str) -> List[Seat]:
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT * FROM Seats
                WHERE cluster_group = ?
                ORDER BY position_y ASC, position_x ASC;
                """,
                (cluster_id,),
            ).fetchall()
            return [_row_to_seat(row) for row in rows]

    def insert_seat(self, seat: Seat) -> Seat:
        now = utc_now()
        values = {
            column: _to_storage(column, getattr(seat, column))
            for column in _SEAT_COLUMNS
            if column not in {"created_at", "updated_at"}
        }
        values["created_at"] = now
        values["updated_at"] = now
        columns = ", ".join(values)
        placeholders = ", ".join("?" for _ in values)
        try:
            with self._session() as conn:
                conn.execute(
                    f"INSERT INTO Seats ({columns}) VALUES ({placeholders});",
                    tuple(values.values()),
                )
        except sqlite3.IntegrityError as exc:
            constraint = _constraint_from_error(exc)
            if constraint is None:
                raise
            raise StorageConstraintViolation(str(exc), constraint) from exc
        created = self.find_seat(seat.id)
        if created is None:  # pragma: no cover - insert just succeeded
            raise RuntimeError(f"Seat {seat.id} vanished after insert")
        return created

    def update_seat(self, seat_id: str, updates: Mapping[str, Any]) -> Optional[Seat]:
        """Apply a partial update; unknown columns are rejected."""
        unknown = set(updates) - _SEAT_MUTABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported seat columns: {sorted(unknown)}")
        assignments = {column: _to_storage(column, value) for column, value in updates.items()}
        assignments["updated_at"] = utc_now()
        set_clause = ", ".join(f"{column} = ?" for column in assignments)
        try:
            with self._session() as conn:
                cursor = conn.execute(
                    f"UPDATE Seats SET {set_clause} WHERE id = ?;",
                    (*assignments.values(), seat_id),
                )
                if cursor.rowcount == 0:
                    return None
        except sqlite3.IntegrityError as exc:
            constraint = _constraint_from_error(exc)
            if constraint is None:
                raise
            raise StorageConstraintViolation(str(exc), constraint) from exc
        return self.find_seat(seat_id)

    def delete_seat(self, seat_id: str) -> Optional[int]:
        """Delete a seat and every booking referencing it in one transaction.

        Returns the number of removed bookings, or None if the seat is missing.
        """
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM Bookings WHERE seat_id = ?;", (seat_id,))
            removed_bookings = cursor.rowcount
            cursor.execute("DELETE FROM Seats WHERE id = ?;", (seat_id,))
            if cursor.rowcount == 0:
                conn.rollback()
                return None
            return removed_bookings

    # --- Clusters ---

    def find_cluster(self, cluster_id: str) -> Optional[Cluster]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM Clusters WHERE id = ?;",
                (cluster_id,),
            ).fetchone()
            return _row_to_cluster(row) if row is not None else None

    def list_clusters(self) -> List[Cluster]:
        with self._session() as conn:
            rows = conn.execute("SELECT * FROM Clusters ORDER BY id ASC;").fetchall()
            return [_row_to_cluster(row) for row in rows]

    def insert_cluster(self, cluster: Cluster) -> Cluster:
        now = utc_now()
        try:
            with self._session() as conn:
                conn.execute(
                    """
                    INSERT INTO Clusters (
                        id, label, position_x, position_y, rotation,
                        grid_cols, grid_rows, created_at, updated_at
                    )
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
                    """,
                    (
                        cluster.id,
                        cluster.label,
                        cluster.position_x,
                        cluster.position_y,
                        cluster.rotation,
                        cluster.grid_cols,
                        cluster.grid_rows,
                        now,
                        now,
                    ),
                )
        except sqlite3.IntegrityError as exc:
            constraint = _constraint_from_error(exc)
            if constraint is None:
                raise
            raise StorageConstraintViolation(str(exc), constraint) from exc
        created = self.find_cluster(cluster.id)
        if created is None:  # pragma: no cover - insert just succeeded
            raise RuntimeError(f"Cluster {cluster.id} vanished after insert")
        return created

    def update_cluster(self, cluster_id: str, updates: Mapping[str, Any]) -> Optional[Cluster]:
        unknown = set(updates) - _CLUSTER_MUTABLE_COLUMNS
        if unknown:
            raise ValueError(f"Unsupported cluster columns: {sorted(unknown)}")
        assignments = dict(updates)
        assignments["updated_at"] = utc_now()
        set_clause = ", ".join(f"{column} = ?" for column in assignments)
        with self._session() as conn:
            cursor = conn.execute(
                f"UPDATE Clusters SET {set_clause} WHERE id = ?;",
                (*assignments.values(), cluster_id),
            )
            if cursor.rowcount == 0:
                return None
        return self.find_cluster(cluster_id)

    def delete_cluster(self, cluster_id: str) -> Optional[int]:
        """Delete a cluster and detach its seats; returns detached seat count."""
        with self._session() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "UPDATE Seats SET cluster_group = NULL, updated_at = ? WHERE cluster_group = ?;",
                (utc_now(), cluster_id),
            )
            detached = cursor.rowcount
            cursor.execute("DELETE FROM Clusters WHERE id = ?;", (cluster_id,))
            if cursor.rowcount == 0:
                conn.rollback()
                return None
            return detached

    # --- Bookings ---

    def find_booking(self, booking_id: str) -> Optional[Booking]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM Bookings WHERE id = ?;",
                (booking_id,),
            ).fetchone()
            return _row_to_booking(row) if row is not None else None

    def find_active_bookings(self, seat_id: str, date: str) -> List[Booking]:
        """Return non-cancelled bookings for one seat on one date."""
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT * FROM Bookings
                WHERE seat_id = ?
                  AND date = ?
                  AND cancelled_at IS NULL
                ORDER BY slot ASC;
                """,
                (seat_id, date),
            ).fetchall()
            return [_row_to_booking(row) for row in rows]

    def find_active_bookings_for_date(self, date: str) -> List[Booking]:
        """Return non-cancelled bookings across all seats for one date."""
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT * FROM Bookings
                WHERE date = ?
                  AND cancelled_at IS NULL
                ORDER BY seat_id ASC, slot ASC;
                """,
                (date,),
            ).fetchall()
            return [_row_to_booking(row) for row in rows]

    def list_bookings(self) -> List[Booking]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM Bookings ORDER BY date ASC, created_at ASC;"
            ).fetchall()
            return [_row_to_booking(row) for row in rows]

    def list_bookings_for_user(self, user_id: str) -> List[Booking]:
        with self._session() as conn:
            rows = conn.execute(
                """
                SELECT * FROM Bookings
                WHERE user_id = ?
                ORDER BY date ASC, slot ASC;
                """,
                (user_id,),
            ).fetchall()
            return [_row_to_booking(row) for row in rows]

    def insert_booking(self, record: NewBooking) -> Booking:
        """Insert one active booking.

        Raises StorageConstraintViolation when another active booking already
        holds the same seat, date and slot, or when the seat no longer exists.
        """
        booking = Booking(
            id=uuid4().hex,
            seat_id=record.seat_id,
            user_id=record.user_id,
            user_name=record.user_name,
            user_email=record.user_email,
            date=record.date,
            slot=record.slot,
            created_at=utc_now(),
        )
        try:
            with self._session() as conn:
                self._insert_booking_row(conn, booking)
        except sqlite3.IntegrityError as exc:
            constraint = _constraint_from_error(exc)
            if constraint is None:
                raise
            raise StorageConstraintViolation(str(exc), constraint) from exc
        return booking

    def insert_bookings(
        self,
        records: Sequence[NewBooking],
    ) -> tuple[List[Booking], List[tuple[NewBooking, str]]]:
        """Insert a batch of bookings inside one transaction.

        Rows rejected by the active-slot index or by a missing seat are skipped
        and returned with the violated constraint as the second element; any
        other storage error rolls back the whole batch.
        """
        if not records:
            return [], []
        created_at = utc_now()
        inserted: List[Booking] = []
        rejected: List[tuple[NewBooking, str]] = []
        with self._session() as conn:
            for record in records:
                booking = Booking(
                    id=uuid4().hex,
                    seat_id=record.seat_id,
                    user_id=record.user_id,
                    user_name=record.user_name,
                    user_email=record.user_email,
                    date=record.date,
                    slot=record.slot,
                    created_at=created_at,
                )
                try:
                    self._insert_booking_row(conn, booking)
                except sqlite3.IntegrityError as exc:
                    constraint = _constraint_from_error(exc)
                    if constraint not in (ACTIVE_SLOT_INDEX, SEAT_FOREIGN_KEY):
                        raise
                    rejected.append((record, constraint))
                    continue
                inserted.append(booking)
        return inserted, rejected

    @staticmethod
    def _insert_booking_row(conn: sqlite3.Connection, booking: Booking) -> None:
        conn.execute(
            """
            INSERT INTO Bookings (
                id, seat_id, user_id, user_name, user_email,
                date, slot, created_at, cancelled_at
            )
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, NULL);
            """,
            (
                booking.id,
                booking.seat_id,
                booking.user_id,
                booking.user_name,
                booking.user_email,
                booking.date,
                booking.slot,
                booking.created_at,
            ),
        )

    def mark_booking_cancelled(self, booking_id: str, cancelled_at: str) -> Optional[Booking]:
        """Set cancelled_at once; an already-cancelled row keeps its timestamp."""
        with self._session() as conn:
            conn.execute(
                """
                UPDATE Bookings
                SET cancelled_at = ?
                WHERE id = ? AND cancelled_at IS NULL;
                """,
                (cancelled_at, booking_id),
            )
            row = conn.execute(
                "SELECT * FROM Bookings WHERE id = ?;",
                (booking_id,),
            ).fetchone()
            return _row_to_booking(row) if row is not None else None

    def count_bookings(self, active_only: bool = False) -> int:
        query = "SELECT COUNT(*) AS count FROM Bookings"
        if active_only:
            query += " WHERE cancelled_at IS NULL"
        with self._session() as conn:
            return int(conn.execute(query + ";").fetchone()["count"])

    # --- User roles ---

    def find_user_role(self, user_id: str) -> Optional[UserRole]:
        with self._session() as conn:
            row = conn.execute(
                "SELECT * FROM UserRoles WHERE user_id = ?;",
                (user_id,),
            ).fetchone()
            return _row_to_user_role(row) if row is not None else None

    def ensure_user_role(self, user_id: str) -> UserRole:
        """Return the user's role row, creating the default one if missing."""
        with self._session() as conn:
            conn.execute(
                """
                INSERT OR IGNORE INTO UserRoles (user_id, role, is_active, created_at)
                VALUES (?, ?, 1, ?);
                """,
                (user_id, ROLE_EMPLOYEE, utc_now()),
            )
            row = conn.execute(
                "SELECT * FROM UserRoles WHERE user_id = ?;",
                (user_id,),
            ).fetchone()
            return _row_to_user_role(row)

    def list_user_roles(self) -> List[UserRole]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM UserRoles ORDER BY created_at ASC, user_id ASC;"
            ).fetchall()
            return [_row_to_user_role(row) for row in rows]

    def update_user_role(self, user_id: str, updates: Mapping[str, Any]) -> Optional[UserRole]:
        unknown = set(updates) - {"role", "is_active"}
        if unknown:
            raise ValueError(f"Unsupported user role columns: {sorted(unknown)}")
        if not updates:
            return self.find_user_role(user_id)
        assignments = {column: _to_storage(column, value) for column, value in updates.items()}
        set_clause = ", ".join(f"{column} = ?" for column in assignments)
        with self._session() as conn:
            cursor = conn.execute(
                f"UPDATE UserRoles SET {set_clause} WHERE user_id = ?;",
                (*assignments.values(), user_id),
            )
            if cursor.rowcount == 0:
                return None
        return self.find_user_role(user_id)

    def delete_user_role(self, user_id: str) -> bool:
        with self._session() as conn:
            cursor = conn.execute("DELETE FROM UserRoles WHERE user_id = ?;", (user_id,))
            return cursor.rowcount > 0
