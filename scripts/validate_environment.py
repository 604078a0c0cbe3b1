#!/usr/bin/env python3
"""Validate local hot-desk service environment readiness."""

from __future__ import annotations

import importlib
import shutil
import sqlite3
import sys
import tempfile
from dataclasses import replace
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from backend.domain.errors import SlotTakenError
from backend.domain.models import UserContext
from backend.repository.data_repository import LONG_TERM_RESERVED_DESKS, DataRepository
from backend.services.booking_service import BookingService
from backend.services.cancellation_service import CancellationService
from backend.utils.config import get_settings

SEPARATOR_LINE = "=" * 44
EXPECTED_SEATS = 80


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def main() -> int:
    results: list[str] = []
    all_passed = True
    temp_dir = tempfile.mkdtemp(prefix="hotdesk-env-")

    # CHECK 1: Python version >= 3.11
    if sys.version_info >= (3, 11):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.11",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Required packages importable
    package_specs = [
        ("fastapi", "fastapi"),
        ("uvicorn", "uvicorn"),
        ("pydantic", "pydantic"),
        ("pandas", "pandas"),
        ("requests", "requests"),
        ("streamlit", "streamlit"),
        ("httpx", "httpx"),
        ("pytest", "pytest"),
    ]
    import_errors: list[str] = []
    from importlib.metadata import version

    for module_name, dist_name in package_specs:
        try:
            importlib.import_module(module_name)
            version(dist_name)
        except Exception as exc:  # pragma: no cover - runtime guard
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        ok, line = _print_result(
            "Required packages",
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    else:
        ok, line = _print_result("Required packages: all importable", True)
    results.append(line)
    all_passed = all_passed and ok

    try:
        temp_db_path = Path(temp_dir) / "hotdesk_validation.db"
        validation_settings = replace(get_settings(), database_path=temp_db_path)
        repository = DataRepository(validation_settings)

        # CHECK 3: Database initialization
        try:
            repository.initialize_database()
            ok, line = _print_result("Database initialization", True)
        except Exception as exc:
            ok, line = _print_result("Database initialization", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 4: Floor plan seeding
        try:
            seeded = repository.seed_floor_plan_if_empty()
            with sqlite3.connect(temp_db_path) as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT COUNT(*) FROM Seats WHERE is_long_term_reserved = 1;")
                reserved = int(cursor.fetchone()[0])
            if seeded != EXPECTED_SEATS:
                raise RuntimeError(f"expected {EXPECTED_SEATS} seats, got {seeded}")
            if reserved != len(LONG_TERM_RESERVED_DESKS):
                raise RuntimeError(
                    f"expected {len(LONG_TERM_RESERVED_DESKS)} long-term seats, got {reserved}"
                )
            ok, line = _print_result(
                "Floor plan",
                True,
                f": {seeded} seats, {reserved} long-term reserved",
            )
        except Exception as exc:
            ok, line = _print_result("Floor plan", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

        # CHECK 5: Booking round trip
        booking_service = BookingService(repository=repository, settings=validation_settings)
        cancellation_service = CancellationService(
            repository=repository,
            settings=validation_settings,
        )
        user = UserContext(user_id="env-check", user_name="Environment Check")
        try:
            booking = booking_service.create_booking("seat-t21", user, "2030-01-07", "AM")
            try:
                booking_service.create_booking("seat-t21", user, "2030-01-07", "AM")
                raise RuntimeError("duplicate booking was accepted")
            except SlotTakenError:
                pass
            cancellation_service.cancel_booking(booking.id, user.user_id, "employee")
            booking_service.create_booking("seat-t21", user, "2030-01-07", "AM")
            ok, line = _print_result("Booking round trip", True)
        except Exception as exc:
            ok, line = _print_result("Booking round trip", False, str(exc))
        results.append(line)
        all_passed = all_passed and ok

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

    print(SEPARATOR_LINE)
    print(" Hot-Desk Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
