from __future__ import annotations

from dataclasses import replace

from fastapi.testclient import TestClient

from app import create_app
from backend.utils.config import get_settings


ALICE = {"X-User-Id": "alice", "X-User-Name": "Alice", "X-User-Email": "alice@example.com"}
BOB = {"X-User-Id": "bob", "X-User-Name": "Bob"}
ADMIN = {"X-User-Id": "facilities"}


def _build_test_settings(tmp_path, filename: str, **overrides):
    get_settings.cache_clear()
    base = get_settings()
    fields = {
        "database_path": tmp_path / filename,
        "seed_floor_plan": True,
        "gateway_token": "",
        "bootstrap_admin_user_ids": ("facilities",),
    }
    fields.update(overrides)
    return replace(base, **fields)


def _client(tmp_path, **overrides) -> TestClient:
    app = create_app(_build_test_settings(tmp_path, "booking_api.db", **overrides))
    return TestClient(app)


def test_booking_lifecycle_over_http(tmp_path):
    with _client(tmp_path) as client:
        health = client.get("/health")
        assert health.status_code == 200

        seats = client.get("/api/seats").json()
        assert len(seats) == 80

        availability = client.get(
            "/api/availability",
            params={"seatId": "seat-t21", "date": "2030-03-04", "slot": "AM"},
        )
        assert availability.status_code == 200
        assert availability.json()["bookable"] is True

        created = client.post(
            "/api/bookings",
            json={"seatId": "seat-t21", "date": "2030-03-04", "slot": "AM"},
            headers=ALICE,
        )
        assert created.status_code == 201
        booking = created.json()
        assert booking["userName"] == "Alice"
        assert booking["cancelledAt"] is None

        fetched = client.get(f"/api/bookings/{booking['id']}", headers=BOB)
        assert fetched.json()["seatId"] == "seat-t21"
        assert client.get("/api/seats/by-name/T21").json()["id"] == "seat-t21"

        duplicate = client.post(
            "/api/bookings",
            json={"seatId": "seat-t21", "date": "2030-03-04", "slot": "AM"},
            headers=BOB,
        )
        assert duplicate.status_code == 409
        assert duplicate.json()["detail"] == "T21 on 2030-03-04 AM already booked"

        whos_in = client.get("/api/bookings/date/2030-03-04", headers=BOB)
        assert [item["id"] for item in whos_in.json()] == [booking["id"]]

        forbidden = client.delete(f"/api/bookings/{booking['id']}", headers=BOB)
        assert forbidden.status_code == 403

        cancelled = client.delete(f"/api/bookings/{booking['id']}", headers=ALICE)
        assert cancelled.status_code == 200
        assert cancelled.json()["cancelledAt"] is not None

        rebooked = client.post(
            "/api/bookings",
            json={"seatId": "seat-t21", "date": "2030-03-04", "slot": "AM"},
            headers=BOB,
        )
        assert rebooked.status_code == 201

        mine = client.get("/api/bookings/my", headers=ALICE).json()
        assert len(mine) == 1


def test_booking_rejections_map_to_status_codes(tmp_path):
    with _client(tmp_path) as client:
        missing = client.post(
            "/api/bookings",
            json={"seatId": "seat-nope", "date": "2030-03-04", "slot": "AM"},
            headers=ALICE,
        )
        assert missing.status_code == 404

        reserved = client.post(
            "/api/bookings",
            json={"seatId": "seat-s1", "date": "2030-03-04", "slot": "AM"},
            headers=ALICE,
        )
        assert reserved.status_code == 409
        assert reserved.json()["detail"] == "Seat S1 is reserved for long-term use"

        invalid = client.post(
            "/api/bookings",
            json={"seatId": "seat-t21", "date": "2030-03-04", "slot": "EVENING"},
            headers=ALICE,
        )
        assert invalid.status_code == 400
        body = invalid.json()
        assert body["message"] == "Invalid request data"
        assert body["errors"][0]["field"] == "slot"

        anonymous = client.post(
            "/api/bookings",
            json={"seatId": "seat-t21", "date": "2030-03-04", "slot": "AM"},
        )
        assert anonymous.status_code == 401


def test_bulk_booking_over_http(tmp_path):
    with _client(tmp_path) as client:
        blocked = client.patch(
            "/api/seats/seat-t22/block",
            json={"isBlocked": True},
            headers=ADMIN,
        )
        assert blocked.status_code == 200

        response = client.post(
            "/api/bookings/bulk",
            json={
                "seatIds": ["seat-t21", "seat-t22"],
                "dates": ["2030-03-04", "2030-03-05"],
                "slots": ["AM", "PM"],
            },
            headers=ALICE,
        )
        assert response.status_code == 201
        payload = response.json()
        assert payload["createdCount"] == 4
        assert payload["failedCount"] == 1
        assert payload["conflicts"] == ["Seat T22 is blocked"]

        nothing = client.post(
            "/api/bookings/bulk",
            json={"seatIds": ["seat-t21"], "dates": ["2030-03-04"], "slots": ["AM"]},
            headers=BOB,
        )
        assert nothing.status_code == 409
        body = nothing.json()
        assert "detail" not in body
        assert body["message"] == "No bookings could be created"
        assert body["conflicts"] == ["T21 on 2030-03-04 AM already booked"]

        empty = client.post(
            "/api/bookings/bulk",
            json={"seatIds": [], "dates": ["2030-03-04"], "slots": ["AM"]},
            headers=BOB,
        )
        assert empty.status_code == 400


def test_admin_routes_require_admin_role(tmp_path):
    with _client(tmp_path) as client:
        denied = client.post(
            "/api/seats",
            json={"id": "seat-x1", "name": "X1", "type": "solo"},
            headers=ALICE,
        )
        assert denied.status_code == 403

        created = client.post(
            "/api/seats",
            json={"id": "seat-x1", "name": "X1", "type": "solo"},
            headers=ADMIN,
        )
        assert created.status_code == 201

        duplicate = client.post(
            "/api/seats",
            json={"id": "seat-x1", "name": "X2", "type": "solo"},
            headers=ADMIN,
        )
        assert duplicate.status_code == 409

        client.post(
            "/api/bookings",
            json={"seatId": "seat-x1", "date": "2030-03-04", "slot": "PM"},
            headers=ALICE,
        )
        deleted = client.delete("/api/seats/seat-x1", headers=ADMIN)
        assert deleted.status_code == 200
        assert deleted.json()["removedBookings"] == 1

        role = client.get("/api/user/role", headers=ADMIN)
        assert role.json()["role"] == "admin"

        deactivated = client.patch(
            "/api/users/alice/status",
            json={"isActive": False},
            headers=ADMIN,
        )
        assert deactivated.status_code == 200

        locked_out = client.post(
            "/api/bookings",
            json={"seatId": "seat-t21", "date": "2030-03-04", "slot": "AM"},
            headers=ALICE,
        )
        assert locked_out.status_code == 403

        self_demote = client.patch(
            "/api/users/facilities/role",
            json={"role": "employee"},
            headers=ADMIN,
        )
        assert self_demote.status_code == 400

        null_active = client.patch(
            "/api/users/facilities/role",
            json={"isActive": None},
            headers=ADMIN,
        )
        assert null_active.status_code == 400
        still_admin = client.get("/api/user/role", headers=ADMIN)
        assert still_admin.status_code == 200
        assert still_admin.json()["isActive"] is True


def test_seat_patch_rejects_null_for_required_fields(tmp_path):
    with _client(tmp_path) as client:
        for field in ("positionX", "isBlocked", "isLongTermReserved", "type"):
            response = client.patch(
                "/api/seats/seat-t21",
                json={field: None},
                headers=ADMIN,
            )
            assert response.status_code == 400, field
            assert "cannot be null" in response.json()["detail"]

        seat = client.get("/api/seats/seat-t21").json()
        assert seat["isBlocked"] is False
        assert seat["isLongTermReserved"] is False
        assert seat["type"] == "team_cluster"


def test_gateway_token_is_enforced_when_configured(tmp_path):
    with _client(tmp_path, gateway_token="gateway-secret") as client:
        missing = client.get("/api/bookings/my", headers=ALICE)
        assert missing.status_code == 401

        wrong = client.get(
            "/api/bookings/my",
            headers={**ALICE, "Authorization": "Bearer nope"},
        )
        assert wrong.status_code == 401

        ok = client.get(
            "/api/bookings/my",
            headers={**ALICE, "Authorization": "Bearer gateway-secret"},
        )
        assert ok.status_code == 200
        assert ok.json() == []
