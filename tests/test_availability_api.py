"""Postal code, availability, booking and rules endpoint tests."""

from datetime import datetime
from decimal import Decimal
from pathlib import Path

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from delivery_scheduler.api.v1 import deps
from delivery_scheduler.db import session as db_session
from delivery_scheduler.db.base import Base
from delivery_scheduler.main import app

FIXED_NOW = datetime(2026, 10, 18, 12, 0)


def _build_test_engine(db_file: Path) -> Engine:
    return create_engine(
        f"sqlite:///{db_file}",
        connect_args={"check_same_thread": False},
    )


def _use_test_database(tmp_path: Path, monkeypatch, name: str) -> sessionmaker:
    engine = _build_test_engine(tmp_path / name)
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    monkeypatch.setattr(db_session, "engine", engine)
    monkeypatch.setattr(db_session, "SessionLocal", testing_session_local)
    monkeypatch.setattr(deps, "current_local_datetime", lambda: FIXED_NOW)
    return testing_session_local


def test_health(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "health.db")

    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_validate_postal_code(tmp_path: Path, monkeypatch) -> None:
    """Known postal codes should resolve to their seeded delivery area."""
    _use_test_database(tmp_path, monkeypatch, "postal_validate.db")

    with TestClient(app) as client:
        response = client.post("/api/v1/postal-code/validate", json={"postalCode": "018956", "shopDomain": "x.myshopify.com"})

    assert response.status_code == 200
    body = response.json()
    assert body["postalCode"] == "018956"
    assert body["isValid"] is True
    assert body["deliveryArea"]["name"] == "Central Singapore"
    assert sorted(body["deliveryArea"]["postalCodePrefixes"]) == ["01", "02", "03", "04", "05", "06", "07", "08"]


def test_validate_postal_code_rejects_bad_format(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "postal_format.db")

    with TestClient(app) as client:
        response = client.post("/api/v1/postal-code/validate", json={"postalCode": "ABCDEF"})

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Invalid postal code format")


def test_validate_postal_code_unserved_area(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "postal_unserved.db")

    with TestClient(app) as client:
        response = client.post("/api/v1/postal-code/validate", json={"postalCode": "295555"})

    assert response.status_code == 200
    body = response.json()
    assert body["isValid"] is False
    assert body["error"] == "Sorry, we don't deliver to this area yet."
    assert body["suggestions"] == ["20", "21", "22"]


def test_autocomplete_postal_code(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "postal_autocomplete.db")

    with TestClient(app) as client:
        response = client.post("/api/v1/postal-code/autocomplete", json={"partialCode": "1", "limit": 3})

    assert response.status_code == 200
    suggestions = response.json()["suggestions"]
    assert [item["postalCode"] for item in suggestions] == ["10", "11", "12"]
    assert suggestions[0]["city"] == "Sembawang"
    assert suggestions[0]["deliveryArea"]["name"] == "North Singapore"


def test_availability_for_open_weekday(tmp_path: Path, monkeypatch) -> None:
    """Monday standard delivery should list both default windows with full quota."""
    _use_test_database(tmp_path, monkeypatch, "availability_open.db")

    with TestClient(app) as client:
        response = client.post(
            "/api/v1/availability",
            json={"date": "2026-10-19", "deliveryAreaId": 1, "deliveryType": "standard"},
        )

    assert response.status_code == 200
    body = response.json()
    assert body["available"] is True
    assert body["reason"] is None
    assert body["deliveryArea"]["id"] == 1
    slots = body["availableTimeslots"]
    assert [slot["id"] for slot in slots] == [1, 2]
    assert slots[0]["start"] == "09:00"
    assert slots[0]["end"] == "12:00"
    assert slots[0]["availableSlots"] == 10
    assert slots[0]["kind"] == "global"
    assert slots[0]["cutoffTime"].startswith("2026-10-19T08:00")


def test_availability_for_express(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "availability_express.db")

    with TestClient(app) as client:
        response = client.post("/api/v1/availability", json={"date": "2026-10-19", "deliveryType": "express"})

    body = response.json()
    assert body["available"] is True
    assert [slot["kind"] for slot in body["availableTimeslots"]] == ["express", "express"]
    assert Decimal(str(body["availableTimeslots"][0]["fee"])) == Decimal("15")


def test_availability_legacy_delivery_type_means_standard(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "availability_legacy.db")

    with TestClient(app) as client:
        response = client.post("/api/v1/availability", json={"date": "2026-10-19", "deliveryType": "delivery"})

    assert response.status_code == 200
    assert [slot["id"] for slot in response.json()["availableTimeslots"]] == [1, 2]


def test_availability_unknown_area_returns_404(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "availability_area.db")

    with TestClient(app) as client:
        response = client.post("/api/v1/availability", json={"date": "2026-10-19", "deliveryAreaId": 99})

    assert response.status_code == 404
    assert response.json() == {"detail": "Delivery area not found"}


def test_availability_outside_delivery_area(tmp_path: Path, monkeypatch) -> None:
    """Postal codes no area serves should make the date unavailable."""
    _use_test_database(tmp_path, monkeypatch, "availability_outside.db")

    with TestClient(app) as client:
        unserved = client.post("/api/v1/availability", json={"date": "2026-10-19", "postalCode": "998877"})
        mismatched = client.post(
            "/api/v1/availability",
            json={"date": "2026-10-19", "postalCode": "018956", "deliveryAreaId": 2},
        )

    assert unserved.status_code == 200
    assert unserved.json()["available"] is False
    assert unserved.json()["reason"]["code"] == "outside_delivery_area"
    assert mismatched.json()["reason"]["code"] == "outside_delivery_area"


def test_availability_rejects_malformed_postal_code(tmp_path: Path, monkeypatch) -> None:
    """Malformed postal codes should be refused before any availability check."""
    _use_test_database(tmp_path, monkeypatch, "availability_malformed.db")

    with TestClient(app) as client:
        response = client.post(
            "/api/v1/availability",
            json={"date": "2026-10-22", "productName": "Cake", "postalCode": "99x999"},
        )
        collection = client.post(
            "/api/v1/availability",
            json={"date": "2026-10-22", "deliveryType": "collection", "postalCode": "99x999"},
        )

    assert response.status_code == 400
    assert response.json()["detail"].startswith("Invalid postal code format")
    assert collection.status_code == 200


def test_availability_for_sunday_has_no_timeslots(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "availability_sunday.db")

    with TestClient(app) as client:
        response = client.post("/api/v1/availability", json={"date": "2026-10-25", "postalCode": "018956"})

    body = response.json()
    assert body["available"] is False
    assert body["reason"]["code"] == "no_timeslots"
    assert body["availableTimeslots"] == []


def test_available_dates_endpoint(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "availability_dates.db")

    with TestClient(app) as client:
        response = client.post(
            "/api/v1/availability/dates",
            json={"startDate": "2026-10-19", "endDate": "2026-10-25", "deliveryType": "standard"},
        )
        reversed_range = client.post(
            "/api/v1/availability/dates",
            json={"startDate": "2026-10-25", "endDate": "2026-10-19"},
        )

    assert response.status_code == 200
    assert response.json()["dates"] == [
        "2026-10-19",
        "2026-10-20",
        "2026-10-21",
        "2026-10-22",
        "2026-10-23",
        "2026-10-24",
    ]
    assert reversed_range.status_code == 400


def test_booking_consumes_quota_until_full(tmp_path: Path, monkeypatch) -> None:
    """Bookings should consume the overridden quota and then be refused."""
    _use_test_database(tmp_path, monkeypatch, "booking_flow.db")

    with TestClient(app) as client:
        override = client.put(
            "/api/v1/rules/blocked-timeslots",
            json=[
                {"id": 1, "date": "2026-10-19", "globalTimeslotId": 1, "blockType": "quota-override", "customQuota": 1},
            ],
        )
        first = client.post("/api/v1/bookings", json={"date": "2026-10-19", "deliveryType": "standard", "timeslotId": 1})
        second = client.post("/api/v1/bookings", json={"date": "2026-10-19", "deliveryType": "standard", "timeslotId": 1})
        availability = client.post("/api/v1/availability", json={"date": "2026-10-19"})

    assert override.status_code == 200
    assert first.status_code == 201
    assert first.json()["timeslot"]["id"] == 1
    assert first.json()["timeslot"]["availableSlots"] == 0
    assert second.status_code == 409
    assert [slot["id"] for slot in availability.json()["availableTimeslots"]] == [2]


def test_rules_snapshot_and_replace(tmp_path: Path, monkeypatch) -> None:
    """Replacing a rule collection should change availability immediately."""
    _use_test_database(tmp_path, monkeypatch, "rules_replace.db")

    with TestClient(app) as client:
        snapshot = client.get("/api/v1/rules")
        replaced = client.put(
            "/api/v1/rules/global-advance-rules",
            json=[{"id": 1, "name": "Two days", "globalAdvanceDays": 2, "appliesTo": "all"}],
        )
        availability = client.post("/api/v1/availability", json={"date": "2026-10-19"})

    assert snapshot.status_code == 200
    assert len(snapshot.json()["deliveryAreas"]) == 5
    assert len(snapshot.json()["dayAssignments"]) == 18
    assert replaced.status_code == 200
    assert replaced.json()["globalAdvanceRules"][0]["globalAdvanceDays"] == 2
    assert availability.json()["available"] is False
    assert availability.json()["reason"] == {"code": "advance_order", "message": "Requires 2 days advance notice"}


def test_rules_replace_rejects_bad_payloads(tmp_path: Path, monkeypatch) -> None:
    _use_test_database(tmp_path, monkeypatch, "rules_invalid.db")

    with TestClient(app) as client:
        unknown = client.put("/api/v1/rules/coupons", json=[])
        invalid = client.put(
            "/api/v1/rules/blocked-timeslots",
            json=[{"id": 1, "date": "2026-10-19", "globalTimeslotId": 1, "blockType": "quota-override"}],
        )
        overlapping = client.put(
            "/api/v1/rules/delivery-areas",
            json=[
                {"id": 1, "name": "A", "postalCodePrefixes": ["01"]},
                {"id": 2, "name": "B", "postalCodePrefixes": ["01"]},
            ],
        )
        snapshot = client.get("/api/v1/rules")

    assert unknown.status_code == 404
    assert invalid.status_code == 422
    assert overlapping.status_code == 400
    assert len(snapshot.json()["deliveryAreas"]) == 5
