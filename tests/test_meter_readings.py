"""Tests for the monthly meter reading store."""

from datetime import datetime
from decimal import Decimal

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient

from app.services.meter_reading import (
    check_floor,
    current_month,
    delete_month,
    get_all_readings,
    get_latest_floor_reading,
    get_latest_month,
    get_latest_readings,
    get_readings,
    month_sort_key,
    register_reading,
    to_floor_readings,
    upsert_reading,
)


@pytest.fixture
def two_months(test_db):
    """Readings for November and December 2025."""
    upsert_reading(test_db, "11/2025", 1, Decimal("1210.4"), Decimal("1304.3"))
    upsert_reading(test_db, "11/2025", 2, Decimal("1801.9"), Decimal("1927.2"))
    upsert_reading(test_db, "12/2025", 2, Decimal("1927.2"), Decimal("2050.0"))
    upsert_reading(test_db, "12/2025", 1, Decimal("1304.3"), Decimal("1400.0"))
    return test_db


class TestMonthLabels:
    """MM/YYYY helpers."""

    def test_current_month(self) -> None:
        assert current_month(datetime(2026, 3, 14)) == "03/2026"

    def test_sort_key_orders_by_year_first(self) -> None:
        months = ["12/2025", "01/2026", "02/2025"]
        assert sorted(months, key=month_sort_key) == ["02/2025", "12/2025", "01/2026"]


class TestCheckFloor:
    """Floor range validation."""

    def test_valid_floor(self) -> None:
        check_floor(3, floor_count=3)

    @pytest.mark.parametrize("floor", [0, 4, -1])
    def test_invalid_floor(self, floor: int) -> None:
        with pytest.raises(HTTPException) as exc_info:
            check_floor(floor, floor_count=3)
        assert exc_info.value.status_code == 400
        assert exc_info.value.detail == "Floor must be between 1 and 3"


class TestReadingStore:
    """Service level store operations."""

    def test_upsert_creates(self, test_db) -> None:
        reading = upsert_reading(test_db, "12/2025", 1, Decimal("100"), Decimal("150.5"))
        assert reading.id is not None
        assert reading.consumption == Decimal("50.5")

    def test_upsert_replaces_same_month_and_floor(self, test_db) -> None:
        first = upsert_reading(test_db, "12/2025", 1, Decimal("100"), Decimal("150"))
        first_created = first.created_at
        second = upsert_reading(test_db, "12/2025", 1, Decimal("100"), Decimal("175"))

        assert second.id == first.id
        assert second.end_reading == Decimal("175")
        assert second.created_at >= first_created
        assert len(get_readings(test_db, "12/2025")) == 1

    def test_get_readings_ordered_by_floor(self, two_months) -> None:
        assert [r.floor for r in get_readings(two_months, "12/2025")] == [1, 2]

    def test_get_readings_unknown_month(self, two_months) -> None:
        assert get_readings(two_months, "01/2020") == []

    def test_latest_month(self, two_months) -> None:
        upsert_reading(two_months, "02/2025", 1, Decimal("1"), Decimal("2"))
        assert get_latest_month(two_months) == "12/2025"

    def test_latest_month_empty(self, test_db) -> None:
        assert get_latest_month(test_db) is None
        assert get_latest_readings(test_db) == []

    def test_latest_readings(self, two_months) -> None:
        readings = get_latest_readings(two_months)
        assert {r.month for r in readings} == {"12/2025"}
        assert [r.floor for r in readings] == [1, 2]

    def test_latest_floor_reading(self, two_months) -> None:
        reading = get_latest_floor_reading(two_months, 2)
        assert reading is not None
        assert reading.month == "12/2025"
        assert get_latest_floor_reading(two_months, 3) is None

    def test_all_readings_newest_month_first(self, two_months) -> None:
        readings = get_all_readings(two_months)
        assert [(r.month, r.floor) for r in readings] == [
            ("12/2025", 1),
            ("12/2025", 2),
            ("11/2025", 1),
            ("11/2025", 2),
        ]

    def test_delete_month(self, two_months) -> None:
        assert delete_month(two_months, "11/2025") == 2
        assert get_readings(two_months, "11/2025") == []
        assert len(get_readings(two_months, "12/2025")) == 2

    def test_delete_unknown_month(self, two_months) -> None:
        assert delete_month(two_months, "01/2020") == 0

    def test_to_floor_readings(self, two_months) -> None:
        readings = to_floor_readings(get_readings(two_months, "12/2025"))
        assert readings[0].floor == 1
        assert readings[0].end_reading - readings[0].start_reading == Decimal("95.7")


class TestRegisterReading:
    """Registering an end reading derives the start reading."""

    def test_first_reading_has_zero_consumption(self, test_db) -> None:
        reading = register_reading(test_db, 1, Decimal("1587.3"), "12/2025")
        assert reading.start_reading == Decimal("1587.3")
        assert reading.consumption == 0

    def test_continues_from_previous_month(self, two_months) -> None:
        reading = register_reading(two_months, 1, Decimal("1490.0"), "01/2026")
        assert reading.start_reading == Decimal("1400.0")
        assert reading.consumption == Decimal("90.0")

    def test_resubmission_keeps_start(self, two_months) -> None:
        reading = register_reading(two_months, 1, Decimal("1410.0"), "12/2025")
        assert reading.start_reading == Decimal("1304.3")
        assert reading.end_reading == Decimal("1410.0")

    def test_skips_later_months(self, two_months) -> None:
        reading = register_reading(two_months, 2, Decimal("1950.0"), "11/2025")
        assert reading.start_reading == Decimal("1801.9")

    def test_defaults_to_current_month(self, test_db) -> None:
        reading = register_reading(test_db, 3, Decimal("10"))
        assert reading.month == current_month()

    def test_rejects_unknown_floor(self, test_db) -> None:
        with pytest.raises(HTTPException) as exc_info:
            register_reading(test_db, 9, Decimal("10"), "12/2025")
        assert exc_info.value.status_code == 400


class TestReadingRoutes:
    """/api/readings endpoints."""

    def test_upsert(self, client: TestClient) -> None:
        response = client.put(
            "/api/readings/",
            json={"month": "12/2025", "floor": 1, "start_reading": "100", "end_reading": "180.5"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["month"] == "12/2025"
        assert Decimal(data["consumption"]) == Decimal("80.5")

    def test_upsert_rejects_bad_month(self, client: TestClient) -> None:
        response = client.put(
            "/api/readings/",
            json={"month": "13/2025", "floor": 1, "start_reading": "1", "end_reading": "2"},
        )
        assert response.status_code == 422

    def test_upsert_rejects_end_below_start(self, client: TestClient) -> None:
        response = client.put(
            "/api/readings/",
            json={"month": "12/2025", "floor": 1, "start_reading": "10", "end_reading": "2"},
        )
        assert response.status_code == 422

    def test_upsert_rejects_floor_out_of_range(self, client: TestClient) -> None:
        response = client.put(
            "/api/readings/",
            json={"month": "12/2025", "floor": 4, "start_reading": "1", "end_reading": "2"},
        )
        assert response.status_code == 400

    def test_register(self, client: TestClient) -> None:
        client.put(
            "/api/readings/",
            json={"month": "11/2025", "floor": 2, "start_reading": "1801.9", "end_reading": "1927.2"},
        )
        response = client.post(
            "/api/readings/", json={"floor": 2, "reading": "2050.0", "month": "12/2025"}
        )
        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["start_reading"]) == Decimal("1927.2")
        assert Decimal(data["consumption"]) == Decimal("122.8")

    def test_latest_empty(self, client: TestClient) -> None:
        response = client.get("/api/readings/latest")
        assert response.status_code == 404
        assert response.json()["detail"] == "No meter readings stored"

    def test_latest(self, client: TestClient, two_months) -> None:
        response = client.get("/api/readings/latest")
        assert response.status_code == 200
        data = response.json()
        assert data["month"] == "12/2025"
        assert [r["floor"] for r in data["readings"]] == [1, 2]

    def test_list(self, client: TestClient, two_months) -> None:
        response = client.get("/api/readings/")
        assert response.status_code == 200
        assert [r["month"] for r in response.json()] == ["12/2025", "12/2025", "11/2025", "11/2025"]

    def test_floor_latest(self, client: TestClient, two_months) -> None:
        response = client.get("/api/readings/floor/1/latest")
        assert response.status_code == 200
        assert response.json()["month"] == "12/2025"

        response = client.get("/api/readings/floor/3/latest")
        assert response.status_code == 404

    def test_month(self, client: TestClient, two_months) -> None:
        response = client.get("/api/readings/month/11/2025")
        assert response.status_code == 200
        assert len(response.json()["readings"]) == 2

    def test_month_rejects_bad_path(self, client: TestClient) -> None:
        response = client.get("/api/readings/month/13/2025")
        assert response.status_code == 422

    def test_delete_month(self, client: TestClient, two_months) -> None:
        response = client.delete("/api/readings/month/11/2025")
        assert response.status_code == 200
        assert response.json() == {"month": "11/2025", "deleted": 2}
        assert client.get("/api/readings/month/11/2025").json()["readings"] == []
