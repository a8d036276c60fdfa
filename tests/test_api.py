"""Tests for API routes."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError

from vakit_period import __version__
from vakit_period.api.app import create_app
from vakit_period.api.schemas import LocationSchema, SettingsUpdateSchema
from vakit_period.config import AppConfig
from vakit_period.domain.models import PrayerName


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    """Config writing settings into a temporary directory."""
    return AppConfig(settings_path=tmp_path / "settings.json")


@pytest.fixture
def client(config: AppConfig) -> Iterator[TestClient]:
    """Client with the full lifespan running."""
    with TestClient(create_app(config)) as test_client:
        yield test_client


class TestHealthEndpoint:
    """Health check endpoint tests."""

    def test_health_check(self, client: TestClient) -> None:
        """Test health check returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": __version__}

    def test_not_ready_without_lifespan(self, config: AppConfig) -> None:
        """Test routes report unavailable before startup."""
        client = TestClient(create_app(config))
        response = client.get("/api/period")
        assert response.status_code == 503


class TestStatusEndpoint:
    """Status endpoint tests."""

    def test_status(self, client: TestClient, config: AppConfig) -> None:
        """Test the scheduler is running with its tasks."""
        response = client.get("/api/status")
        assert response.status_code == 200
        data = response.json()
        assert data["version"] == __version__
        assert data["scheduler_running"] is True
        assert "day_rollover" in data["pending_tasks"]
        assert "recalculation" in data["pending_tasks"]
        assert data["last_rollover_date"] is not None
        assert data["timezone"] in ("Europe/Istanbul", "Asia/Istanbul")
        assert data["settings_path"] == str(config.settings_path)


class TestPeriodEndpoints:
    """Period endpoint tests."""

    def test_get_period(self, client: TestClient) -> None:
        """Test the current snapshot is served."""
        response = client.get("/api/period")
        assert response.status_code == 200
        data = response.json()
        assert data["state"] in ("before_fajr", "in_progress", "between_prayers", "after_isha")
        assert 0.0 <= data["progress"] <= 1.0
        assert data["urgency"] in ("relaxed", "normal", "elevated", "urgent", "critical")
        assert data["incomplete"] is False
        assert data["current_date"]

    def test_recalculate(self, client: TestClient) -> None:
        """Test forced recalculation returns a fresh snapshot."""
        before = client.get("/api/period").json()
        response = client.post("/api/period/recalculate")
        assert response.status_code == 200
        assert response.json()["calculated_at"] >= before["calculated_at"]

    def test_refresh(self, client: TestClient) -> None:
        """Test refresh reloads times."""
        response = client.post("/api/period/refresh")
        assert response.status_code == 200
        assert response.json()["success"] is True


class TestTimesEndpoint:
    """Prayer times endpoint tests."""

    def test_today(self, client: TestClient) -> None:
        """Test today's five prayers are listed."""
        response = client.get("/api/times")
        assert response.status_code == 200
        days = response.json()
        assert len(days) == 1
        assert [p["name"] for p in days[0]["prayers"]] == [p.value for p in PrayerName]
        assert "midnight" in days[0]["special_times"]

    def test_week(self, client: TestClient) -> None:
        """Test several days."""
        response = client.get("/api/times", params={"days": 7})
        assert len(response.json()) == 7

    def test_days_bounds(self, client: TestClient) -> None:
        """Test invalid day counts are rejected."""
        assert client.get("/api/times", params={"days": 0}).status_code == 422


class TestSettingsEndpoints:
    """Settings endpoint tests."""

    def test_get_defaults(self, client: TestClient) -> None:
        """Test default settings."""
        data = client.get("/api/settings").json()
        assert data["location"]["city"] == "İstanbul"
        assert data["enabled_prayers"] == [p.value for p in PrayerName]

    def test_partial_update(self, client: TestClient, config: AppConfig) -> None:
        """Test updating a subset of settings persists and reloads."""
        response = client.put(
            "/api/settings",
            json={"pre_alert_minutes": 10, "enabled_prayers": ["fajr", "isha"]},
        )
        assert response.status_code == 200

        data = client.get("/api/settings").json()
        assert data["pre_alert_minutes"] == 10
        assert data["enabled_prayers"] == ["fajr", "isha"]
        assert data["location"]["city"] == "İstanbul"
        assert config.settings_path.exists()

    def test_location_update(self, client: TestClient) -> None:
        """Test moving to another city changes the timezone."""
        response = client.put(
            "/api/settings",
            json={"location": {"latitude": 51.5074, "longitude": -0.1278, "city": "London"}},
        )
        assert response.status_code == 200
        assert client.get("/api/status").json()["timezone"] == "Europe/London"

    def test_invalid_update(self, client: TestClient) -> None:
        """Test out of range values are rejected."""
        response = client.put("/api/settings", json={"pre_alert_minutes": 120})
        assert response.status_code == 422


class TestSchedulerJobs:
    """Notification job listing."""

    def test_jobs_listed(self, client: TestClient) -> None:
        """Test each job belongs to a prayer."""
        response = client.get("/api/scheduler/jobs")
        assert response.status_code == 200
        for job in response.json():
            assert job["prayer"] in [p.value for p in PrayerName]


class TestPrayersEndpoint:
    """Prayer names endpoint."""

    def test_prayer_names(self, client: TestClient) -> None:
        """Test the five prayers are listed in order."""
        data = client.get("/api/prayers").json()
        assert [item["value"] for item in data] == [p.value for p in PrayerName]
        assert data[0]["display_name"] == "Sabah"


class TestApiSchemas:
    """Test API schema validation."""

    def test_location_schema_validation(self) -> None:
        """Test location schema validates correctly."""
        loc = LocationSchema(latitude=41.0, longitude=29.0, city="İstanbul")
        assert loc.latitude == 41.0

    def test_location_schema_invalid_latitude(self) -> None:
        """Test invalid latitude is rejected."""
        with pytest.raises(ValidationError):
            LocationSchema(latitude=100.0, longitude=29.0)

    def test_update_schema_is_partial(self) -> None:
        """Test every update field is optional."""
        update = SettingsUpdateSchema()
        assert update.location is None
        assert update.pre_alert_minutes is None
