"""Tests for notification scheduling."""

import asyncio
from collections.abc import Callable
from datetime import date, datetime, timedelta

import pytest
from conftest import FakeScheduler, at, make_day

from vakit_period.domain.events import (
    DomainEvent,
    PrayerTimeReachedEvent,
    PreAlertEvent,
    UrgentDeadlineEvent,
)
from vakit_period.domain.exceptions import NotificationRescheduleError
from vakit_period.domain.models import DailyPrayerTimes, Location, PrayerName, PrayerSettings
from vakit_period.infrastructure.event_bus import InMemoryEventBus
from vakit_period.services.notification_service import NotificationService

DAY = date(2024, 3, 10)


class BrokenScheduler(FakeScheduler):
    """Scheduler that refuses new jobs."""

    def schedule_at(self, run_time: datetime, callback: Callable[[], None], job_id: str) -> None:
        raise RuntimeError("zamanlayıcı kapalı")


@pytest.fixture
def settings() -> PrayerSettings:
    """Default settings."""
    return PrayerSettings(location=Location(latitude=41.0, longitude=29.0, city="İstanbul"))


@pytest.fixture
def times() -> DailyPrayerTimes:
    """Reference day."""
    return make_day(DAY)


@pytest.fixture
def scheduler() -> FakeScheduler:
    """In-memory scheduler."""
    return FakeScheduler()


@pytest.fixture
def events() -> list[DomainEvent]:
    """Collected events."""
    return []


@pytest.fixture
def event_bus(events: list[DomainEvent]) -> InMemoryEventBus:
    """Event bus recording every event."""
    bus = InMemoryEventBus()
    bus.subscribe(DomainEvent, events.append)
    return bus


def make_service(
    scheduler: FakeScheduler,
    settings: PrayerSettings,
    event_bus: InMemoryEventBus | None = None,
    now: datetime | None = None,
) -> NotificationService:
    moment = now or at(DAY, 9, 0)
    return NotificationService(scheduler, settings, event_bus, clock=lambda: moment)


class TestScheduleDay:
    """Daily planning."""

    def test_skips_past_prayers(
        self, scheduler: FakeScheduler, settings: PrayerSettings, times: DailyPrayerTimes
    ) -> None:
        """Test only future prayers and deadlines are planned."""
        service = make_service(scheduler, settings)
        count = service.schedule_day(times)

        assert count == 8
        assert service.scheduled_count == 8
        assert "prayer_fajr_20240310" not in scheduler.jobs
        assert "prayer_fajr_20240310_urgent" not in scheduler.jobs
        assert scheduler.jobs["prayer_dhuhr_20240310"][0] == times.dhuhr
        assert scheduler.jobs["prayer_dhuhr_20240310_urgent"][0] == at(DAY, 15, 15)
        assert scheduler.jobs["prayer_isha_20240310_urgent"][0] == at(DAY, 23, 30)

    def test_pre_alerts(
        self, scheduler: FakeScheduler, settings: PrayerSettings, times: DailyPrayerTimes
    ) -> None:
        """Test pre-alerts are added before each future prayer."""
        settings.pre_alert_minutes = 15
        service = make_service(scheduler, settings)

        assert service.schedule_day(times) == 12
        assert scheduler.jobs["prayer_asr_20240310_pre"][0] == at(DAY, 15, 30)

    def test_disabled_prayers_skipped(
        self, scheduler: FakeScheduler, settings: PrayerSettings, times: DailyPrayerTimes
    ) -> None:
        """Test only enabled prayers are planned."""
        settings.enabled_prayers = {PrayerName.FAJR}
        service = make_service(scheduler, settings, now=at(DAY, 3, 0))

        assert service.schedule_day(times) == 2
        assert set(scheduler.jobs) == {"prayer_fajr_20240310", "prayer_fajr_20240310_urgent"}

    def test_urgent_alerts_can_be_disabled(
        self, scheduler: FakeScheduler, settings: PrayerSettings, times: DailyPrayerTimes
    ) -> None:
        """Test urgent deadline jobs follow the setting."""
        settings.urgent_alerts = False
        service = make_service(scheduler, settings)

        assert service.schedule_day(times) == 4
        assert not any(job_id.endswith("_urgent") for job_id in scheduler.jobs)

    def test_job_ids(self, settings: PrayerSettings) -> None:
        """Test job id format."""
        service = make_service(FakeScheduler(), settings)
        assert service._make_job_id(PrayerName.ASR, DAY) == "prayer_asr_20240310"
        assert service._make_job_id(PrayerName.ASR, DAY, "pre") == "prayer_asr_20240310_pre"


class TestCallbacks:
    """Events published when jobs fire."""

    def test_prayer_time_reached(
        self,
        scheduler: FakeScheduler,
        settings: PrayerSettings,
        times: DailyPrayerTimes,
        event_bus: InMemoryEventBus,
        events: list[DomainEvent],
    ) -> None:
        """Test firing a prayer job publishes the prayer time."""
        make_service(scheduler, settings, event_bus).schedule_day(times)
        scheduler.fire("prayer_asr_20240310")

        assert len(events) == 1
        event = events[0]
        assert isinstance(event, PrayerTimeReachedEvent)
        assert event.prayer_time.name is PrayerName.ASR

    def test_pre_alert(
        self,
        scheduler: FakeScheduler,
        settings: PrayerSettings,
        times: DailyPrayerTimes,
        event_bus: InMemoryEventBus,
        events: list[DomainEvent],
    ) -> None:
        """Test pre-alert carries the lead time."""
        settings.pre_alert_minutes = 10
        make_service(scheduler, settings, event_bus).schedule_day(times)
        scheduler.fire("prayer_maghrib_20240310_pre")

        event = events[0]
        assert isinstance(event, PreAlertEvent)
        assert event.minutes_before == 10

    def test_urgent_isha_mentions_midnight(
        self,
        scheduler: FakeScheduler,
        settings: PrayerSettings,
        times: DailyPrayerTimes,
        event_bus: InMemoryEventBus,
        events: list[DomainEvent],
    ) -> None:
        """Test isha's deadline is islamic midnight."""
        make_service(scheduler, settings, event_bus).schedule_day(times)
        scheduler.fire("prayer_isha_20240310_urgent")

        event = events[0]
        assert isinstance(event, UrgentDeadlineEvent)
        assert event.prayer is PrayerName.ISHA
        assert event.is_midnight
        assert event.deadline == times.midnight

    def test_without_event_bus(
        self, scheduler: FakeScheduler, settings: PrayerSettings, times: DailyPrayerTimes
    ) -> None:
        """Test callbacks work without a bus."""
        make_service(scheduler, settings).schedule_day(times)
        scheduler.fire("prayer_dhuhr_20240310")


class TestReschedule:
    """Rescheduling through the port."""

    def test_replaces_previous_jobs(
        self, scheduler: FakeScheduler, settings: PrayerSettings, times: DailyPrayerTimes
    ) -> None:
        """Test old jobs are cleared before planning."""
        scheduler.schedule_at(at(DAY, 10, 0), lambda: None, "stale")
        service = make_service(scheduler, settings)

        count = asyncio.run(service.reschedule_notifications(times))

        assert count == 8
        assert "stale" not in scheduler.jobs
        assert len(service.get_scheduled_jobs()) == 8

    def test_updated_settings_apply(
        self, scheduler: FakeScheduler, settings: PrayerSettings, times: DailyPrayerTimes
    ) -> None:
        """Test update_settings affects the next reschedule."""
        service = make_service(scheduler, settings)
        asyncio.run(service.reschedule_notifications(times))

        service.update_settings(
            PrayerSettings(location=settings.location, enabled_prayers=set())
        )
        assert asyncio.run(service.reschedule_notifications(times)) == 0
        assert scheduler.jobs == {}

    def test_previous_night_is_carried(
        self, scheduler: FakeScheduler, settings: PrayerSettings
    ) -> None:
        """Test the open isha deadline of the previous day survives the rollover."""
        next_day = DAY + timedelta(days=1)
        previous = make_day(DAY, midnight_delay=timedelta(minutes=45))
        service = make_service(scheduler, settings, now=at(next_day, 0, 5))

        count = asyncio.run(service.reschedule_notifications(make_day(next_day), previous))

        assert scheduler.jobs["prayer_isha_20240310_urgent"][0] == at(next_day, 0, 15)
        assert "prayer_fajr_20240311" in scheduler.jobs
        assert count == 11
        assert service.scheduled_count == 11

    def test_failure_is_wrapped(self, settings: PrayerSettings, times: DailyPrayerTimes) -> None:
        """Test scheduler errors surface as reschedule errors."""
        service = make_service(BrokenScheduler(), settings)
        with pytest.raises(NotificationRescheduleError, match="2024-03-10"):
            asyncio.run(service.reschedule_notifications(times))
