"""Shared fixtures and fakes for tests."""

import asyncio
import heapq
from collections.abc import Callable
from datetime import date, datetime, time, timedelta, timezone

import pytest

from vakit_period.domain.models import DailyPrayerTimes
from vakit_period.domain.period import PrayerPeriod
from vakit_period.services.ports import (
    NotificationReschedulerPort,
    PeriodObserverPort,
    PrayerTimeProviderPort,
    SchedulerPort,
)

UTC = timezone.utc


def at(day: date, hour: int, minute: int = 0, second: int = 0) -> datetime:
    """Build an aware UTC datetime on the given day."""
    return datetime.combine(day, time(hour, minute, second), tzinfo=UTC)


def make_day(
    day: date, *, with_midnight: bool = True, midnight_delay: timedelta = timedelta(0)
) -> DailyPrayerTimes:
    """Reference day: 05:30 / 06:45 / 12:15 / 15:45 / 18:20 / 19:45, midnight 00:00 (+delay)."""
    return DailyPrayerTimes(
        date=day,
        fajr=at(day, 5, 30),
        sunrise=at(day, 6, 45),
        dhuhr=at(day, 12, 15),
        asr=at(day, 15, 45),
        maghrib=at(day, 18, 20),
        isha=at(day, 19, 45),
        sunset=at(day, 18, 20),
        midnight=at(day + timedelta(days=1), 0, 0) + midnight_delay if with_midnight else None,
    )


class VirtualClock:
    """Deterministic clock with an awaitable sleep driven by ``advance``."""

    def __init__(self, start: datetime) -> None:
        self.now = start
        self._sleepers: list[tuple[datetime, int, asyncio.Future[None]]] = []
        self._counter = 0

    def __call__(self) -> datetime:
        return self.now

    async def sleep(self, seconds: float) -> None:
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        wake_at = self.now + timedelta(seconds=max(seconds, 0.0))
        heapq.heappush(self._sleepers, (wake_at, self._counter, future))
        self._counter += 1
        await future

    @property
    def pending_sleepers(self) -> int:
        return sum(1 for _, _, future in self._sleepers if not future.done())

    async def settle(self) -> None:
        """Let every ready task run until it blocks again."""
        for _ in range(50):
            await asyncio.sleep(0)

    async def advance(self, delta: timedelta) -> None:
        """Move time forward, waking sleepers in order."""
        target = self.now + delta
        await self.settle()
        while self._sleepers and self._sleepers[0][0] <= target:
            wake_at, _, future = heapq.heappop(self._sleepers)
            if future.done():
                continue
            self.now = max(self.now, wake_at)
            future.set_result(None)
            await self.settle()
        self.now = target
        await self.settle()

    async def jump(self, delta: timedelta) -> None:
        """Move time forward without waking anyone (process was suspended)."""
        self.now += delta
        await self.settle()


class FakeProvider(PrayerTimeProviderPort):
    """Provider that builds reference days relative to the virtual clock."""

    def __init__(
        self,
        clock: Callable[[], datetime],
        *,
        with_midnight: bool = True,
        midnight_delay: timedelta = timedelta(0),
    ) -> None:
        self.clock = clock
        self.with_midnight = with_midnight
        self.midnight_delay = midnight_delay
        self.today_calls = 0
        self.tomorrow_calls = 0
        self.yesterday_calls = 0
        self.fail_today = False
        self.fail_tomorrow = False
        self.invalid = False

    @property
    def calls(self) -> int:
        return self.today_calls + self.tomorrow_calls

    def _build(self, day: date) -> DailyPrayerTimes:
        times = make_day(day, with_midnight=self.with_midnight, midnight_delay=self.midnight_delay)
        if self.invalid:
            # Öğle ile ikindi yer değiştirmiş
            return DailyPrayerTimes(
                date=day,
                fajr=times.fajr,
                sunrise=times.sunrise,
                dhuhr=times.asr,
                asr=times.dhuhr,
                maghrib=times.maghrib,
                isha=times.isha,
            )
        return times

    async def fetch_today(self) -> DailyPrayerTimes:
        self.today_calls += 1
        if self.fail_today:
            raise ConnectionError("sağlayıcıya ulaşılamadı")
        return self._build(self.clock().date())

    async def fetch_tomorrow(self) -> DailyPrayerTimes:
        self.tomorrow_calls += 1
        if self.fail_tomorrow:
            raise ConnectionError("sağlayıcıya ulaşılamadı")
        return self._build(self.clock().date() + timedelta(days=1))

    async def fetch_yesterday(self) -> DailyPrayerTimes:
        self.yesterday_calls += 1
        return self._build(self.clock().date() - timedelta(days=1))


class RecordingObserver(PeriodObserverPort):
    """Observer that records every callback."""

    def __init__(self) -> None:
        self.periods: list[PrayerPeriod] = []
        self.hijri_dates: list[date] = []
        self.errors: list[tuple[Exception, bool]] = []

    @property
    def calls(self) -> int:
        return len(self.periods) + len(self.hijri_dates) + len(self.errors)

    @property
    def latest(self) -> PrayerPeriod:
        return self.periods[-1]

    def on_period_updated(self, period: PrayerPeriod) -> None:
        self.periods.append(period)

    def on_hijri_date_changed(self, gregorian_date: date) -> None:
        self.hijri_dates.append(gregorian_date)

    def on_error(self, error: Exception, *, recoverable: bool) -> None:
        self.errors.append((error, recoverable))


class RecordingNotifier(NotificationReschedulerPort):
    """Notifier that records the days it was asked to schedule."""

    def __init__(self) -> None:
        self.days: list[date] = []
        self.carried: list[date] = []
        self.fail = False

    async def reschedule_notifications(
        self, times: DailyPrayerTimes, previous: DailyPrayerTimes | None = None
    ) -> int:
        if self.fail:
            raise RuntimeError("bildirim sistemi kapalı")
        self.days.append(times.date)
        if previous is not None:
            self.carried.append(previous.date)
        return 5


class FakeScheduler(SchedulerPort):
    """In-memory scheduler port."""

    def __init__(self) -> None:
        self.jobs: dict[str, tuple[datetime, Callable[[], None]]] = {}

    def schedule_at(self, run_time: datetime, callback: Callable[[], None], job_id: str) -> None:
        self.jobs[job_id] = (run_time, callback)

    def cancel(self, job_id: str) -> bool:
        return self.jobs.pop(job_id, None) is not None

    def cancel_all(self) -> None:
        self.jobs.clear()

    def get_scheduled_jobs(self) -> list[tuple[str, datetime]]:
        return sorted(((job_id, run) for job_id, (run, _) in self.jobs.items()), key=lambda j: j[1])

    def fire(self, job_id: str) -> None:
        _, callback = self.jobs.pop(job_id)
        callback()


@pytest.fixture
def day() -> date:
    """Reference calendar day."""
    return date(2024, 3, 10)


@pytest.fixture
def today(day: date) -> DailyPrayerTimes:
    """Reference day's prayer times."""
    return make_day(day)


@pytest.fixture
def tomorrow(day: date) -> DailyPrayerTimes:
    """Following day's prayer times."""
    return make_day(day + timedelta(days=1))
