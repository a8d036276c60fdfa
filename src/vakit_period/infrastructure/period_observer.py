"""Periyot gözlemcisi: zamanlayıcı çıktısını event bus'a aktarır."""

import logging
from datetime import date

from vakit_period.domain.events import (
    HijriDateChangedEvent,
    PeriodUpdatedEvent,
    SchedulerErrorEvent,
)
from vakit_period.domain.period import PrayerPeriod
from vakit_period.services.ports import EventBusPort, PeriodObserverPort

logger = logging.getLogger(__name__)


class EventBusPeriodObserver(PeriodObserverPort):
    """Snapshot'ları event olarak yayınlar ve sonuncusunu okuyucular için saklar."""

    def __init__(self, event_bus: EventBusPort) -> None:
        """Initialize observer."""
        self._event_bus = event_bus
        self._latest: PrayerPeriod | None = None
        self._last_error: str | None = None

    @property
    def latest(self) -> PrayerPeriod | None:
        """Son alınan snapshot."""
        return self._latest

    @property
    def last_error(self) -> str | None:
        """Son bildirilen hata mesajı."""
        return self._last_error

    def on_period_updated(self, period: PrayerPeriod) -> None:
        self._latest = period
        self._event_bus.publish(PeriodUpdatedEvent(period=period))

    def on_hijri_date_changed(self, gregorian_date: date) -> None:
        self._event_bus.publish(HijriDateChangedEvent(gregorian_date=gregorian_date))

    def on_error(self, error: Exception, *, recoverable: bool) -> None:
        self._last_error = str(error)
        if not recoverable:
            logger.error(f"Kurtarılamaz zamanlayıcı hatası: {error}")
        self._event_bus.publish(
            SchedulerErrorEvent(error_message=str(error), recoverable=recoverable)
        )
