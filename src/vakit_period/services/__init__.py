"""Service layer - Business logic."""

from vakit_period.services.notification_service import NotificationService
from vakit_period.services.ports import (
    EventBusPort,
    NotificationReschedulerPort,
    PeriodObserverPort,
    PrayerTimeProviderPort,
    SchedulerPort,
    SettingsRepositoryPort,
)
from vakit_period.services.prayer_service import PrayerService
from vakit_period.services.transition_scheduler import TransitionScheduler

__all__ = [
    "EventBusPort",
    "NotificationReschedulerPort",
    "NotificationService",
    "PeriodObserverPort",
    "PrayerService",
    "PrayerTimeProviderPort",
    "SchedulerPort",
    "SettingsRepositoryPort",
    "TransitionScheduler",
]
