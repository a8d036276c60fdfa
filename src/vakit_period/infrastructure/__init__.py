"""Infrastructure layer - Adapters and implementations."""

from vakit_period.infrastructure.event_bus import InMemoryEventBus
from vakit_period.infrastructure.period_observer import EventBusPeriodObserver
from vakit_period.infrastructure.scheduler import APSchedulerAdapter
from vakit_period.infrastructure.settings_repository import JsonSettingsRepository

__all__ = [
    "APSchedulerAdapter",
    "EventBusPeriodObserver",
    "InMemoryEventBus",
    "JsonSettingsRepository",
]
