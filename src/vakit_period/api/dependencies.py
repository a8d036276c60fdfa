"""Application state and dependencies."""

from dataclasses import dataclass
from datetime import datetime

from fastapi import HTTPException, Request, status

from vakit_period.config import AppConfig
from vakit_period.domain.models import PrayerSettings
from vakit_period.infrastructure.event_bus import InMemoryEventBus
from vakit_period.infrastructure.period_observer import EventBusPeriodObserver
from vakit_period.infrastructure.scheduler import APSchedulerAdapter
from vakit_period.infrastructure.settings_repository import JsonSettingsRepository
from vakit_period.services.notification_service import NotificationService
from vakit_period.services.prayer_service import PrayerService
from vakit_period.services.transition_scheduler import TransitionScheduler


@dataclass
class AppState:
    """Application state container."""

    config: AppConfig
    settings: PrayerSettings
    settings_repository: JsonSettingsRepository
    prayer_service: PrayerService
    notification_service: NotificationService
    scheduler_adapter: APSchedulerAdapter
    event_bus: InMemoryEventBus
    observer: EventBusPeriodObserver
    transition_scheduler: TransitionScheduler
    started_at: datetime


async def initialize_app_state(config: AppConfig) -> AppState:
    """
    Build the application object graph.

    Args:
        config: Uygulama yapılandırması

    Returns:
        Initialized AppState
    """
    settings_repo = JsonSettingsRepository(config.settings_path)
    settings = await settings_repo.load()

    # Infrastructure
    event_bus = InMemoryEventBus()
    scheduler_adapter = APSchedulerAdapter()
    observer = EventBusPeriodObserver(event_bus)

    # Services
    prayer_service = PrayerService(
        location=settings.location,
        fajr_isha_method=settings.fajr_isha_method,
        asr_fiqh=settings.asr_fiqh,
    )

    notification_service = NotificationService(
        scheduler=scheduler_adapter,
        settings=settings,
        event_bus=event_bus,
        clock=prayer_service.now,
    )

    transition_scheduler = TransitionScheduler(
        provider=prayer_service,
        observer=observer,
        notifier=notification_service,
        clock=prayer_service.now,
        recalculation_interval=config.recalculation_interval,
        rollover_buffer=config.rollover_buffer,
        sunset_buffer=config.sunset_buffer,
        strict=config.strict_validation,
    )

    return AppState(
        config=config,
        settings=settings,
        settings_repository=settings_repo,
        prayer_service=prayer_service,
        notification_service=notification_service,
        scheduler_adapter=scheduler_adapter,
        event_bus=event_bus,
        observer=observer,
        transition_scheduler=transition_scheduler,
        started_at=datetime.now(),
    )


def get_app_state(request: Request) -> AppState:
    """Get current application state."""
    state: AppState | None = getattr(request.app.state, "vakit", None)
    if state is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Uygulama henüz hazır değil.",
        )
    return state


async def shutdown_app_state(state: AppState) -> None:
    """Shutdown application state."""
    await state.transition_scheduler.stop()
    state.scheduler_adapter.shutdown()
