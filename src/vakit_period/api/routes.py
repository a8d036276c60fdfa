"""API Routes."""

from datetime import datetime
from typing import Annotated

from babel.dates import format_date
from fastapi import APIRouter, Depends, HTTPException, Query, status

from vakit_period import __version__
from vakit_period.api.dependencies import AppState, get_app_state
from vakit_period.api.schemas import (
    ApiResponse,
    DayTimesSchema,
    LocationSchema,
    PeriodSchema,
    PrayerTimeSchema,
    ScheduledJobSchema,
    SettingsSchema,
    SettingsUpdateSchema,
    SystemStatusSchema,
)
from vakit_period.domain.exceptions import InvalidPrayerTimesError
from vakit_period.domain.models import DailyPrayerTimes, Location, PrayerName, PrayerSettings
from vakit_period.domain.period import PrayerPeriod

router = APIRouter()

DATE_FORMAT = "d MMMM yyyy, EEEE"


def _period_schema(period: PrayerPeriod, now: datetime) -> PeriodSchema:
    """Snapshot'ı verilen ana göre API şemasına çevir."""
    next_prayer = period.next_prayer
    return PeriodSchema(
        state=period.state.kind,
        description=period.state.description,
        current_prayer=period.current_prayer,
        next_prayer=next_prayer.name if next_prayer else None,
        next_prayer_time=next_prayer.time_str if next_prayer else None,
        next_event_time=period.state.next_event_time,
        countdown=period.countdown_string(now),
        status_text=period.status_text(now),
        progress=round(period.period_progress(now), 4),
        urgency=period.urgency(now).name.lower(),
        is_urgent=period.is_urgent(now),
        incomplete=period.incomplete,
        calculated_at=period.calculated_at,
        current_date=format_date(now, DATE_FORMAT, locale="tr_TR"),
    )


def _day_schema(times: DailyPrayerTimes, settings: PrayerSettings) -> DayTimesSchema:
    prayers = [
        PrayerTimeSchema(
            name=prayer,
            display_name=prayer.display_name,
            icon=prayer.icon,
            time=times.get_time(prayer).strftime("%H:%M"),
            enabled=settings.is_prayer_enabled(prayer),
        )
        for prayer in PrayerName
    ]
    return DayTimesSchema(
        date=times.date,
        date_formatted=format_date(times.date, DATE_FORMAT, locale="tr_TR"),
        prayers=prayers,
        special_times={name: value.strftime("%H:%M") for name, value in times.special_times()},
    )


def _settings_schema(s: PrayerSettings) -> SettingsSchema:
    return SettingsSchema(
        location=LocationSchema(
            latitude=s.location.latitude,
            longitude=s.location.longitude,
            city=s.location.city,
        ),
        enabled_prayers=[p for p in PrayerName if p in s.enabled_prayers],
        pre_alert_minutes=s.pre_alert_minutes,
        urgent_alerts=s.urgent_alerts,
        fajr_isha_method=s.fajr_isha_method,
        asr_fiqh=s.asr_fiqh,
    )


# ============== Status ==============


@router.get("/status", response_model=SystemStatusSchema)
async def get_status(state: Annotated[AppState, Depends(get_app_state)]) -> SystemStatusSchema:
    """Sistem durumunu getir."""
    uptime = datetime.now() - state.started_at
    scheduler = state.transition_scheduler

    return SystemStatusSchema(
        version=__version__,
        uptime=str(uptime).split(".")[0],
        scheduler_running=scheduler.is_running,
        pending_tasks=[kind.value for kind in scheduler.pending_tasks],
        last_rollover_date=scheduler.last_rollover_date,
        last_error=state.observer.last_error,
        notification_jobs_count=len(state.notification_service.get_scheduled_jobs()),
        timezone=state.prayer_service.timezone_name,
        settings_path=str(state.settings_repository.file_path),
    )


# ============== Period ==============


@router.get("/period", response_model=PeriodSchema)
async def get_period(state: Annotated[AppState, Depends(get_app_state)]) -> PeriodSchema:
    """Son hesaplanan periyodu şimdiki ana göre getir."""
    period = state.transition_scheduler.current_period
    if period is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Periyot henüz hesaplanmadı.",
        )
    return _period_schema(period, state.prayer_service.now())


@router.post("/period/recalculate", response_model=PeriodSchema)
async def recalculate_period(
    state: Annotated[AppState, Depends(get_app_state)],
) -> PeriodSchema:
    """Periyodu zamanlayıcıyı beklemeden yeniden hesapla."""
    try:
        period = state.transition_scheduler.force_recalculate()
    except InvalidPrayerTimesError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    if period is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Bugünün vakitleri yüklenemedi.",
        )
    return _period_schema(period, period.calculated_at)


@router.post("/period/refresh", response_model=ApiResponse)
async def refresh_period(state: Annotated[AppState, Depends(get_app_state)]) -> ApiResponse:
    """Vakitleri yeniden yükle ve zamanlayıcı görevlerini yeniden kur."""
    period = await state.transition_scheduler.refresh()
    if period is None:
        return ApiResponse(success=False, message="Vakitler yenilenemedi.")
    return ApiResponse(
        success=True,
        message="Vakitler yenilendi.",
        data={"state": period.state.kind, "description": period.state.description},
    )


# ============== Prayer Times ==============


@router.get("/times", response_model=list[DayTimesSchema])
async def get_times(
    state: Annotated[AppState, Depends(get_app_state)],
    days: Annotated[int, Query(ge=1, le=30)] = 1,
) -> list[DayTimesSchema]:
    """Bugünden başlayarak namaz vakitlerini getir."""
    today = state.prayer_service.now().date()
    try:
        days_times = state.prayer_service.calculate_range(today, days)
    except InvalidPrayerTimesError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e),
        ) from e
    return [_day_schema(times, state.settings) for times in days_times]


# ============== Settings ==============


@router.get("/settings", response_model=SettingsSchema)
async def get_settings(state: Annotated[AppState, Depends(get_app_state)]) -> SettingsSchema:
    """Mevcut ayarları getir."""
    return _settings_schema(state.settings)


@router.put("/settings", response_model=ApiResponse)
async def update_settings(
    update: SettingsUpdateSchema,
    state: Annotated[AppState, Depends(get_app_state)],
) -> ApiResponse:
    """Ayarları güncelle ve vakitleri yeniden yükle."""
    current = state.settings

    new_location = current.location
    if update.location:
        new_location = Location(
            latitude=update.location.latitude,
            longitude=update.location.longitude,
            city=update.location.city,
        )

    new_settings = PrayerSettings(
        location=new_location,
        enabled_prayers=set(update.enabled_prayers)
        if update.enabled_prayers is not None
        else current.enabled_prayers,
        pre_alert_minutes=update.pre_alert_minutes
        if update.pre_alert_minutes is not None
        else current.pre_alert_minutes,
        urgent_alerts=update.urgent_alerts
        if update.urgent_alerts is not None
        else current.urgent_alerts,
        fajr_isha_method=update.fajr_isha_method
        if update.fajr_isha_method is not None
        else current.fajr_isha_method,
        asr_fiqh=update.asr_fiqh if update.asr_fiqh is not None else current.asr_fiqh,
    )

    # Update state and services
    state.settings = new_settings
    if new_location != current.location:
        state.prayer_service.update_location(new_location)
    state.prayer_service.update_method(new_settings.fajr_isha_method, new_settings.asr_fiqh)
    state.notification_service.update_settings(new_settings)

    # Save and reload
    await state.settings_repository.save(new_settings)
    await state.transition_scheduler.refresh()

    return ApiResponse(success=True, message="Ayarlar güncellendi.")


# ============== Scheduler ==============


@router.get("/scheduler/jobs", response_model=list[ScheduledJobSchema])
async def get_scheduled_jobs(
    state: Annotated[AppState, Depends(get_app_state)],
) -> list[ScheduledJobSchema]:
    """Planlanmış bildirim işlerini listele."""
    jobs = state.notification_service.get_scheduled_jobs()
    return [
        ScheduledJobSchema(
            job_id=job_id,
            run_time=run_time.strftime("%Y-%m-%d %H:%M:%S"),
            prayer=job_id.split("_")[1] if "_" in job_id else "unknown",
        )
        for job_id, run_time in jobs
    ]


# ============== Utility ==============


@router.get("/prayers")
async def get_prayer_names() -> list[dict[str, str]]:
    """Namaz vakti isimlerini listele."""
    return [{"value": p.value, "display_name": p.display_name, "icon": p.icon} for p in PrayerName]
