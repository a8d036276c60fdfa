"""Pydantic schemas for API."""

from datetime import date, datetime
from typing import Annotated

from pydantic import BaseModel, Field

from vakit_period.domain.models import PrayerName


class LocationSchema(BaseModel):
    """Konum şeması."""

    latitude: Annotated[float, Field(ge=-90, le=90, description="Enlem")]
    longitude: Annotated[float, Field(ge=-180, le=180, description="Boylam")]
    city: str = Field(default="", description="Şehir adı")


class SettingsSchema(BaseModel):
    """Tüm ayarlar şeması."""

    location: LocationSchema
    enabled_prayers: list[PrayerName] = Field(default_factory=lambda: list(PrayerName))
    pre_alert_minutes: Annotated[int, Field(ge=0, le=60, default=0)]
    urgent_alerts: bool = True
    fajr_isha_method: int = Field(default=2, description="Hesaplama metodu")
    asr_fiqh: int = Field(default=1, description="0=Şafi, 1=Hanefi")


class SettingsUpdateSchema(BaseModel):
    """Ayar güncelleme şeması (partial update)."""

    location: LocationSchema | None = None
    enabled_prayers: list[PrayerName] | None = None
    pre_alert_minutes: Annotated[int | None, Field(ge=0, le=60)] = None
    urgent_alerts: bool | None = None
    fajr_isha_method: int | None = None
    asr_fiqh: int | None = None


class PrayerTimeSchema(BaseModel):
    """Tek namaz vakti şeması."""

    name: PrayerName
    display_name: str
    icon: str
    time: str  # HH:MM formatında
    enabled: bool


class DayTimesSchema(BaseModel):
    """Günlük namaz vakitleri şeması."""

    date: date
    date_formatted: str
    prayers: list[PrayerTimeSchema]
    special_times: dict[str, str]


class PeriodSchema(BaseModel):
    """Mevcut periyot şeması."""

    state: str
    description: str
    current_prayer: PrayerName | None
    next_prayer: PrayerName | None
    next_prayer_time: str | None
    next_event_time: datetime
    countdown: str
    status_text: str
    progress: float
    urgency: str
    is_urgent: bool
    incomplete: bool
    calculated_at: datetime
    current_date: str


class ScheduledJobSchema(BaseModel):
    """Planlanmış iş şeması."""

    job_id: str
    run_time: str
    prayer: str


class SystemStatusSchema(BaseModel):
    """Sistem durumu şeması."""

    version: str
    uptime: str
    scheduler_running: bool
    pending_tasks: list[str]
    last_rollover_date: date | None
    last_error: str | None
    notification_jobs_count: int
    timezone: str
    settings_path: str


class ApiResponse(BaseModel):
    """Genel API yanıt şeması."""

    success: bool
    message: str
    data: dict | list | None = None
