"""Domain events for event-driven architecture."""

from dataclasses import dataclass, field
from datetime import date, datetime
from uuid import UUID, uuid4

from vakit_period.domain.models import PrayerName, PrayerTime
from vakit_period.domain.period import PrayerPeriod


@dataclass(frozen=True, kw_only=True)
class DomainEvent:
    """Base class for domain events."""

    event_id: UUID = field(default_factory=uuid4)
    occurred_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True, kw_only=True)
class PeriodUpdatedEvent(DomainEvent):
    """Periyot yeniden hesaplandığında."""

    period: PrayerPeriod


@dataclass(frozen=True, kw_only=True)
class HijriDateChangedEvent(DomainEvent):
    """Akşam vaktiyle birlikte hicri gün değiştiğinde."""

    gregorian_date: date


@dataclass(frozen=True, kw_only=True)
class SchedulerErrorEvent(DomainEvent):
    """Zamanlayıcı hatası (recoverable=False ise sağlayıcı sözleşmesi ihlali)."""

    error_message: str
    recoverable: bool = True


@dataclass(frozen=True, kw_only=True)
class PrayerTimeReachedEvent(DomainEvent):
    """Namaz vakti geldiğinde tetiklenen event."""

    prayer_time: PrayerTime


@dataclass(frozen=True, kw_only=True)
class PreAlertEvent(DomainEvent):
    """Namaz vaktinden önce uyarı eventi."""

    prayer_time: PrayerTime
    minutes_before: int


@dataclass(frozen=True, kw_only=True)
class UrgentDeadlineEvent(DomainEvent):
    """Vaktin çıkmasına 30 dakika kaldığında."""

    prayer: PrayerName
    deadline: datetime
    is_midnight: bool = False


@dataclass(frozen=True, kw_only=True)
class SettingsChangedEvent(DomainEvent):
    """Ayarlar değiştiğinde."""

    changed_fields: tuple[str, ...]
