"""Service layer interfaces (ports)."""

from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import date, datetime

from vakit_period.domain.events import DomainEvent
from vakit_period.domain.models import DailyPrayerTimes, PrayerSettings
from vakit_period.domain.period import PrayerPeriod


class PrayerTimeProviderPort(ABC):
    """Günlük namaz vakti sağlayıcısı arayüzü (port)."""

    @abstractmethod
    async def fetch_today(self) -> DailyPrayerTimes:
        """Bugünün vakitlerini getir."""

    @abstractmethod
    async def fetch_tomorrow(self) -> DailyPrayerTimes:
        """Yarının vakitlerini getir."""

    async def fetch_yesterday(self) -> DailyPrayerTimes | None:
        """
        Dünün vakitlerini getir.

        Gece yarısından sonra açık kalan yatsı penceresi için kullanılır;
        desteklemeyen sağlayıcılar None döndürür.
        """
        return None


class PeriodObserverPort(ABC):
    """Periyot güncellemelerini dinleyen arayüz (port)."""

    @abstractmethod
    def on_period_updated(self, period: PrayerPeriod) -> None:
        """Yeni periyot snapshot'ı hesaplandı."""

    @abstractmethod
    def on_hijri_date_changed(self, gregorian_date: date) -> None:
        """Akşam vaktiyle hicri gün değişti."""

    @abstractmethod
    def on_error(self, error: Exception, *, recoverable: bool) -> None:
        """Zamanlayıcı hatası bildir."""


class NotificationReschedulerPort(ABC):
    """Bildirim yeniden planlama arayüzü (port)."""

    @abstractmethod
    async def reschedule_notifications(
        self, times: DailyPrayerTimes, previous: DailyPrayerTimes | None = None
    ) -> int:
        """
        Verilen günün bildirimlerini yeniden planla, planlanan iş sayısını döndür.

        previous verilirse önceki günün hâlâ gelecekteki işleri (ör. gece
        yarısına kadar açık yatsının çıkış uyarısı) de korunur.
        """


class SettingsRepositoryPort(ABC):
    """Ayarlar deposu arayüzü (port)."""

    @abstractmethod
    async def load(self) -> PrayerSettings:
        """Ayarları yükle."""

    @abstractmethod
    async def save(self, settings: PrayerSettings) -> None:
        """Ayarları kaydet."""


class SchedulerPort(ABC):
    """Zamanlayıcı arayüzü (port)."""

    @abstractmethod
    def schedule_at(
        self,
        run_time: datetime,
        callback: Callable[[], None],
        job_id: str,
    ) -> None:
        """Belirtilen zamanda çalıştırılacak iş planla."""

    @abstractmethod
    def cancel(self, job_id: str) -> bool:
        """Planlanmış işi iptal et."""

    @abstractmethod
    def cancel_all(self) -> None:
        """Tüm işleri iptal et."""

    @abstractmethod
    def get_scheduled_jobs(self) -> list[tuple[str, datetime]]:
        """Planlanmış işleri listele."""


class EventBusPort(ABC):
    """Event bus arayüzü (port)."""

    @abstractmethod
    def publish(self, event: DomainEvent) -> None:
        """Event yayınla."""

    @abstractmethod
    def subscribe(
        self,
        event_type: type[DomainEvent],
        handler: Callable[[DomainEvent], None],
    ) -> None:
        """Event tipine abone ol."""
