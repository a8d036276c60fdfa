"""Vakit bildirimlerini zamanlayıcıya kuran servis."""

import logging
from collections.abc import Callable
from datetime import date, datetime, timedelta

from vakit_period.domain.events import (
    DomainEvent,
    PrayerTimeReachedEvent,
    PreAlertEvent,
    UrgentDeadlineEvent,
)
from vakit_period.domain.exceptions import NotificationRescheduleError
from vakit_period.domain.models import DailyPrayerTimes, PrayerName, PrayerSettings, PrayerTime
from vakit_period.domain.period import URGENT_THRESHOLD, window_deadline
from vakit_period.services.ports import EventBusPort, NotificationReschedulerPort, SchedulerPort

logger = logging.getLogger(__name__)


class NotificationService(NotificationReschedulerPort):
    """Günlük vakit, ön uyarı ve vakit çıkış uyarılarını planlar."""

    def __init__(
        self,
        scheduler: SchedulerPort,
        settings: PrayerSettings,
        event_bus: EventBusPort | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        Initialize notification service.

        Args:
            scheduler: Zamanlayıcı adaptörü
            settings: Bildirim ayarları
            event_bus: Event bus (opsiyonel)
            clock: Şu anki zamanı döndüren fonksiyon
        """
        self._scheduler = scheduler
        self._settings = settings
        self._event_bus = event_bus
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._scheduled_count = 0

    @property
    def settings(self) -> PrayerSettings:
        """Mevcut ayarlar."""
        return self._settings

    @property
    def scheduled_count(self) -> int:
        """Son planlamada kurulan iş sayısı."""
        return self._scheduled_count

    def update_settings(self, settings: PrayerSettings) -> None:
        """Ayarları güncelle."""
        self._settings = settings

    def _make_job_id(self, prayer: PrayerName, day: date, suffix: str = "") -> str:
        """İş için benzersiz ID oluştur."""
        base_id = f"prayer_{prayer.value}_{day.strftime('%Y%m%d')}"
        return f"{base_id}_{suffix}" if suffix else base_id

    def _publish(self, event: DomainEvent) -> None:
        if self._event_bus:
            self._event_bus.publish(event)

    def _create_prayer_callback(self, prayer_time: PrayerTime) -> Callable[[], None]:
        """Vakit girişi callback'i oluştur."""

        def callback() -> None:
            logger.info(f"Vakit girdi: {prayer_time.name.display_name}")
            self._publish(PrayerTimeReachedEvent(prayer_time=prayer_time))

        return callback

    def _create_pre_alert_callback(
        self, prayer_time: PrayerTime, minutes_before: int
    ) -> Callable[[], None]:
        """Ön uyarı callback'i oluştur."""

        def callback() -> None:
            logger.info(f"{prayer_time.name.display_name} vaktine {minutes_before} dakika kaldı")
            self._publish(PreAlertEvent(prayer_time=prayer_time, minutes_before=minutes_before))

        return callback

    def _create_urgent_callback(
        self, prayer: PrayerName, deadline: datetime, is_midnight: bool
    ) -> Callable[[], None]:
        """Vakit çıkış uyarısı callback'i oluştur."""

        def callback() -> None:
            logger.info(f"{prayer.display_name} vaktinin çıkmasına 30 dakika kaldı")
            self._publish(
                UrgentDeadlineEvent(prayer=prayer, deadline=deadline, is_midnight=is_midnight)
            )

        return callback

    def _schedule(self, run_time: datetime, callback: Callable[[], None], job_id: str) -> None:
        self._scheduler.schedule_at(run_time=run_time, callback=callback, job_id=job_id)
        logger.debug(f"Planlandı: {job_id} -> {run_time}")

    def schedule_day(self, times: DailyPrayerTimes) -> int:
        """
        Bir günün bildirimlerini planla.

        Geçmiş anlar ve devre dışı vakitler atlanır.

        Returns:
            Planlanan iş sayısı
        """
        now = self._clock()
        scheduled = 0
        pre_alert_minutes = self._settings.pre_alert_minutes

        for prayer in PrayerName:
            if not self._settings.is_prayer_enabled(prayer):
                continue

            prayer_time = times.get_prayer_time(prayer)

            if prayer_time.at > now:
                self._schedule(
                    prayer_time.at,
                    self._create_prayer_callback(prayer_time),
                    self._make_job_id(prayer, times.date),
                )
                scheduled += 1

                if pre_alert_minutes > 0:
                    pre_alert_time = prayer_time.at - timedelta(minutes=pre_alert_minutes)
                    if pre_alert_time > now:
                        self._schedule(
                            pre_alert_time,
                            self._create_pre_alert_callback(prayer_time, pre_alert_minutes),
                            self._make_job_id(prayer, times.date, "pre"),
                        )
                        scheduled += 1

            if self._settings.urgent_alerts:
                deadline = window_deadline(prayer, times)
                urgent_time = deadline - URGENT_THRESHOLD
                # Pencere 30 dakikadan kısaysa uyarı anlamsız
                if urgent_time > now and urgent_time > prayer_time.at:
                    is_midnight = prayer is PrayerName.ISHA and times.midnight is not None
                    self._schedule(
                        urgent_time,
                        self._create_urgent_callback(prayer, deadline, is_midnight),
                        self._make_job_id(prayer, times.date, "urgent"),
                    )
                    scheduled += 1

        self._scheduled_count = scheduled
        logger.info(f"{times.date} için {scheduled} bildirim planlandı.")
        return scheduled

    async def reschedule_notifications(
        self, times: DailyPrayerTimes, previous: DailyPrayerTimes | None = None
    ) -> int:
        """Eski bildirimleri temizle ve verilen gün (ve açık kalan önceki gün) için yeniden planla."""
        try:
            self._scheduler.cancel_all()
            carried = self.schedule_day(previous) if previous is not None else 0
            scheduled = self.schedule_day(times)
            self._scheduled_count = carried + scheduled
            return self._scheduled_count
        except Exception as e:
            raise NotificationRescheduleError(f"{times.date} bildirimleri planlanamadı: {e}") from e

    def get_scheduled_jobs(self) -> list[tuple[str, datetime]]:
        """Planlanmış işleri listele."""
        return self._scheduler.get_scheduled_jobs()
