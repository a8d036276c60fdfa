"""Gün geçişi, akşam sinyali ve periyodik yeniden hesaplama zamanlayıcısı."""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Coroutine
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

from vakit_period.domain.exceptions import InvalidPrayerTimesError, MissingTomorrowTimesError
from vakit_period.domain.models import DailyPrayerTimes
from vakit_period.domain.period import (
    PrayerPeriod,
    calculate_period,
    fallback_state,
    governing_day,
)
from vakit_period.services.ports import (
    NotificationReschedulerPort,
    PeriodObserverPort,
    PrayerTimeProviderPort,
)

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]
Sleeper = Callable[[float], Awaitable[None]]

DEFAULT_RECALCULATION_INTERVAL = timedelta(minutes=5)
DEFAULT_ROLLOVER_BUFFER = timedelta(seconds=5)
DEFAULT_SUNSET_BUFFER = timedelta(seconds=2)


class TaskKind(str, Enum):
    """Zamanlayıcının sahip olduğu görev türleri (her türden en fazla bir tane)."""

    DAY_ROLLOVER = "day_rollover"
    SUNSET = "sunset"
    RECALCULATION = "recalculation"
    TOMORROW_REFETCH = "tomorrow_refetch"
    CATCH_UP = "catch_up"


def start_of_next_day(now: datetime) -> datetime:
    """Ertesi günün başlangıcı (aynı saat diliminde)."""
    return datetime.combine(now.date() + timedelta(days=1), time.min, tzinfo=now.tzinfo)


def _local_now() -> datetime:
    return datetime.now().astimezone()


class TransitionScheduler:
    """
    Periyot gözlemcisini yoklama yapmadan güncel tutan zamanlayıcı.

    Üç bağımsız görev yönetir: gece yarısı gün geçişi, akşam vaktinde hicri
    gün sinyali ve 5 dakikalık periyodik yeniden hesaplama. Bugün/yarın
    vakitlerini yalnızca bu sınıf değiştirir; okuyucular değişmez
    ``PrayerPeriod`` snapshot'ları alır.
    """

    def __init__(
        self,
        provider: PrayerTimeProviderPort,
        observer: PeriodObserverPort,
        notifier: NotificationReschedulerPort | None = None,
        *,
        clock: Clock | None = None,
        sleep: Sleeper | None = None,
        recalculation_interval: timedelta = DEFAULT_RECALCULATION_INTERVAL,
        rollover_buffer: timedelta = DEFAULT_ROLLOVER_BUFFER,
        sunset_buffer: timedelta = DEFAULT_SUNSET_BUFFER,
        strict: bool = False,
    ) -> None:
        """
        Initialize transition scheduler.

        Args:
            provider: Günlük vakit sağlayıcısı
            observer: Periyot ve takvim sinyallerini alacak gözlemci
            notifier: Bildirim yeniden planlayıcı (opsiyonel, best-effort)
            clock: Şu anki zamanı döndüren fonksiyon (timezone-aware)
            sleep: Asenkron bekleme fonksiyonu (testlerde sanal zaman için)
            recalculation_interval: Periyodik hesaplama aralığı
            rollover_buffer: Gece yarısından sonra bekleme payı
            sunset_buffer: Akşam vaktinden sonra bekleme payı
            strict: Tutarsız vakit verisinde hata fırlat
        """
        self._provider = provider
        self._observer = observer
        self._notifier = notifier
        self._clock = clock or _local_now
        self._sleep = sleep or asyncio.sleep
        self._recalculation_interval = recalculation_interval
        self._rollover_buffer = rollover_buffer
        self._sunset_buffer = sunset_buffer
        self._strict = strict

        self._previous: DailyPrayerTimes | None = None
        self._today: DailyPrayerTimes | None = None
        self._tomorrow: DailyPrayerTimes | None = None
        self._period: PrayerPeriod | None = None
        self._last_rollover_date: date | None = None
        self._invalid_data = False

        self._tasks: dict[TaskKind, asyncio.Task[None]] = {}
        self._running = False
        self._generation = 0
        self._lock = asyncio.Lock()

    # ============== Properties ==============

    @property
    def is_running(self) -> bool:
        """Zamanlayıcı çalışıyor mu?"""
        return self._running

    @property
    def previous(self) -> DailyPrayerTimes | None:
        """Gece yarısından sonra sabaha kadar geçerli olan önceki günün vakitleri."""
        return self._previous

    @property
    def today(self) -> DailyPrayerTimes | None:
        """Bugünün vakitleri."""
        return self._today

    @property
    def tomorrow(self) -> DailyPrayerTimes | None:
        """Yarının vakitleri."""
        return self._tomorrow

    @property
    def current_period(self) -> PrayerPeriod | None:
        """Son hesaplanan snapshot."""
        return self._period

    @property
    def last_rollover_date(self) -> date | None:
        """En son gün geçişinin yapıldığı tarih."""
        return self._last_rollover_date

    @property
    def pending_tasks(self) -> list[TaskKind]:
        """Bekleyen görevler."""
        return [kind for kind, task in self._tasks.items() if not task.done()]

    # ============== Lifecycle ==============

    async def start(self) -> None:
        """Zamanlayıcıyı başlat ve görevleri kur."""
        if self._running:
            logger.warning("Geçiş zamanlayıcısı zaten çalışıyor.")
            return

        self._running = True
        self._generation += 1
        generation = self._generation
        logger.info("Geçiş zamanlayıcısı başlatılıyor...")

        if self._today is None or self._needs_day_transition():
            await self._load_days()
        if not self._is_live(generation):
            return

        try:
            self._recalculate()
        finally:
            # Katı modda hata fırlatılsa da görevler kurulur, sonraki adımda tekrar denenir
            if self._is_live(generation):
                self._arm_all()

        await self._reschedule_notifications()
        if self._is_live(generation):
            logger.info("Geçiş zamanlayıcısı başlatıldı.")

    async def stop(self) -> None:
        """
        Tüm görevleri iptal et.

        Döndükten sonra gözlemciye hiçbir çağrı yapılmaz.
        """
        self._running = False
        self._generation += 1
        await self._cancel_all()
        logger.info("Geçiş zamanlayıcısı durduruldu.")

    async def refresh(self) -> PrayerPeriod | None:
        """
        Vakitleri yeniden yükle ve tüm görevleri yeniden kur.

        Konum değişikliği veya manuel yenileme sonrası çağrılmalıdır; eski
        vakitlere göre kurulmuş hiçbir görev geçerli kabul edilmez.
        """
        self._generation += 1
        await self._cancel_all()
        # Konum değişmiş olabilir; eldeki dünkü vakitler yeniden kullanılmaz
        await self._load_days(reuse_previous=False)
        try:
            period = self._recalculate()
        finally:
            if self._running:
                self._arm_all()
        await self._reschedule_notifications()
        logger.info("Vakitler yenilendi ve görevler yeniden kuruldu.")
        return period

    def force_recalculate(self) -> PrayerPeriod | None:
        """
        Zamanlayıcıyı beklemeden periyodu hemen yeniden hesapla.

        Akşam sinyali yeniden kurulur. Gün değişmişse (ör. uygulama askıdan
        döndü) gün geçişi ayrıca hemen başlatılır.
        """
        period = self._recalculate()
        if self._running:
            self._arm_sunset()
            if self._needs_day_transition():
                logger.info("Gün değişmiş, geçiş hemen başlatılıyor.")
                self._arm(TaskKind.CATCH_UP, self._catch_up(self._generation))
        return period

    # ============== Day rollover ==============

    async def roll_over(self) -> bool:
        """
        Gün geçişini yap: yarını bugüne taşı, yeni yarını getir, yeniden hesapla.

        Aynı takvim günü için en fazla bir kez uygulanır. Eski bugün, sabah
        vaktine kadar önceki gün olarak tutulur; gece yarısını geçen yatsı
        penceresi ve yatsı sonrası ona göre hesaplanır.

        Returns:
            Geçiş yapıldı mı?
        """
        async with self._lock:
            current_date = self._now().date()
            if self._last_rollover_date is not None and self._last_rollover_date >= current_date:
                logger.debug(f"{current_date} için gün geçişi zaten yapılmış.")
                return False
            if self._today is not None and self._today.date >= current_date:
                self._last_rollover_date = current_date
                return False

            logger.info(f"Gün geçişi: {current_date}")
            if self._tomorrow is not None and self._tomorrow.date == current_date:
                today: DailyPrayerTimes | None = self._tomorrow
            else:
                today = await self._fetch(self._provider.fetch_today, "bugün")
                if today is None:
                    # Eski bugün korunur, sonraki periyodik adımda tekrar denenir
                    return False

            self._previous = await self._previous_for(today, self._today)
            self._today = today
            self._tomorrow = self._accept_tomorrow(
                await self._fetch(self._provider.fetch_tomorrow, "yarın")
            )
            self._last_rollover_date = current_date
            self._recalculate_safely()

        await self._reschedule_notifications()
        self._arm_sunset()
        return True

    async def _day_rollover_loop(self, generation: int) -> None:
        while self._is_live(generation):
            now = self._now()
            fire_at = start_of_next_day(now) + self._rollover_buffer
            delay = (fire_at - now).total_seconds()
            logger.debug(f"Gün geçişi planlandı: {fire_at} ({delay:.0f} sn)")

            await self._sleep(delay)
            if not self._is_live(generation):
                return
            await self.roll_over()

    async def _catch_up(self, generation: int) -> None:
        if not self._is_live(generation):
            return
        await self.roll_over()

    # ============== Sunset signal ==============

    def _arm_sunset(self) -> None:
        """Bugünün akşam vakti için hicri gün sinyalini kur."""
        self._cancel(TaskKind.SUNSET)
        if not self._running or self._today is None:
            return

        maghrib = self._today.maghrib
        if maghrib <= self._now():
            logger.debug(f"Akşam vakti geçti ({maghrib}), hicri gün sinyali kurulmadı.")
            return

        fire_at = maghrib + self._sunset_buffer
        self._arm(TaskKind.SUNSET, self._sunset_signal(self._generation, fire_at, self._today.date))
        logger.debug(f"Hicri gün sinyali planlandı: {fire_at}")

    async def _sunset_signal(self, generation: int, fire_at: datetime, day: date) -> None:
        delay = (fire_at - self._now()).total_seconds()
        await self._sleep(max(delay, 0.0))
        if not self._is_live(generation):
            return

        logger.info(f"Akşam vakti girdi, hicri gün değişti ({day}).")
        try:
            self._observer.on_hijri_date_changed(day)
        except Exception as e:
            logger.error(f"Hicri gün gözlemci hatası: {e}")

    # ============== Periodic recalculation ==============

    async def _recalculation_loop(self, generation: int) -> None:
        interval = self._recalculation_interval.total_seconds()
        while self._is_live(generation):
            await self._sleep(interval)
            if not self._is_live(generation):
                return
            await self._tick()

    async def _tick(self) -> None:
        if self._needs_day_transition():
            # Süreç askıya alınıp gece yarısı kaçırılmış olabilir
            logger.info("Kaçırılmış gün geçişi tespit edildi.")
            if await self.roll_over():
                return
        elif self._invalid_data:
            logger.info("Tutarsız vakitler yeniden getiriliyor.")
            await self._load_days()

        if self._today is not None and self._tomorrow is None:
            await self._retry_tomorrow()

        self._recalculate_safely()

    async def _retry_tomorrow(self) -> None:
        async with self._lock:
            tomorrow = self._accept_tomorrow(
                await self._fetch(self._provider.fetch_tomorrow, "yarın")
            )
            if tomorrow is not None:
                self._tomorrow = tomorrow
                logger.info(f"Yarının vakitleri alındı: {tomorrow.date}")

    async def _refetch_tomorrow(self, generation: int) -> None:
        await self._retry_tomorrow()
        if self._is_live(generation) and self._tomorrow is not None:
            self._recalculate_safely()

    def _request_tomorrow(self) -> None:
        """Eksik yarın verisi için tek seferlik getirme görevi kur."""
        if not self._running:
            return
        existing = self._tasks.get(TaskKind.TOMORROW_REFETCH)
        if existing is not None and not existing.done():
            return
        self._arm(TaskKind.TOMORROW_REFETCH, self._refetch_tomorrow(self._generation))

    # ============== Derivation ==============

    def _recalculate(self) -> PrayerPeriod | None:
        """Mevcut vakitlerden snapshot üret ve gözlemciye ilet."""
        if self._today is None:
            logger.warning("Periyot hesaplanamadı: bugünün vakitleri yok.")
            return None

        now = self._now()
        day, following = self._active_days(now, self._today)
        try:
            period = calculate_period(now, day, following, strict=self._strict)
        except MissingTomorrowTimesError as e:
            logger.warning(f"{e}; geçici yatsı durumu kullanılıyor.")
            period = PrayerPeriod(
                state=fallback_state(now),
                today_prayers=day,
                tomorrow_prayers=None,
                calculated_at=now,
                incomplete=True,
            )
            self._request_tomorrow()
        except InvalidPrayerTimesError as e:
            self._invalid_data = True
            self._report_error(e, recoverable=False)
            raise

        self._invalid_data = False
        self._period = period
        logger.debug(
            f"Periyot: {period.state.description}, kalan {period.countdown_string()}, "
            f"ilerleme {period.period_progress():.1%}"
        )
        if self._running:
            try:
                self._observer.on_period_updated(period)
            except Exception as e:
                logger.error(f"Periyot gözlemci hatası: {e}")
        return period

    def _recalculate_safely(self) -> PrayerPeriod | None:
        """Görevlerden çağrılır; katı doğrulama hatası görevi sonlandırmaz."""
        try:
            return self._recalculate()
        except InvalidPrayerTimesError as e:
            logger.error(f"Periyot hesaplanamadı, vakitler sonraki adımda yeniden getirilecek: {e}")
            return None

    def _active_days(
        self, now: datetime, today: DailyPrayerTimes
    ) -> tuple[DailyPrayerTimes, DailyPrayerTimes | None]:
        """Hesapta kullanılacak (gün, yarın) çifti."""
        day = governing_day(now, today, self._previous)
        if day is today:
            return today, self._tomorrow
        return day, today

    # ============== Helpers ==============

    def _now(self) -> datetime:
        return self._clock()

    def _is_live(self, generation: int) -> bool:
        return self._running and generation == self._generation

    def _needs_day_transition(self) -> bool:
        return self._today is None or self._today.date < self._now().date()

    async def _load_days(self, *, reuse_previous: bool = True) -> None:
        async with self._lock:
            today = await self._fetch(self._provider.fetch_today, "bugün")
            if today is not None:
                held = self._today if reuse_previous else None
                self._previous = await self._previous_for(today, held)
                self._today = today
                self._last_rollover_date = today.date
            self._tomorrow = self._accept_tomorrow(
                await self._fetch(self._provider.fetch_tomorrow, "yarın")
            )

    async def _previous_for(
        self, today: DailyPrayerTimes, held: DailyPrayerTimes | None
    ) -> DailyPrayerTimes | None:
        """Bugünün sabah vaktinden önceysek önceki günü (eldekini veya sağlayıcıdan) bul."""
        if self._now() >= today.fajr:
            return None
        expected = today.date - timedelta(days=1)
        if held is not None and held.date == expected:
            return held

        previous = await self._fetch(self._provider.fetch_yesterday, "dün")
        if previous is not None and previous.date != expected:
            logger.warning(f"Dünün vakitleri beklenen güne ait değil ({previous.date}), yok sayıldı.")
            return None
        return previous

    def _accept_tomorrow(self, candidate: DailyPrayerTimes | None) -> DailyPrayerTimes | None:
        """Sağlayıcının "yarın"ı saate göredir; yalnızca bugünün ertesi günü kabul edilir."""
        if candidate is None or self._today is None:
            return None
        expected = self._today.date + timedelta(days=1)
        if candidate.date != expected:
            logger.warning(
                f"Yarının vakitleri beklenen güne ait değil ({candidate.date} != {expected}), "
                "yok sayıldı."
            )
            return None
        return candidate

    async def _fetch(
        self,
        fetcher: Callable[[], Awaitable[DailyPrayerTimes | None]],
        label: str,
    ) -> DailyPrayerTimes | None:
        """Sağlayıcıdan veri getir; hata olursa bildir ve None döndür."""
        try:
            return await fetcher()
        except InvalidPrayerTimesError as e:
            logger.error(f"Sağlayıcı geçersiz vakit döndürdü ({label}): {e}")
            self._report_error(e, recoverable=False)
        except Exception as e:
            logger.warning(f"Vakitler alınamadı ({label}), sonraki adımda tekrar denenecek: {e}")
            self._report_error(e, recoverable=True)
        return None

    async def _reschedule_notifications(self) -> None:
        if self._notifier is None or self._today is None or not self._running:
            return
        day, _ = self._active_days(self._now(), self._today)
        previous = day if day is not self._today else None
        try:
            count = await self._notifier.reschedule_notifications(self._today, previous)
            logger.debug(f"{count} bildirim yeniden planlandı.")
        except Exception as e:
            logger.warning(f"Bildirimler yeniden planlanamadı: {e}")

    def _report_error(self, error: Exception, *, recoverable: bool) -> None:
        if not self._running:
            return
        try:
            self._observer.on_error(error, recoverable=recoverable)
        except Exception as e:
            logger.error(f"Hata gözlemcisi başarısız: {e}")

    def _arm_all(self) -> None:
        generation = self._generation
        self._arm(TaskKind.DAY_ROLLOVER, self._day_rollover_loop(generation))
        self._arm_sunset()
        self._arm(TaskKind.RECALCULATION, self._recalculation_loop(generation))

    def _arm(self, kind: TaskKind, coro: Coroutine[Any, Any, None]) -> None:
        """Görev kur; aynı türden bekleyen görev varsa önce iptal et."""
        self._cancel(kind)
        task = asyncio.create_task(coro, name=f"vakit-period:{kind.value}")
        self._tasks[kind] = task
        task.add_done_callback(self._on_task_done)

    def _cancel(self, kind: TaskKind) -> None:
        task = self._tasks.get(kind)
        if task is None or task is asyncio.current_task():
            return
        task.cancel()
        del self._tasks[kind]

    async def _cancel_all(self) -> None:
        current = asyncio.current_task()
        tasks = [task for task in self._tasks.values() if task is not current]
        for task in tasks:
            task.cancel()
        self._tasks = {kind: task for kind, task in self._tasks.items() if task is current}
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        for kind, current in list(self._tasks.items()):
            if current is task:
                del self._tasks[kind]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Zamanlayıcı görevi hata ile sonlandı ({task.get_name()}): {error!r}")
