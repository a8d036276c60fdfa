"""Namaz periyodu durum makinesi."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import ClassVar

from vakit_period.domain.exceptions import InvalidPrayerTimesError, MissingTomorrowTimesError
from vakit_period.domain.models import DailyPrayerTimes, PrayerName, PrayerTime
from vakit_period.domain.urgency import UrgencyLevel, classify

logger = logging.getLogger(__name__)

# Gece yarısı ve yarının verisi yokken yatsı penceresinin üst sınırı
ISHA_OPEN_WINDOW = timedelta(hours=6)

# Eksik veri durumunda geçici yatsı penceresi
FALLBACK_WINDOW = timedelta(hours=1)

URGENT_THRESHOLD = timedelta(minutes=30)

# Öğle, ikindi ve akşam bir sonraki vaktin girişiyle kapanır
_CLOSED_BY = {
    PrayerName.DHUHR: PrayerName.ASR,
    PrayerName.ASR: PrayerName.MAGHRIB,
    PrayerName.MAGHRIB: PrayerName.ISHA,
}


# ============== States ==============


@dataclass(frozen=True)
class BeforeFajr:
    """Bugünkü sabah vaktinden önce."""

    kind: ClassVar[str] = "before_fajr"

    next_fajr: datetime

    @property
    def next_event_time(self) -> datetime:
        return self.next_fajr

    @property
    def is_active_time(self) -> bool:
        return False

    @property
    def description(self) -> str:
        return "Sabah vakti öncesi"


@dataclass(frozen=True)
class InProgress:
    """Bir vaktin geçerli penceresi içinde; deadline pencerenin kapandığı an."""

    kind: ClassVar[str] = "in_progress"

    prayer: PrayerName
    deadline: datetime

    @property
    def next_event_time(self) -> datetime:
        return self.deadline

    @property
    def is_active_time(self) -> bool:
        return True

    @property
    def description(self) -> str:
        return f"{self.prayer.display_name} vakti"


@dataclass(frozen=True)
class BetweenPrayers:
    """Hiçbir vaktin açık olmadığı ara (yalnızca güneş doğuşu ile öğle arası)."""

    kind: ClassVar[str] = "between_prayers"

    previous: PrayerName
    next: PrayerName
    next_start_time: datetime

    @property
    def next_event_time(self) -> datetime:
        return self.next_start_time

    @property
    def is_active_time(self) -> bool:
        return False

    @property
    def description(self) -> str:
        return f"{self.previous.display_name} ile {self.next.display_name} arası"


@dataclass(frozen=True)
class AfterIsha:
    """Yatsı vakti çıktıktan sonra, ertesi sabahtan önce."""

    kind: ClassVar[str] = "after_isha"

    tomorrow_fajr: datetime

    @property
    def next_event_time(self) -> datetime:
        return self.tomorrow_fajr

    @property
    def is_active_time(self) -> bool:
        return False

    @property
    def description(self) -> str:
        return "Yatsı vakti sonrası"


PeriodState = BeforeFajr | InProgress | BetweenPrayers | AfterIsha


# ============== Deriver ==============


def window_deadline(
    prayer: PrayerName,
    today: DailyPrayerTimes,
    tomorrow: DailyPrayerTimes | None = None,
) -> datetime:
    """Bir vaktin geçerli penceresinin kapandığı an."""
    if prayer is PrayerName.FAJR:
        return today.sunrise
    if prayer is PrayerName.ISHA:
        if today.midnight is not None:
            return today.midnight
        if tomorrow is not None:
            return tomorrow.fajr
        return today.isha + ISHA_OPEN_WINDOW
    return today.get_time(_CLOSED_BY[prayer])


def derive_state(
    now: datetime,
    today: DailyPrayerTimes,
    tomorrow: DailyPrayerTimes | None = None,
    *,
    strict: bool = False,
) -> PeriodState:
    """
    Verilen an için periyot durumunu hesapla.

    Pencereler yarı açıktır [başlangıç, bitiş). Sabah vakti güneş doğuşunda
    kapanır; güneş doğuşu ile öğle arası günün tek boşluğudur. Diğer vakitler
    bir sonrakinin başlangıcında kapanır.

    Args:
        now: Değerlendirilecek an
        today: Bugünün vakitleri
        tomorrow: Yarının vakitleri (yatsı sonrası için)
        strict: Tutarsız veride hata fırlat (aksi halde sabah öncesine dön)

    Raises:
        MissingTomorrowTimesError: Yatsı penceresi kapandı ve yarının verisi yok
        InvalidPrayerTimesError: strict=True iken vakitler tutarsızsa
    """
    try:
        today.validate(tomorrow)
    except InvalidPrayerTimesError as e:
        if strict:
            raise
        logger.error(f"Tutarsız vakit verisi, varsayılan duruma dönülüyor: {e}")
        return BeforeFajr(next_fajr=today.fajr)

    if now < today.fajr:
        return BeforeFajr(next_fajr=today.fajr)

    if now < today.sunrise:
        return InProgress(prayer=PrayerName.FAJR, deadline=today.sunrise)

    if now < today.dhuhr:
        return BetweenPrayers(
            previous=PrayerName.FAJR,
            next=PrayerName.DHUHR,
            next_start_time=today.dhuhr,
        )

    for prayer in (PrayerName.DHUHR, PrayerName.ASR, PrayerName.MAGHRIB):
        deadline = window_deadline(prayer, today)
        if now < deadline:
            return InProgress(prayer=prayer, deadline=deadline)

    return _derive_isha(now, today, tomorrow)


def _derive_isha(
    now: datetime,
    today: DailyPrayerTimes,
    tomorrow: DailyPrayerTimes | None,
) -> PeriodState:
    deadline = window_deadline(PrayerName.ISHA, today, tomorrow)
    if now < deadline:
        return InProgress(prayer=PrayerName.ISHA, deadline=deadline)

    if tomorrow is None:
        raise MissingTomorrowTimesError(
            f"{today.date}: yatsı penceresi {deadline} anında kapandı, yarının vakitleri yok"
        )
    return AfterIsha(tomorrow_fajr=tomorrow.fajr)


def fallback_state(now: datetime) -> PeriodState:
    """Yarının verisi gelene kadar gösterilecek geçici yatsı durumu."""
    return InProgress(prayer=PrayerName.ISHA, deadline=now + FALLBACK_WINDOW)


def governing_day(
    now: datetime,
    today: DailyPrayerTimes,
    previous: DailyPrayerTimes | None = None,
) -> DailyPrayerTimes:
    """
    Verilen anın hangi günün vakitlerine göre değerlendirileceğini seç.

    Takvim günü gece 00:00'da değişir, ama önceki günün gecesi bugünün
    sabah vaktine kadar sürer: yatsı penceresi gece yarısına kadar açıktır,
    ardından yatsı sonrası başlar. Bu sürede önceki gün, bugün de onun
    "yarını" olarak kullanılmalıdır.

    Args:
        now: Değerlendirilecek an
        today: Takvim gününün vakitleri
        previous: Bir önceki günün vakitleri (opsiyonel)
    """
    if previous is None or now >= today.fajr:
        return today
    if previous.date != today.date - timedelta(days=1):
        return today
    return previous


# ============== Snapshot ==============


@dataclass(frozen=True)
class PrayerPeriod:
    """Belirli bir andaki periyot durumunun değişmez görüntüsü."""

    state: PeriodState
    today_prayers: DailyPrayerTimes
    tomorrow_prayers: DailyPrayerTimes | None
    calculated_at: datetime
    incomplete: bool = False

    @property
    def current_prayer(self) -> PrayerName | None:
        """Aktif vakit (vakit içindeyse)."""
        if isinstance(self.state, InProgress):
            return self.state.prayer
        return None

    @property
    def next_prayer(self) -> PrayerTime | None:
        """Sıradaki vakit ve başlangıç anı."""
        state = self.state
        if isinstance(state, BeforeFajr):
            return PrayerTime(name=PrayerName.FAJR, at=state.next_fajr)
        if isinstance(state, AfterIsha):
            return PrayerTime(name=PrayerName.FAJR, at=state.tomorrow_fajr)
        if isinstance(state, BetweenPrayers):
            return PrayerTime(name=state.next, at=state.next_start_time)

        following = state.prayer.next
        if following is not None:
            return self.today_prayers.get_prayer_time(following)
        if self.tomorrow_prayers is not None:
            return self.tomorrow_prayers.get_prayer_time(PrayerName.FAJR)
        return None

    @property
    def window_start(self) -> datetime | None:
        """Mevcut pencerenin başlangıcı (sabah öncesi ve yatsı sonrası için None)."""
        if isinstance(self.state, InProgress):
            return self.today_prayers.get_time(self.state.prayer)
        if isinstance(self.state, BetweenPrayers):
            return self.today_prayers.sunrise
        return None

    def time_until_next_event(self, now: datetime | None = None) -> timedelta:
        """Sıradaki sınıra kalan süre (negatifse durum yeniden hesaplanmalı)."""
        if now is None:
            now = self.calculated_at
        return self.state.next_event_time - now

    def period_progress(self, now: datetime | None = None) -> float:
        """Mevcut pencerenin geçen oranı (0.0 - 1.0)."""
        start = self.window_start
        if start is None:
            return 0.0
        if now is None:
            now = self.calculated_at

        total = (self.state.next_event_time - start).total_seconds()
        if total <= 0:
            return 0.0

        elapsed = (now - start).total_seconds()
        return min(max(elapsed / total, 0.0), 1.0)

    def is_urgent(self, now: datetime | None = None) -> bool:
        """Vakit çıkmasına 30 dakika veya daha az mı kaldı?"""
        if not isinstance(self.state, InProgress):
            return False
        return self.time_until_next_event(now) <= URGENT_THRESHOLD

    def urgency(self, now: datetime | None = None) -> UrgencyLevel:
        """Kalan süreye göre aciliyet seviyesi."""
        return classify(self.time_until_next_event(now).total_seconds())

    def countdown_string(self, now: datetime | None = None) -> str:
        """Geri sayım metni (ör. "02:30:15" veya "45:30")."""
        total_seconds = max(int(self.time_until_next_event(now).total_seconds()), 0)
        hours, remainder = divmod(total_seconds, 3600)
        minutes, seconds = divmod(remainder, 60)
        if hours > 0:
            return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
        return f"{minutes:02d}:{seconds:02d}"

    def status_text(self, now: datetime | None = None) -> str:
        """Kısa durum metni."""
        if isinstance(self.state, InProgress):
            return f"Bitişe {self.countdown_string(now)}"
        return f"Başlangıca {self.countdown_string(now)}"


def calculate_period(
    now: datetime,
    today: DailyPrayerTimes,
    tomorrow: DailyPrayerTimes | None = None,
    *,
    strict: bool = False,
) -> PrayerPeriod:
    """Durumu hesapla ve snapshot olarak döndür."""
    return PrayerPeriod(
        state=derive_state(now, today, tomorrow, strict=strict),
        today_prayers=today,
        tomorrow_prayers=tomorrow,
        calculated_at=now,
    )
