"""Prayer time calculation service."""

import logging
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

from pyIslam.praytimes import Prayer, PrayerConf
from timezonefinder import TimezoneFinder

from vakit_period.domain.exceptions import InvalidPrayerTimesError, PrayerTimeProviderError
from vakit_period.domain.models import DailyPrayerTimes, Location
from vakit_period.services.ports import PrayerTimeProviderPort

logger = logging.getLogger(__name__)

# İmsak, sabah vaktinden bu kadar önce kabul edilir
IMSAK_MARGIN = timedelta(minutes=10)


class PrayerService(PrayerTimeProviderPort):
    """Konuma göre günlük namaz vakitlerini hesaplayan sağlayıcı."""

    def __init__(
        self,
        location: Location,
        *,
        fajr_isha_method: int = 2,
        asr_fiqh: int = 1,
        rounding_seconds: int = 30,
    ) -> None:
        """
        Initialize prayer service.

        Args:
            location: Konum bilgisi
            fajr_isha_method: İmsak/yatsı hesaplama metodu (2=Diyanet)
            asr_fiqh: Fıkhi mezhep (1=Hanefi, 0=Şafi)
            rounding_seconds: Yuvarlama saniyesi
        """
        self._location = location
        self._fajr_isha_method = fajr_isha_method
        self._asr_fiqh = asr_fiqh
        self._rounding_seconds = rounding_seconds
        self._tz_name = "UTC"
        self._tz = ZoneInfo("UTC")
        self._resolve_timezone()

    def _resolve_timezone(self) -> None:
        tzf = TimezoneFinder()
        self._tz_name = (
            tzf.timezone_at(lat=self._location.latitude, lng=self._location.longitude) or "UTC"
        )
        self._tz = ZoneInfo(self._tz_name)

    @property
    def timezone(self) -> ZoneInfo:
        """Timezone nesnesi."""
        return self._tz

    @property
    def timezone_name(self) -> str:
        """Timezone adı."""
        return self._tz_name

    @property
    def location(self) -> Location:
        """Konum bilgisi."""
        return self._location

    def now(self) -> datetime:
        """Konumun saat dilimindeki şu an."""
        return datetime.now(self._tz)

    def update_location(self, location: Location) -> None:
        """Konum güncelle ve timezone'u yeniden hesapla."""
        self._location = location
        self._resolve_timezone()
        logger.info(f"Konum güncellendi: {location.city or location} ({self._tz_name})")

    def update_method(self, fajr_isha_method: int, asr_fiqh: int) -> None:
        """Hesaplama metodunu güncelle."""
        self._fajr_isha_method = fajr_isha_method
        self._asr_fiqh = asr_fiqh

    def _utc_offset_hours(self, target_date: date) -> float:
        """Hedef gün için UTC offset (yaz saati dahil)."""
        offset = datetime.combine(target_date, time(12), tzinfo=self._tz).utcoffset()
        if offset is None:
            return 0.0
        return offset.total_seconds() / 3600

    def _to_datetime(self, target_date: date, time_obj: time) -> datetime:
        """Saati mutlak ana çevir ve dakikaya yuvarla."""
        dt = datetime.combine(target_date, time_obj, tzinfo=self._tz)
        adjusted = dt + timedelta(seconds=self._rounding_seconds)
        return adjusted.replace(second=0, microsecond=0)

    def _raw_times(self, target_date: date) -> Prayer:
        conf = PrayerConf(
            self._location.longitude,
            self._location.latitude,
            self._utc_offset_hours(target_date),
            self._fajr_isha_method,
            self._asr_fiqh,
        )
        return Prayer(conf, target_date)

    def calculate(self, target_date: date) -> DailyPrayerTimes:
        """
        Belirtilen tarih için namaz vakitlerini hesapla.

        Gece yarısı (şer'i) akşam ile ertesi sabah arasının orta noktası,
        gecenin üçte birleri de aynı aralıktan hesaplanır.
        """
        prayer = self._raw_times(target_date)
        next_day = target_date + timedelta(days=1)
        next_fajr = self._to_datetime(next_day, self._raw_times(next_day).fajr_time())

        fajr = self._to_datetime(target_date, prayer.fajr_time())
        maghrib = self._to_datetime(target_date, prayer.maghreb_time())
        isha = self._to_datetime(target_date, prayer.ishaa_time())
        if isha <= maghrib:
            # Yüksek enlemlerde yatsı gece yarısını geçebilir
            isha += timedelta(days=1)

        night = next_fajr - maghrib
        times = DailyPrayerTimes(
            date=target_date,
            fajr=fajr,
            sunrise=self._to_datetime(target_date, prayer.sherook_time()),
            dhuhr=self._to_datetime(target_date, prayer.dohr_time()),
            asr=self._to_datetime(target_date, prayer.asr_time()),
            maghrib=maghrib,
            isha=isha,
            imsak=fajr - IMSAK_MARGIN,
            sunset=maghrib,
            midnight=maghrib + night / 2,
            first_third=maghrib + night / 3,
            last_third=maghrib + night * 2 / 3,
        )
        times.validate()
        return times

    def calculate_range(self, start_date: date, days: int) -> list[DailyPrayerTimes]:
        """Belirtilen tarihten itibaren n gün için vakitleri hesapla."""
        return [self.calculate(start_date + timedelta(days=i)) for i in range(days)]

    def _fetch(self, target_date: date) -> DailyPrayerTimes:
        try:
            return self.calculate(target_date)
        except InvalidPrayerTimesError:
            raise
        except (ArithmeticError, ValueError) as e:
            raise PrayerTimeProviderError(f"{target_date} için vakitler hesaplanamadı: {e}") from e

    async def fetch_today(self) -> DailyPrayerTimes:
        """Bugünün vakitlerini getir."""
        return self._fetch(self.now().date())

    async def fetch_tomorrow(self) -> DailyPrayerTimes:
        """Yarının vakitlerini getir."""
        return self._fetch(self.now().date() + timedelta(days=1))

    async def fetch_yesterday(self) -> DailyPrayerTimes:
        """Dünün vakitlerini getir."""
        return self._fetch(self.now().date() - timedelta(days=1))
