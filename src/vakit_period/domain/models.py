"""Domain models and value objects."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Self

from vakit_period.domain.exceptions import InvalidPrayerTimesError


class PrayerName(str, Enum):
    """Beş vakit namaz (sıralı)."""

    FAJR = "fajr"
    DHUHR = "dhuhr"
    ASR = "asr"
    MAGHRIB = "maghrib"
    ISHA = "isha"

    @property
    def display_name(self) -> str:
        """Türkçe görüntüleme adı."""
        names = {
            PrayerName.FAJR: "Sabah",
            PrayerName.DHUHR: "Öğle",
            PrayerName.ASR: "İkindi",
            PrayerName.MAGHRIB: "Akşam",
            PrayerName.ISHA: "Yatsı",
        }
        return names[self]

    @property
    def icon(self) -> str:
        """Emoji ikonu."""
        icons = {
            PrayerName.FAJR: "🌙",
            PrayerName.DHUHR: "☀️",
            PrayerName.ASR: "🌤️",
            PrayerName.MAGHRIB: "🌇",
            PrayerName.ISHA: "🌃",
        }
        return icons[self]

    @property
    def index(self) -> int:
        """Gün içindeki sırası (0=sabah)."""
        return list(PrayerName).index(self)

    @property
    def next(self) -> "PrayerName | None":
        """Aynı gün içindeki bir sonraki vakit (yatsıdan sonra None)."""
        prayers = list(PrayerName)
        position = self.index + 1
        return prayers[position] if position < len(prayers) else None


@dataclass(frozen=True)
class Location:
    """Konum bilgisi (immutable value object)."""

    latitude: float
    longitude: float
    city: str = ""

    def __post_init__(self) -> None:
        """Koordinat doğrulaması."""
        if not -90 <= self.latitude <= 90:
            raise ValueError(f"Geçersiz enlem: {self.latitude}")
        if not -180 <= self.longitude <= 180:
            raise ValueError(f"Geçersiz boylam: {self.longitude}")


@dataclass(frozen=True)
class PrayerTime:
    """Tek bir namaz vakti (mutlak an)."""

    name: PrayerName
    at: datetime

    @property
    def date(self) -> date:
        """Vaktin takvim günü."""
        return self.at.date()

    @property
    def time_str(self) -> str:
        """HH:MM formatında."""
        return self.at.strftime("%H:%M")


@dataclass(frozen=True)
class DailyPrayerTimes:
    """Bir günün namaz vakitleri ve özel vakitleri."""

    date: date
    fajr: datetime
    sunrise: datetime
    dhuhr: datetime
    asr: datetime
    maghrib: datetime
    isha: datetime

    # Özel vakitler
    imsak: datetime | None = None
    sunset: datetime | None = None
    midnight: datetime | None = None
    first_third: datetime | None = None
    last_third: datetime | None = None

    def get_time(self, prayer: PrayerName) -> datetime:
        """Belirtilen vaktin başlangıç anını döndür."""
        mapping = {
            PrayerName.FAJR: self.fajr,
            PrayerName.DHUHR: self.dhuhr,
            PrayerName.ASR: self.asr,
            PrayerName.MAGHRIB: self.maghrib,
            PrayerName.ISHA: self.isha,
        }
        return mapping[prayer]

    def get_prayer_time(self, prayer: PrayerName) -> PrayerTime:
        """PrayerTime nesnesi olarak döndür."""
        return PrayerTime(name=prayer, at=self.get_time(prayer))

    def all_prayer_times(self) -> list[PrayerTime]:
        """Beş vakti sıralı liste olarak döndür."""
        return [self.get_prayer_time(prayer) for prayer in PrayerName]

    def special_times(self) -> list[tuple[str, datetime]]:
        """Mevcut özel vakitleri kronolojik sırada döndür."""
        candidates = [
            ("imsak", self.imsak),
            ("sunrise", self.sunrise),
            ("sunset", self.sunset),
            ("midnight", self.midnight),
            ("first_third", self.first_third),
            ("last_third", self.last_third),
        ]
        present = [(name, value) for name, value in candidates if value is not None]
        return sorted(present, key=lambda item: item[1])

    def validate(self, tomorrow: "DailyPrayerTimes | None" = None) -> None:
        """
        Vakitlerin sıralamasını doğrula.

        Raises:
            InvalidPrayerTimesError: Vakitler kesin artan sırada değilse
        """
        prayers = self.all_prayer_times()
        for current, following in zip(prayers, prayers[1:]):
            if not current.at < following.at:
                raise InvalidPrayerTimesError(
                    f"{self.date}: {current.name.value} ({current.at}) "
                    f">= {following.name.value} ({following.at})"
                )

        if not self.fajr < self.sunrise < self.dhuhr:
            raise InvalidPrayerTimesError(
                f"{self.date}: güneş doğuşu sabah ile öğle arasında değil ({self.sunrise})"
            )

        if self.midnight is not None:
            if not self.isha < self.midnight:
                raise InvalidPrayerTimesError(
                    f"{self.date}: gece yarısı yatsıdan önce ({self.midnight})"
                )
            if tomorrow is not None and not self.midnight < tomorrow.fajr:
                raise InvalidPrayerTimesError(
                    f"{self.date}: gece yarısı ertesi sabahtan sonra ({self.midnight})"
                )

    def is_valid(self, tomorrow: "DailyPrayerTimes | None" = None) -> bool:
        """Vakitler tutarlı mı?"""
        try:
            self.validate(tomorrow)
        except InvalidPrayerTimesError:
            return False
        return True

    def to_dict(self) -> dict[str, str | None]:
        """Dictionary olarak döndür (ISO 8601)."""

        def _iso(value: datetime | None) -> str | None:
            return value.isoformat() if value is not None else None

        return {
            "date": self.date.isoformat(),
            "fajr": _iso(self.fajr),
            "sunrise": _iso(self.sunrise),
            "dhuhr": _iso(self.dhuhr),
            "asr": _iso(self.asr),
            "maghrib": _iso(self.maghrib),
            "isha": _iso(self.isha),
            "imsak": _iso(self.imsak),
            "sunset": _iso(self.sunset),
            "midnight": _iso(self.midnight),
            "first_third": _iso(self.first_third),
            "last_third": _iso(self.last_third),
        }


@dataclass
class PrayerSettings:
    """Vakit hesaplama ve bildirim ayarları."""

    location: Location
    enabled_prayers: set[PrayerName] = field(default_factory=lambda: set(PrayerName))
    pre_alert_minutes: int = 0
    urgent_alerts: bool = True
    fajr_isha_method: int = 2  # Diyanet metodu
    asr_fiqh: int = 1  # Hanefi mezhebi

    def __post_init__(self) -> None:
        """Ön uyarı süresi doğrulaması."""
        if not 0 <= self.pre_alert_minutes <= 60:
            raise ValueError(f"Geçersiz ön uyarı süresi: {self.pre_alert_minutes}")

    def is_prayer_enabled(self, prayer: PrayerName) -> bool:
        """Belirtilen vakit için bildirim aktif mi?"""
        return prayer in self.enabled_prayers

    def to_dict(self) -> dict:
        """Dictionary olarak döndür."""
        return {
            "location": {
                "latitude": self.location.latitude,
                "longitude": self.location.longitude,
                "city": self.location.city,
            },
            "enabled_prayers": [p.value for p in PrayerName if p in self.enabled_prayers],
            "pre_alert_minutes": self.pre_alert_minutes,
            "urgent_alerts": self.urgent_alerts,
            "fajr_isha_method": self.fajr_isha_method,
            "asr_fiqh": self.asr_fiqh,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Dictionary'den oluştur."""
        location_data = data.get("location", {})
        return cls(
            location=Location(
                latitude=location_data.get("latitude", 41.0),
                longitude=location_data.get("longitude", 29.0),
                city=location_data.get("city", ""),
            ),
            enabled_prayers={
                PrayerName(p)
                for p in data.get("enabled_prayers", [p.value for p in PrayerName])
            },
            pre_alert_minutes=data.get("pre_alert_minutes", 0),
            urgent_alerts=data.get("urgent_alerts", True),
            fajr_isha_method=data.get("fajr_isha_method", 2),
            asr_fiqh=data.get("asr_fiqh", 1),
        )
