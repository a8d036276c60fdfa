"""Domain exceptions."""


class PrayerPeriodError(Exception):
    """Base class for prayer period errors."""


class InvalidPrayerTimesError(PrayerPeriodError, ValueError):
    """Vakitler sıralı değil veya eksik (sağlayıcı sözleşmesi ihlali)."""


class MissingTomorrowTimesError(PrayerPeriodError):
    """Gece yarısından sonra yarının vakitleri mevcut değil."""


class PrayerTimeProviderError(PrayerPeriodError):
    """Vakit sağlayıcısından veri alınamadı."""


class NotificationRescheduleError(PrayerPeriodError):
    """Bildirimler yeniden planlanamadı."""
