"""Domain layer - Business entities, value objects and the period state machine."""

from vakit_period.domain.exceptions import (
    InvalidPrayerTimesError,
    MissingTomorrowTimesError,
    NotificationRescheduleError,
    PrayerPeriodError,
    PrayerTimeProviderError,
)
from vakit_period.domain.models import (
    DailyPrayerTimes,
    Location,
    PrayerName,
    PrayerSettings,
    PrayerTime,
)
from vakit_period.domain.period import (
    AfterIsha,
    BeforeFajr,
    BetweenPrayers,
    InProgress,
    PeriodState,
    PrayerPeriod,
    calculate_period,
    derive_state,
    governing_day,
)
from vakit_period.domain.urgency import UrgencyLevel, classify

__all__ = [
    "AfterIsha",
    "BeforeFajr",
    "BetweenPrayers",
    "DailyPrayerTimes",
    "InProgress",
    "InvalidPrayerTimesError",
    "Location",
    "MissingTomorrowTimesError",
    "NotificationRescheduleError",
    "PeriodState",
    "PrayerName",
    "PrayerPeriod",
    "PrayerPeriodError",
    "PrayerSettings",
    "PrayerTime",
    "PrayerTimeProviderError",
    "UrgencyLevel",
    "calculate_period",
    "classify",
    "derive_state",
    "governing_day",
]
