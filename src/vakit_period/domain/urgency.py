"""Kalan süreye göre aciliyet seviyesi."""

from enum import IntEnum


class UrgencyLevel(IntEnum):
    """
    Vakit bitimine kalan süreye göre aciliyet seviyesi.

    Sıralama anlamlıdır: renk ve animasyon geçişleri yalnızca yukarı doğru
    tırmanır (RELAXED < NORMAL < ELEVATED < URGENT < CRITICAL).
    """

    RELAXED = 0  # >= 2 saat
    NORMAL = 1  # 30 dk - 2 saat
    ELEVATED = 2  # 10 - 30 dk
    URGENT = 3  # 5 - 10 dk
    CRITICAL = 4  # < 5 dk

    @classmethod
    def from_minutes(cls, minutes_remaining: float) -> "UrgencyLevel":
        """Kalan dakikadan seviye hesapla (alt sınırlar dahil)."""
        if minutes_remaining >= 120:
            return cls.RELAXED
        if minutes_remaining >= 30:
            return cls.NORMAL
        if minutes_remaining >= 10:
            return cls.ELEVATED
        if minutes_remaining >= 5:
            return cls.URGENT
        return cls.CRITICAL

    @property
    def description(self) -> str:
        """Erişilebilirlik açıklaması."""
        descriptions = {
            UrgencyLevel.RELAXED: "2 saatten fazla var",
            UrgencyLevel.NORMAL: "30 dakika ile 2 saat arası var",
            UrgencyLevel.ELEVATED: "10 ile 30 dakika arası var",
            UrgencyLevel.URGENT: "10 dakikadan az kaldı",
            UrgencyLevel.CRITICAL: "5 dakikadan az kaldı, vakit çıkmak üzere",
        }
        return descriptions[self]

    @property
    def should_pulse(self) -> bool:
        """Geri sayım vurgulanmalı mı?"""
        return self is UrgencyLevel.CRITICAL


def classify(seconds_remaining: float) -> UrgencyLevel:
    """
    Kalan saniyeyi aciliyet seviyesine çevir.

    Negatif değer vaktin geçtiğini gösterir; çağıran taraf durumu yeniden
    hesaplamalıdır.
    """
    return UrgencyLevel.from_minutes(seconds_remaining / 60)
