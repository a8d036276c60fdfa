"""JSON-based settings repository."""

import json
import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from vakit_period.domain.models import Location, PrayerSettings
from vakit_period.services.ports import SettingsRepositoryPort

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = Path.home() / ".config" / "vakit-period" / "settings.json"


class JsonSettingsRepository(SettingsRepositoryPort):
    """JSON dosyasında ayarları saklayan repository."""

    def __init__(self, file_path: Path | None = None) -> None:
        """
        Initialize repository.

        Args:
            file_path: Ayar dosyası yolu (varsayılan: ~/.config/vakit-period/settings.json)
        """
        self._file_path = file_path or DEFAULT_SETTINGS_PATH

    @property
    def file_path(self) -> Path:
        """Ayar dosyası yolu."""
        return self._file_path

    async def load(self) -> PrayerSettings:
        """Ayarları yükle; dosya yoksa veya bozuksa varsayılanı döndür."""
        if not self._file_path.exists():
            logger.info("Ayar dosyası bulunamadı, varsayılan ayarlar kullanılıyor.")
            return self._get_default_settings()

        try:
            async with aiofiles.open(self._file_path, encoding="utf-8") as f:
                data = json.loads(await f.read())
        except json.JSONDecodeError as e:
            logger.error(f"Ayar dosyası geçersiz JSON: {e}")
            return self._get_default_settings()

        try:
            settings = PrayerSettings.from_dict(data)
        except ValueError as e:
            logger.error(f"Ayar dosyası geçersiz değer içeriyor: {e}")
            return self._get_default_settings()

        logger.info(f"Ayarlar yüklendi: {self._file_path}")
        return settings

    async def save(self, settings: PrayerSettings) -> None:
        """Ayarları kaydet."""
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(self._file_path, "w", encoding="utf-8") as f:
            await f.write(json.dumps(settings.to_dict(), ensure_ascii=False, indent=2))
        logger.info(f"Ayarlar kaydedildi: {self._file_path}")

    def _get_default_settings(self) -> PrayerSettings:
        """Varsayılan ayarlar."""
        return PrayerSettings(
            location=Location(
                latitude=41.0082,  # İstanbul
                longitude=28.9784,
                city="İstanbul",
            )
        )

    async def delete(self) -> bool:
        """Ayar dosyasını sil."""
        if self._file_path.exists():
            await aiofiles.os.remove(self._file_path)
            logger.info(f"Ayar dosyası silindi: {self._file_path}")
            return True
        return False
