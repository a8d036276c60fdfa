"""Main entry point for Vakit-Period application."""

import logging

import uvicorn

from vakit_period.api.app import create_app
from vakit_period.config import get_config, setup_logging


def main() -> None:
    """Run the Vakit-Period application."""
    config = get_config()
    setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info("Vakit-Period başlatılıyor...")
    logger.info(f"Ayar dosyası: {config.settings_path}")
    logger.info(f"Yeniden hesaplama aralığı: {config.recalculation_interval}")

    app = create_app(config)

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


if __name__ == "__main__":
    main()
