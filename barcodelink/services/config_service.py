"""
==============================================================================
Config Service Module
==============================================================================

Holds the active AppConfig, loaded once at startup and persisted on every
update.

==============================================================================
"""

from __future__ import annotations

import logging

from barcodelink.db.store import ConfigRepository
from barcodelink.schemas.config import AppConfig, AppConfigUpdate


# Module logger
logger = logging.getLogger(__name__)


class ConfigService:
    """
    Service for the user configuration.

    Attributes:
        _repository: Configuration persistence
        _config: Active configuration
        _saved: Whether the last save succeeded
    """

    def __init__(self, repository: ConfigRepository) -> None:
        self._repository = repository
        self._config = repository.load()
        self._saved = True

        logger.info(
            f"⚙️ Config loaded: device={self._config.device_id}, "
            f"target={self._config.remote_target or '-'}, auto_sync={self._config.auto_sync}"
        )

    @property
    def config(self) -> AppConfig:
        return self._config

    @property
    def durability_degraded(self) -> bool:
        return not self._saved

    def update(self, data: AppConfigUpdate) -> AppConfig:
        """
        Apply and persist a configuration update.

        The new configuration takes effect even if it cannot be saved.
        """
        self._config = data.apply_to(self._config)
        self._saved = self._repository.save(self._config)

        logger.info(f"⚙️ Config updated: {data.model_dump(exclude_none=True)}")
        return self._config
