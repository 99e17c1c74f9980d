"""
==============================================================================
Configuration Schemas Module
==============================================================================

User-editable configuration surface, persisted in the blob store and loaded
once at startup. Missing values fall back to the process settings.

==============================================================================
"""

from __future__ import annotations

import random
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from barcodelink.config import Settings


def generate_device_id() -> str:
    """Generate a default device id like 'DEV-4821'."""
    return f"DEV-{random.randint(0, 9999)}"


class AppConfig(BaseModel):
    """
    Persisted application configuration.

    Attributes:
        remote_target: Sync destination (http(s) URL, local path or UNC path)
        auto_sync: Start a sync after every accepted scan
        device_id: Identifier sent along with every remote write
    """

    remote_target: str = Field(default="", max_length=1024)
    auto_sync: bool = Field(default=False)
    device_id: str = Field(default_factory=generate_device_id, min_length=1, max_length=64)

    @field_validator("remote_target", "device_id")
    @classmethod
    def strip_whitespace(cls, v: str) -> str:
        return v.strip()

    @classmethod
    def defaults(cls, settings: Settings) -> "AppConfig":
        """Build the default configuration from process settings."""
        return cls(
            remote_target=settings.default_remote_target,
            auto_sync=settings.default_auto_sync,
        )


class AppConfigUpdate(BaseModel):
    """Partial configuration update. Omitted fields keep their value."""

    remote_target: Optional[str] = Field(default=None, max_length=1024)
    auto_sync: Optional[bool] = None
    device_id: Optional[str] = Field(default=None, min_length=1, max_length=64)

    def apply_to(self, config: AppConfig) -> AppConfig:
        """Return a validated copy of config with this update applied."""
        merged = config.model_dump()
        merged.update(self.model_dump(exclude_none=True))
        return AppConfig.model_validate(merged)
