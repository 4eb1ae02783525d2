"""Engine configuration loaded from environment variables."""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class EngineSettings(BaseSettings):
    """Engine settings loaded from environment variables with ACCEPTANCE_ prefix."""

    model_config = SettingsConfigDict(
        env_prefix="ACCEPTANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False

    # Layout of the project's configuration root
    config_dir: str = ".ctdd"
    plugins_dir_name: str = "plugins"
    spec_file: str = "spec.json"

    # Execution
    plugin_timeout_seconds: float = Field(default=30.0, gt=0.0)

    # Soft cap for evidence on aggregate check kinds
    evidence_max_chars: int = Field(default=400, ge=40)

    # Telemetry
    structured_logging: bool = False

    def plugins_dir(self, root: Path | str) -> Path:
        """Return the plugin definition directory for *root*."""
        return Path(root) / self.config_dir / self.plugins_dir_name

    def spec_path(self, root: Path | str) -> Path:
        """Return the project specification path for *root*."""
        return Path(root) / self.config_dir / self.spec_file


def load_settings(**overrides: object) -> EngineSettings:
    """Load settings from environment, with optional overrides for testing."""
    settings = EngineSettings(**overrides)  # type: ignore[arg-type]

    if settings.debug:
        logger.info(
            "Loaded engine settings: plugins under '%s/%s', timeout %.1fs",
            settings.config_dir,
            settings.plugins_dir_name,
            settings.plugin_timeout_seconds,
        )

    return settings
