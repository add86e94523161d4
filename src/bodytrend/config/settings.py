"""Application settings and configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml


def _default_config_dir() -> Path:
    """Return the default configuration directory."""
    return Path.home() / ".bodytrend"


@dataclass
class TrackingConfig:
    """Smoothing and status window configuration."""

    smoothing_window_days: int = 7  # EWMA alpha = 2 / (N + 1)
    status_range_days: int = 7

    def __post_init__(self) -> None:
        if self.smoothing_window_days < 1:
            raise ValueError(
                f"smoothing_window_days must be at least 1, got {self.smoothing_window_days}"
            )
        if self.status_range_days < 1:
            raise ValueError(
                f"status_range_days must be at least 1, got {self.status_range_days}"
            )


@dataclass
class RulesConfig:
    """Status rule configuration."""

    override_path: Optional[Path] = None  # YAML/JSON merged over the defaults


@dataclass
class DefaultsConfig:
    """Default values for various operations."""

    output_format: str = "table"  # "table" or "json"


@dataclass
class Settings:
    """Main application settings."""

    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    rules: RulesConfig = field(default_factory=RulesConfig)
    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Settings":
        """Load settings from YAML file or return defaults.

        Args:
            config_path: Path to config.yaml. If None, uses ~/.bodytrend/config.yaml

        Returns:
            Settings instance
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        if not config_path.exists():
            return cls()

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        settings = cls()

        # Parse tracking config
        if "tracking" in data:
            tracking_data = data["tracking"] or {}
            settings.tracking = TrackingConfig(
                smoothing_window_days=int(
                    tracking_data.get("smoothing_window_days", settings.tracking.smoothing_window_days)
                ),
                status_range_days=int(
                    tracking_data.get("status_range_days", settings.tracking.status_range_days)
                ),
            )

        # Parse rules config
        if "rules" in data:
            rules_data = data["rules"] or {}
            if rules_data.get("override_path"):
                settings.rules.override_path = Path(rules_data["override_path"]).expanduser()

        # Parse defaults
        if "defaults" in data:
            def_data = data["defaults"] or {}
            if "output_format" in def_data:
                settings.defaults.output_format = def_data["output_format"]

        return settings

    def save(self, config_path: Optional[Path] = None) -> None:
        """Save current settings to YAML file.

        Args:
            config_path: Path to save config.yaml. If None, uses ~/.bodytrend/config.yaml
        """
        if config_path is None:
            config_path = _default_config_dir() / "config.yaml"

        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "tracking": {
                "smoothing_window_days": self.tracking.smoothing_window_days,
                "status_range_days": self.tracking.status_range_days,
            },
            "rules": {
                "override_path": str(self.rules.override_path) if self.rules.override_path else None,
            },
            "defaults": {
                "output_format": self.defaults.output_format,
            },
        }

        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)


# Global settings instance (lazy loaded)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance, loading from disk if needed."""
    global _settings
    if _settings is None:
        _settings = Settings.load()
    return _settings


def reload_settings() -> Settings:
    """Force reload settings from disk."""
    global _settings
    _settings = Settings.load()
    return _settings
