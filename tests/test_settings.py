"""Tests for settings loading and saving."""

from __future__ import annotations

from pathlib import Path

import pytest

from bodytrend.config.settings import DefaultsConfig, Settings, TrackingConfig


class TestTrackingConfig:
    def test_defaults(self) -> None:
        config = TrackingConfig()
        assert config.smoothing_window_days == 7
        assert config.status_range_days == 7

    def test_invalid(self) -> None:
        with pytest.raises(ValueError):
            TrackingConfig(smoothing_window_days=0)
        with pytest.raises(ValueError):
            TrackingConfig(status_range_days=0)


class TestSettings:
    """Tests for Settings.load/save."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        settings = Settings.load(tmp_path / "config.yaml")
        assert settings == Settings()

    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text(
            "tracking:\n"
            "  smoothing_window_days: 14\n"
            "rules:\n"
            "  override_path: rules.yaml\n"
            "defaults:\n"
            "  output_format: json\n"
        )
        settings = Settings.load(path)
        assert settings.tracking.smoothing_window_days == 14
        assert settings.tracking.status_range_days == 7
        assert settings.rules.override_path == Path("rules.yaml")
        assert settings.defaults == DefaultsConfig(output_format="json")

    def test_empty_sections(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("tracking:\nrules:\n")
        assert Settings.load(path) == Settings()

    def test_save_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "config.yaml"
        settings = Settings()
        settings.tracking.status_range_days = 14
        settings.rules.override_path = tmp_path / "rules.yaml"
        settings.save(path)
        loaded = Settings.load(path)
        assert loaded.tracking.status_range_days == 14
        assert loaded.rules.override_path == tmp_path / "rules.yaml"
