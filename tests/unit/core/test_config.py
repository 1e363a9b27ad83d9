"""Unit tests for layered YAML settings."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from app.core.config import AuthMode, Settings, get_settings
from app.core.config.yaml_source import deep_merge, load_yaml_dir


if TYPE_CHECKING:
    from pathlib import Path


pytestmark = pytest.mark.unit


class TestDeepMerge:
    """Tests for deep_merge."""

    def test_nested_override(self) -> None:
        base = {"mongodb": {"host": "localhost", "name": "recipe_app"}, "a": 1}
        override = {"mongodb": {"name": "recipe_app_test"}}

        merged = deep_merge(base, override)

        assert merged == {
            "mongodb": {"host": "localhost", "name": "recipe_app_test"},
            "a": 1,
        }
        assert base["mongodb"]["name"] == "recipe_app"


class TestLoadYamlDir:
    """Tests for load_yaml_dir."""

    def test_merges_files_in_name_order(self, tmp_path: Path) -> None:
        (tmp_path / "a.yaml").write_text("shopping:\n  convert_units: false\n")
        (tmp_path / "b.yaml").write_text("shopping:\n  convert_units: true\n")
        (tmp_path / "notes.txt").write_text("ignored")

        assert load_yaml_dir(tmp_path) == {"shopping": {"convert_units": True}}

    def test_missing_directory(self, tmp_path: Path) -> None:
        assert load_yaml_dir(tmp_path / "nope") == {}


class TestSettings:
    """Tests for the assembled settings."""

    def test_test_environment_overlay(self) -> None:
        """Should read the base files with the test overrides on top."""
        settings = get_settings()

        assert settings.is_testing
        assert settings.mongodb.name == "recipe_app_test"
        assert settings.auth_mode_enum == AuthMode.HEADER
        assert settings.maintenance.repair_enabled is False
        assert settings.rate_limiting.social == "60/minute"

    def test_environment_variables_win(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SHOPPING__CONVERT_UNITS", "true")

        assert Settings().shopping.convert_units is True

    def test_invalid_auth_mode(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("AUTH__MODE", "magic")

        with pytest.raises(ValueError, match="Invalid auth mode"):
            _ = Settings().auth_mode_enum
