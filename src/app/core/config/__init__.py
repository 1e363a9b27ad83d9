"""Layered application settings: defaults, YAML files, then the environment."""

from .settings import AuthMode, Settings, get_settings, settings


__all__ = [
    "AuthMode",
    "Settings",
    "get_settings",
    "settings",
]
