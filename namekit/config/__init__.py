"""Configuration module for namekit."""

from namekit.config.settings import NamekitSettings, get_settings, reload_settings

__all__ = ["NamekitSettings", "get_settings", "reload_settings"]
