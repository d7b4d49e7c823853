"""Configuration loading and management."""

from teahouse.config.loader import Settings, get_settings

__all__ = ["Settings", "get_settings"]
