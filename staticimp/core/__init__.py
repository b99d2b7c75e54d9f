"""Core: settings, application bootstrap, and HTTP error mapping."""

from staticimp.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
