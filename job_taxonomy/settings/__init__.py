"""Environment-driven settings for classification runs."""

from .app import AppSettings, get_settings


__all__ = ["AppSettings", "get_settings"]
