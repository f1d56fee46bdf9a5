"""Application settings loading."""

from .app import AppSettings, CacheBackend, get_settings


__all__ = ["AppSettings", "CacheBackend", "get_settings"]
