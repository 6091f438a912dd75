"""Configuration loading for the droplet runtime."""
from __future__ import annotations

from .manager import ConfigManager, RuntimeSettings, apply_settings, configure

__all__ = ["ConfigManager", "RuntimeSettings", "apply_settings", "configure"]
