"""
Configuration management for pawn-context

Handles defaults, environment overrides and per-workspace settings.
"""

from .loader import ConfigurationLoader
from .defaults import DEFAULT_SETTINGS

__all__ = ["ConfigurationLoader", "DEFAULT_SETTINGS"]
