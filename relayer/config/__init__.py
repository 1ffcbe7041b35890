"""
Relayer Configuration

Environment-driven settings.
"""

from .settings import AppSettings, get_settings, load_environment_file

__all__ = [
    "AppSettings",
    "get_settings",
    "load_environment_file",
]
