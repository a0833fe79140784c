"""
Configuration Module

Environment-driven settings for endpoints, timeouts and audio format.
"""

from .settings import (
    DEFAULT_LANGUAGES,
    LIVE_ENDPOINT,
    UPLOAD_ENDPOINT,
    Settings,
    get_settings,
)

__all__ = [
    "DEFAULT_LANGUAGES",
    "LIVE_ENDPOINT",
    "UPLOAD_ENDPOINT",
    "Settings",
    "get_settings",
]
