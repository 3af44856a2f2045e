"""Configuration module for the Travel Marketplace Browser."""

from .browser_config import (
    BROWSER_CONFIG,
    BrowserSettings,
    DebounceConfig,
    NotificationConfig,
    AuthRedirectConfig,
    BackendConfig,
    get_browser_settings,
)

__all__ = [
    'BROWSER_CONFIG',
    'BrowserSettings',
    'DebounceConfig',
    'NotificationConfig',
    'AuthRedirectConfig',
    'BackendConfig',
    'get_browser_settings',
]
