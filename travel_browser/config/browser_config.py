"""Browser configuration settings for the Travel Marketplace Browser."""

from dataclasses import dataclass
from typing import Optional
import os


@dataclass
class DebounceConfig:
    """Quiescence window applied to text and date filters."""
    window_ms: int = 500


@dataclass
class NotificationConfig:
    """Notification display configuration."""
    duration_ms: int = 3000


@dataclass
class AuthRedirectConfig:
    """Navigation performed after an unauthorized response."""
    delay_ms: int = 2000
    landing_path: str = "/"
    home_path: str = "/home"


@dataclass
class BackendConfig:
    """HTTP backend connection configuration."""
    base_url: str = "http://localhost:5000/api"
    timeout_seconds: float = 30.0
    token: Optional[str] = None


@dataclass
class BrowserSettings:
    """Main browser configuration settings."""
    debounce: DebounceConfig = None
    notifications: NotificationConfig = None
    auth_redirect: AuthRedirectConfig = None
    backend: BackendConfig = None

    def __post_init__(self):
        """Initialize nested configs if not provided."""
        if self.debounce is None:
            self.debounce = DebounceConfig()
        if self.notifications is None:
            self.notifications = NotificationConfig()
        if self.auth_redirect is None:
            self.auth_redirect = AuthRedirectConfig()
        if self.backend is None:
            self.backend = BackendConfig()


# Default browser configuration. The debounce window, notification duration
# and redirect delay are fixed; only the dataclass constructors change them.
BROWSER_CONFIG = {
    "auth_redirect": {
        "landing_path": os.getenv("LANDING_PATH", "/"),
        "home_path": os.getenv("HOME_PATH", "/home"),
    },
    "backend": {
        "base_url": os.getenv("TRAVEL_API_BASE_URL", "http://localhost:5000/api"),
        "timeout_seconds": float(os.getenv("TRAVEL_API_TIMEOUT_SECONDS", "30")),
        "token": os.getenv("TRAVEL_API_TOKEN") or None,
    },
}


def get_browser_settings() -> BrowserSettings:
    """Get browser settings from configuration."""
    return BrowserSettings(
        auth_redirect=AuthRedirectConfig(**BROWSER_CONFIG["auth_redirect"]),
        backend=BackendConfig(**BROWSER_CONFIG["backend"]),
    )
