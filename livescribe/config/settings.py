"""
Runtime Settings

Single source of truth for backend endpoints and session tuning.
Values are read once from the environment; the resulting Settings
object is frozen and never mutated at runtime.

Environment:
- LIVESCRIBE_API_URL: Base HTTP URL (file upload, downloads)
- LIVESCRIBE_WS_URL: Base WebSocket URL (live transcription)
- LIVESCRIBE_API_TOKEN: Optional bearer token, forwarded as-is
"""

import os
from dataclasses import dataclass, field
from functools import lru_cache
from urllib.parse import quote

DEFAULT_API_URL = "http://localhost:8000"
DEFAULT_WS_URL = "ws://localhost:8000"
DEFAULT_LANGUAGE = "English"

# Languages offered by the backend UI; any string is passed through
DEFAULT_LANGUAGES = (
    "English",
    "Spanish",
    "French",
    "German",
    "Italian",
    "Portuguese",
)

LIVE_ENDPOINT = "/live-transcribe"
UPLOAD_ENDPOINT = "/file-transcribe"


def _env_str(name: str, default: str | None) -> str | None:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip()


def _env_float(name: str, default: float) -> float:
    value = _env_str(name, None)
    return float(value) if value is not None else default


def _env_int(name: str, default: int) -> int:
    value = _env_str(name, None)
    return int(value) if value is not None else default


@dataclass(frozen=True)
class Settings:
    """Configuration for a livescribe client process."""

    api_url: str = DEFAULT_API_URL
    ws_url: str = DEFAULT_WS_URL
    api_token: str | None = field(default=None, repr=False)
    language: str = DEFAULT_LANGUAGE
    sample_rate: int = 16000
    frame_ms: int = 100
    stop_timeout: float = 5.0
    connect_timeout: float = 10.0
    http_timeout: float = 300.0
    history_limit: int = 50

    def __post_init__(self):
        # Trailing slashes would double up when endpoints are appended
        object.__setattr__(self, "api_url", self.api_url.rstrip("/"))
        object.__setattr__(self, "ws_url", self.ws_url.rstrip("/"))
        if self.sample_rate <= 0:
            raise ValueError(f"Invalid sample_rate: {self.sample_rate}")
        if self.frame_ms <= 0:
            raise ValueError(f"Invalid frame_ms: {self.frame_ms}")
        if self.stop_timeout <= 0:
            raise ValueError(f"Invalid stop_timeout: {self.stop_timeout}")
        if self.history_limit < 1:
            raise ValueError(f"Invalid history_limit: {self.history_limit}")

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from LIVESCRIBE_* environment variables."""
        return cls(
            api_url=_env_str("LIVESCRIBE_API_URL", DEFAULT_API_URL),
            ws_url=_env_str("LIVESCRIBE_WS_URL", DEFAULT_WS_URL),
            api_token=_env_str("LIVESCRIBE_API_TOKEN", None),
            language=_env_str("LIVESCRIBE_LANGUAGE", DEFAULT_LANGUAGE),
            sample_rate=_env_int("LIVESCRIBE_SAMPLE_RATE", 16000),
            frame_ms=_env_int("LIVESCRIBE_FRAME_MS", 100),
            stop_timeout=_env_float("LIVESCRIBE_STOP_TIMEOUT", 5.0),
            connect_timeout=_env_float("LIVESCRIBE_CONNECT_TIMEOUT", 10.0),
            http_timeout=_env_float("LIVESCRIBE_HTTP_TIMEOUT", 300.0),
            history_limit=_env_int("LIVESCRIBE_HISTORY_LIMIT", 50),
        )

    @property
    def frame_samples(self) -> int:
        """Samples per audio frame at the negotiated rate."""
        return int(self.sample_rate * self.frame_ms / 1000)

    def live_uri(self, language: str) -> str:
        """WebSocket URI for a live session in the given language."""
        uri = f"{self.ws_url}{LIVE_ENDPOINT}?lang={quote(language, safe='')}"
        if self.api_token:
            uri += f"&token={quote(self.api_token, safe='')}"
        return uri

    def auth_headers(self) -> dict[str, str]:
        """HTTP headers carrying the bearer token, if one is configured."""
        if self.api_token:
            return {"Authorization": f"Bearer {self.api_token}"}
        return {}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings read from the environment (singleton)."""
    return Settings.from_env()
