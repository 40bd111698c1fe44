"""Runtime settings read from the environment."""

import os
from typing import Optional


def _float_env(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


class Settings:
    """
    Settings for the TfL client and the cache actors.

    Values come from the environment at construction time; keyword
    arguments override them, which is what tests use.
    """

    def __init__(self, **overrides) -> None:
        self.TFL_BASE_URL: str = os.getenv("TFL_BASE_URL", "https://api.tfl.gov.uk")
        self.TFL_APP_ID: Optional[str] = os.getenv("TFL_APP_ID")
        self.TFL_APP_KEY: Optional[str] = os.getenv("TFL_APP_KEY")

        # Socket level timeout for each upstream GET
        self.TFL_HTTP_TIMEOUT_SEC: float = _float_env("TFL_HTTP_TIMEOUT_SEC", 5.0)
        # How long a caller waits on an actor before fetching on its own
        self.TFL_ACTOR_TIMEOUT_SEC: float = _float_env("TFL_ACTOR_TIMEOUT_SEC", 5.0)
        self.TFL_QUEUE_SIZE: int = _int_env("TFL_QUEUE_SIZE", 16)
        self.TFL_DISPLAY_TIMEZONE: str = os.getenv("TFL_DISPLAY_TIMEZONE", "Europe/London")

        # Logging
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
        self.LOG_FORMAT: str = os.getenv(
            "LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )
        self.LOG_FILE: Optional[str] = os.getenv("LOG_FILE")

        for key, value in overrides.items():
            if not hasattr(self, key):
                raise AttributeError(f"unknown setting {key}")
            setattr(self, key, value)
