"""Settings for metrika.

Values come from, in order of precedence: constructor arguments, ``METRIKA_*``
environment variables, a local ``.env`` file, then the defaults below.

Environment Variables:
    METRIKA_STORE_PATH: JSON file backing the local health store
        (default: ~/.metrika/health.json)
    METRIKA_WATER_GOAL_LITERS: Daily hydration goal in liters (default: 2.0)
    METRIKA_HISTORY_DAYS: Days covered by weight/water reports (default: 30)
    METRIKA_WORKOUT_DAYS: Days covered by the workout summary (default: 7)
    METRIKA_REQUEST_TIMEOUT_S: Timeout for async store/OCR calls (default: 10)
    METRIKA_MAX_WORKERS: Max async worker threads (default: 4)
    METRIKA_OCR_LANG: Tesseract language code (default: por)
    METRIKA_LOG_FORMAT: 'json' or 'text' (default: json)
    METRIKA_LOG_LEVEL: Log level name (default: INFO)
"""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_STORE_PATH = Path.home() / ".metrika" / "health.json"


class ConfigurationError(Exception):
    """A combination of settings that cannot work together."""

    def __init__(self, field: str, value, message: str):
        self.field = field
        self.value = value
        super().__init__(f"Invalid setting '{field}' = {value!r}: {message}")


class MetrikaSettings(BaseSettings):
    """Store location, report windows, async limits, OCR and logging options."""

    model_config = SettingsConfigDict(
        env_prefix="METRIKA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    store_path: Path = Field(
        default=DEFAULT_STORE_PATH,
        description="JSON file backing the local health store",
    )
    water_goal_liters: float = Field(default=2.0, gt=0.0, le=10.0)
    history_days: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Days shown in weight and water reports",
    )
    workout_days: int = Field(
        default=7,
        ge=1,
        le=60,
        description="Days shown in the workout summary",
    )
    request_timeout_s: float = Field(
        default=10.0,
        gt=0.0,
        description="Seconds an awaitable store or recognition call may take",
    )
    max_workers: int = Field(default=4, ge=1, le=32)
    ocr_lang: str = Field(
        default="por",
        min_length=1,
        description="Tesseract language code used for display recognition",
    )
    log_format: Literal["json", "text"] = "json"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v

    @field_validator("store_path", mode="before")
    @classmethod
    def expand_store_path(cls, v):
        """Expand '~' so the default and user paths behave alike."""
        if isinstance(v, (str, Path)):
            return Path(v).expanduser()
        return v

    @model_validator(mode="after")
    def check_windows(self) -> "MetrikaSettings":
        # the workout summary is drawn from the report window
        if self.workout_days > self.history_days:
            raise ConfigurationError(
                "workout_days",
                self.workout_days,
                f"must not exceed history_days ({self.history_days})",
            )
        return self

    @classmethod
    def from_env(cls) -> "MetrikaSettings":
        return cls()

    def with_overrides(self, **overrides) -> "MetrikaSettings":
        """
        Copy of these settings with some fields replaced.

        ``None`` values are skipped. The copy is validated again, so an
        override that breaks a constraint raises.

        Raises:
            TypeError: If an override names an unknown setting.
        """
        unknown = set(overrides) - set(type(self).model_fields)
        if unknown:
            raise TypeError(f"Unknown settings: {', '.join(sorted(unknown))}")

        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return type(self)(**values)


_settings: Optional[MetrikaSettings] = None


def get_settings() -> MetrikaSettings:
    """Process-wide settings, loaded from the environment on first use."""
    global _settings
    if _settings is None:
        _settings = MetrikaSettings.from_env()
    return _settings


def configure(settings: MetrikaSettings) -> None:
    global _settings
    _settings = settings


def reset_settings() -> None:
    """Forget the loaded settings; the next ``get_settings`` rereads the environment."""
    global _settings
    _settings = None
