import logging

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from vramprobe.sources.windows import DISPLAY_ADAPTER_CLASS_KEY

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VRAMPROBE_",
        extra="ignore",
    )

    # Logging goes to stderr; stdout's first line is reserved for USED;TOTAL;UTIL
    log_level: str = Field(default="WARNING")
    log_format: str = Field(default="text")  # "text" or "json"

    # Performance-counter access
    powershell_path: str = Field(default="powershell")
    counter_timeout: float = Field(default=15.0)  # Seconds per Get-Counter call

    # Hardware-description registry
    adapter_class_key: str = Field(default=DISPLAY_ADAPTER_CLASS_KEY)

    @model_validator(mode="before")
    @classmethod
    def parse_log_level(cls, values: dict) -> dict:
        log_level = values.get("log_level")
        if log_level is None:
            return values
        if isinstance(log_level, int) or (isinstance(log_level, str) and log_level.isdigit()):
            for level, name in logging._levelToName.items():
                if level == int(log_level):
                    values["log_level"] = name
                    break
        return values

    @model_validator(mode="after")
    def validate_values(self) -> "Settings":
        """Reject settings that would make every query fail."""
        if self.counter_timeout <= 0:
            raise ValueError(f"counter_timeout must be positive (got: {self.counter_timeout})")
        if self.log_format not in ("text", "json"):
            raise ValueError(f"log_format must be 'text' or 'json' (got: {self.log_format})")
        return self


def load_settings() -> Settings:
    """Build settings from VRAMPROBE_* variables and .env, or defaults if they are invalid.

    Settings only tune logging and query plumbing; a bad value must not keep the
    probe from printing its line.
    """
    try:
        return Settings()
    except ValueError as e:
        detail = " ".join(str(e).split())
        logger.warning(f"Ignoring invalid VRAMPROBE_* settings, using defaults: {detail}")
        return Settings.model_construct()


settings = load_settings()


def init_logging() -> None:
    """Initialize logging from settings."""
    from .logging_config import setup_logging

    level = getattr(logging, settings.log_level.upper(), logging.WARNING)
    setup_logging(level=level, log_format=settings.log_format)
