# src/pycoolmaster/config.py
import logging.config
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .core.constants import DEFAULT_PORT


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Controller Settings
    COOLMASTER_HOST: str = "localhost"
    COOLMASTER_PORT: int = Field(default=DEFAULT_PORT, ge=1, le=65535)
    COOLMASTER_UID: str = "L1.100"
    COOLMASTER_TIMEOUT: float = Field(default=5.0, gt=0)
    COOLMASTER_RETRIES: int = Field(default=3, ge=1)

    # Refresh cadence for the publisher loop, in seconds
    POLL_INTERVAL: int = Field(default=60, ge=5)

    # MQTT Settings
    MQTT_ENABLED: bool = False
    MQTT_HOST: str = "localhost"
    MQTT_PORT: int = 1883
    MQTT_USER: str | None = None
    MQTT_PASSWORD: str | None = None
    MQTT_TOPIC_PREFIX: str = "hvac/coolmaster"

    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: str = "~/.cache/pycoolmaster/pycoolmaster.log"

    @field_validator("COOLMASTER_HOST", "COOLMASTER_UID")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("MQTT_TOPIC_PREFIX")
    @classmethod
    def strip_topic_slashes(cls, v: str) -> str:
        return v.strip("/")


settings = Settings()

LOG_FILE_PATH = Path(settings.LOG_FILE_PATH).expanduser()
LOG_FILE_PATH.parent.mkdir(parents=True, exist_ok=True)

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "console": {
            "format": "[%(name)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "file": {
            "format": "%(levelname)s %(asctime)s [%(name)s] %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "default": {
            "formatter": "console",
            "class": "rich.logging.RichHandler",
            "rich_tracebacks": True,
        },
        "file": {
            "formatter": "file",
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(LOG_FILE_PATH),
            "maxBytes": 5 * 1024 * 1024,
            "backupCount": 3,
            "encoding": "utf-8",
        },
    },
    "loggers": {
        "pycoolmaster": {
            "handlers": ["default", "file"],
            "level": settings.LOG_LEVEL.upper(),
        },
    },
}

logging.config.dictConfig(LOGGING_CONFIG)
