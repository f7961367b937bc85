# Copyright (c) 2023-2025, HaiyangLi <quantocean.li at gmail dot com>
# SPDX-License-Identifier: Apache-2.0

import logging
from typing import Any

from pydantic import Field, PositiveInt, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = (
    "StoreSettings",
    "configure_logging",
    "settings",
)

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


class StoreSettings(BaseSettings, frozen=True):
    """Process-wide defaults with environment variable support.

    Every value here is only a default; a store built with explicit options
    never consults these.
    """

    model_config = SettingsConfigDict(
        env_prefix="ARRAYSTORE_",
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    DEFAULT_SECTION_SIZE: PositiveInt = Field(
        default=10,
        description="Section size used when no explicit sizes apply",
    )
    DEBUG: bool = Field(
        default=False,
        description="Default for a store's debug flag",
    )
    LOG_LEVEL: str = Field(
        default="WARNING",
        description="Level applied to the package logger by configure_logging",
    )

    @field_validator("LOG_LEVEL", mode="before")
    def _validate_log_level(cls, value: Any) -> str:
        value = str(value).upper()
        if value not in _LOG_LEVELS:
            raise ValueError(
                f"Invalid log level {value!r}, must be one of {_LOG_LEVELS}"
            )
        return value


settings = StoreSettings()


def configure_logging(level: str | int | None = None) -> logging.Logger:
    """Attaches a stream handler to the package logger.

    Args:
        level: Logging level name or number. Defaults to
            ``settings.LOG_LEVEL``.

    Returns:
        logging.Logger: The ``arraystore`` logger.
    """
    logger = logging.getLogger("arraystore")
    logger.setLevel(level if level is not None else settings.LOG_LEVEL)
    if not any(getattr(h, "_arraystore", False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
        )
        handler._arraystore = True
        logger.addHandler(handler)
    return logger
