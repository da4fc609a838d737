"""Configuration: settings, logging and shared constants."""

from .logging_config import LoggingConfig, get_logger, setup_logging
from .settings import StarshipSettings, get_settings

__all__ = [
    "LoggingConfig",
    "get_logger",
    "setup_logging",
    "StarshipSettings",
    "get_settings",
]
