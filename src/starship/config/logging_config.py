"""Centralized logging configuration for starship-server.

Provides consistent, configurable logging across the GraphQL surface,
the download endpoint and the background event transports, with
environment-based control over verbosity and log format.
"""

import logging
import logging.config
import os
from enum import Enum


class LogLevel(str, Enum):
    """Supported log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogVerbosity(str, Enum):
    """Log verbosity modes."""
    QUIET = "QUIET"      # Only errors and critical
    NORMAL = "NORMAL"    # Standard logging (info and above)
    VERBOSE = "VERBOSE"  # Info level logging, library loggers included
    DEBUG = "DEBUG"      # Full debug logging


class LogFormat(str, Enum):
    """Log format options."""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"


def get_log_level_from_verbosity(verbosity: str) -> str:
    """Map verbosity mode to log level."""
    verbosity_map = {
        LogVerbosity.QUIET: LogLevel.ERROR.value,
        LogVerbosity.NORMAL: LogLevel.INFO.value,
        LogVerbosity.VERBOSE: LogLevel.INFO.value,
        LogVerbosity.DEBUG: LogLevel.DEBUG.value,
    }
    try:
        return verbosity_map[LogVerbosity(verbosity.upper())]
    except ValueError:
        return LogLevel.INFO.value


class LoggingConfig:
    """Centralized logging configuration manager."""

    # Library modules that are only interesting when something breaks
    ERROR_ONLY_MODULES = [
        "botocore",
        "boto3",
        "s3transfer",
        "urllib3",
        "asyncio",
    ]

    # Modules kept at WARNING unless running with DEBUG verbosity
    QUIET_MODULES = [
        "asyncpg",
        "redis",
        "strawberry",
    ]

    FORMATS = {
        LogFormat.SIMPLE.value: "%(asctime)s - %(levelname)s - %(message)s",
        LogFormat.DETAILED.value: "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
        LogFormat.JSON.value: '{"time":"%(asctime)s","level":"%(levelname)s","module":"%(name)s","message":"%(message)s"}',
    }

    _configured = False

    @classmethod
    def configure(cls, force: bool = False) -> None:
        """Configure logging based on environment variables.

        Reads ``LOG_LEVEL``, ``LOG_VERBOSITY`` and ``LOG_FORMAT``. An explicit
        ``LOG_LEVEL`` wins over the level implied by the verbosity mode.
        """
        if cls._configured and not force:
            return

        log_verbosity = os.getenv("LOG_VERBOSITY", "NORMAL").upper()
        log_level = os.getenv("LOG_LEVEL", "").upper() or get_log_level_from_verbosity(log_verbosity)
        log_format = os.getenv("LOG_FORMAT", LogFormat.SIMPLE.value).lower()

        if log_level not in LogLevel.__members__:
            log_level = LogLevel.INFO.value

        format_string = cls.FORMATS.get(log_format, cls.FORMATS[LogFormat.SIMPLE.value])

        logging_config = {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": format_string,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "level": log_level,
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {
                "level": log_level,
                "handlers": ["console"],
            },
            "loggers": {},
        }

        for module in cls.ERROR_ONLY_MODULES:
            logging_config["loggers"][module] = {
                "level": "ERROR",
                "handlers": ["console"],
                "propagate": False,
            }

        for module in cls.QUIET_MODULES:
            logging_config["loggers"][module] = {
                "level": "DEBUG" if log_verbosity == LogVerbosity.DEBUG.value else "WARNING",
                "handlers": ["console"],
                "propagate": False,
            }

        logging.config.dictConfig(logging_config)
        cls._configured = True

        logging.getLogger(__name__).debug(
            f"Logging configured: level={log_level}, verbosity={log_verbosity}, format={log_format}"
        )

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Get a configured logger for the given module name."""
        return logging.getLogger(name)

    @classmethod
    def set_module_level(cls, module_name: str, level: str) -> None:
        """Set log level for a specific module."""
        logging.getLogger(module_name).setLevel(getattr(logging, level.upper()))

    @classmethod
    def silence_module(cls, module_name: str) -> None:
        """Silence all logging from a module."""
        cls.set_module_level(module_name, "CRITICAL")


def setup_logging() -> None:
    """Setup logging configuration from environment variables.

    This is the main entry point for configuring logging in the application.
    It should be called once at application startup.
    """
    LoggingConfig.configure()


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger.

    Args:
        name: Module name (usually __name__)

    Returns:
        Configured logger instance
    """
    return LoggingConfig.get_logger(name)
