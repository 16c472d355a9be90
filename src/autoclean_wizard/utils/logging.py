# src/autoclean_wizard/utils/logging.py
"""Logging utilities for the autoclean_wizard package."""

import logging
import os
import sys
import warnings
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from loguru import logger

# Remove default handler
logger.remove()

# Custom levels on top of loguru's built-ins (SUCCESS=25 is already defined)
logger.level("HEADER", no=28, color="<blue>", icon="🧠")
logger.level("VALUES", no=5, color="<cyan>", icon="➤")

LOG_LEVEL_ENV_VAR = "AUTOCLEAN_WIZARD_LOG_LEVEL"

# highest first
_NUMERIC_LEVELS = (
    (logging.CRITICAL, "CRITICAL"),
    (logging.ERROR, "ERROR"),
    (logging.WARNING, "WARNING"),
    (logging.INFO, "INFO"),
    (logging.DEBUG, "DEBUG"),
    (5, "VALUES"),
)


_last_warning = None


def _show_warning(message, category, filename, lineno, file=None, line=None):
    """``warnings.showwarning`` replacement that logs each warning once in a row."""
    global _last_warning
    key = (str(message), category, filename, lineno)
    if key != _last_warning:
        _last_warning = key
        logger.warning(f"{category.__name__}: {message}")


warnings.showwarning = _show_warning


class LogLevel(str, Enum):
    """Log levels understood by the wizard.

    - VALUES = 5 (custom debug values)
    - DEBUG = 10
    - INFO = 20
    - SUCCESS = 25 (built into loguru)
    - HEADER = 28 (custom)
    - WARNING = 30
    - ERROR = 40
    - CRITICAL = 50
    """

    VALUES = "VALUES"
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    HEADER = "HEADER"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @classmethod
    def from_value(cls, value: Union[str, int, bool, None]) -> "LogLevel":
        """Resolve a verbosity setting to a level.

        ``None`` reads ``AUTOCLEAN_WIZARD_LOG_LEVEL`` (default INFO). Booleans
        map to INFO / WARNING, integers to the closest standard level at or
        below them, and strings are matched by name (unknown names give INFO).
        """
        if value is None:
            value = os.getenv(LOG_LEVEL_ENV_VAR, "INFO")
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            return cls.INFO if value else cls.WARNING
        if isinstance(value, int):
            for threshold, name in _NUMERIC_LEVELS:
                if value >= threshold:
                    return cls(name)
            return cls.VALUES
        if isinstance(value, str) and value.upper() in cls.__members__:
            return cls[value.upper()]
        return cls.INFO


def message(level: str, text: str, **kwargs) -> None:
    """
    Log a message through the shared loguru logger.

    Parameters
    ----------
    level : str
        Log level ('debug', 'info', 'success', 'header', 'warning', 'error', ...)
    text : str
        Message text to log
    **kwargs
        Callables evaluated lazily and used to format ``text``
    """
    level = level.upper()

    if kwargs:
        logger.opt(lazy=True).log(level, text, **kwargs)
    else:
        logger.log(level, text)


def configure_logger(
    verbose: Optional[Union[bool, str, int, LogLevel]] = None,
    log_dir: Optional[Union[str, Path]] = None,
) -> LogLevel:
    """
    Configure the logger sinks.

    Parameters
    ----------
    verbose : bool, str, int, LogLevel, optional
        Controls logging verbosity. See ``LogLevel.from_value``.
    log_dir : str or Path, optional
        When given, a rotating log file ``wizard_{time}.log`` is written there
        in addition to the console output.

    Returns
    -------
    LogLevel
        The level that was applied.
    """
    logger.remove()

    level = LogLevel.from_value(verbose)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            str(log_dir / "wizard_{time}.log"),
            rotation="1 day",
            retention="1 week",
            compression="zip",
            level=level.value,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
            backtrace=True,
            diagnose=False,
            catch=True,
        )

    logger.add(
        sys.stderr,
        level=level.value,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        colorize=True,
        backtrace=True,
        diagnose=False,
        catch=True,
    )

    return level


# Initialize with default settings (honours AUTOCLEAN_WIZARD_LOG_LEVEL)
configure_logger()
