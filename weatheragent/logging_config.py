"""Centralized logging configuration."""

import logging

from weatheragent import config

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that should share our format instead of their own
_THIRD_PARTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str | None = None) -> None:
    """Configure a consistent logging format for the entire application.

    Safe to call on every Streamlit rerun: existing handlers are replaced,
    never stacked.
    """
    level = (level or config.LOG_LEVEL).upper()
    formatter = logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # httpx logs every request at INFO; only let that through when debugging
    root_level = root_logger.level
    third_party_level = root_level if root_level <= logging.DEBUG else max(root_level, logging.WARNING)
    for logger_name in _THIRD_PARTY_LOGGERS:
        logger = logging.getLogger(logger_name)
        logger.setLevel(third_party_level)
        logger.propagate = True
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
