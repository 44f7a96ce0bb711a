"""Structured logging setup."""

import logging
from typing import Optional

import structlog

from freight_ledger.core.config import ConfigManager, get_config


def configure_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    config_manager: Optional[ConfigManager] = None,
) -> None:
    """
    Configure structlog for the application.

    Args:
        level: Log level name; defaults to the configured level
        json_output: Render JSON lines instead of console output
        config_manager: Optional config manager (defaults to global instance)
    """
    if level is None or json_output is None:
        logging_config = (config_manager or get_config()).get_logging_config()
        level = level or logging_config.level
        json_output = logging_config.json_output if json_output is None else json_output

    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelName(level.upper())
        ),
        cache_logger_on_first_use=False,
    )
