"""
Logging configuration for the application.

Sets up structured logging with a consistent format.
Logging must not change program behavior.
Never logs sensitive data (DSNs with passwords, session tokens).

SQL statement logging goes through SQLAlchemy's ``sqlalchemy.engine``
logger rather than ``create_engine(echo=True)``, so it shares the format
and stream configured here.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

QUIET_LOGGERS = ("apscheduler",)


def configure_logging(level: str = "INFO", sql_echo: bool = False) -> None:
    """Configure structured logging for the application.

    Args:
        level: The log level string (DEBUG, INFO, WARNING, ERROR).
        sql_echo: Log every SQL statement. At DEBUG the result rows are
            logged as well.
    """
    root_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=root_level,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
        stream=sys.stdout,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("sqlalchemy.engine").setLevel(sql_log_level(root_level, sql_echo))


def sql_log_level(root_level: int, sql_echo: bool) -> int:
    """Level for ``sqlalchemy.engine``: WARNING unless statements are echoed."""
    if not sql_echo:
        return logging.WARNING
    return logging.DEBUG if root_level <= logging.DEBUG else logging.INFO
