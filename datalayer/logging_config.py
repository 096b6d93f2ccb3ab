import os
import sys
from typing import Optional

from loguru import logger


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)

# Registration diagnostics are printed bare, one decision per line
DIAGNOSTICS_FORMAT = "{message}"


def _is_diagnostic(record) -> bool:
    return record["extra"].get("diagnostics", False)


def configure_logging(level: Optional[str] = None, sink=None, diagnostics_sink=None) -> None:
    """Configure the shared Loguru logger.

    Application logs go to ``sink``; verbose registration diagnostics go to
    ``diagnostics_sink`` without timestamps.
    """
    logger.remove()
    logger.add(
        sink or sys.stderr,
        level=level or LOG_LEVEL,
        format=LOG_FORMAT,
        filter=lambda record: not _is_diagnostic(record),
        backtrace=False,
        diagnose=False,
    )
    logger.add(
        diagnostics_sink or sys.stdout,
        level="INFO",
        format=DIAGNOSTICS_FORMAT,
        filter=_is_diagnostic,
        backtrace=False,
        diagnose=False,
    )


def get_logger(name: Optional[str] = None, **kwargs):
    """Return a logger bound with an optional module/component name."""
    if name:
        return logger.bind(module=name, **kwargs)
    return logger.bind(**kwargs)
