"""
Logging Configuration
Sets up the package logger for scripts and host applications.

Records logged by the live regenerator carry the elapsed tick time in a
``tick`` attribute; every line written by the handlers shows it as ``t=...``,
or ``t=-`` for records that are not tied to a tick.
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - t=%(tick)s - %(message)s"


class TickFilter(logging.Filter):
    """Fills in the ``tick`` field, formatting the elapsed time when present."""

    def filter(self, record: logging.LogRecord) -> bool:
        tick = getattr(record, "tick", None)
        if tick is None:
            record.tick = "-"
        elif isinstance(tick, float):
            record.tick = f"{tick:.3f}"
        return True


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Configures the logger for the 'lathegen' namespace.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        log_file: Optional path to also write the log to.
    """
    logger = logging.getLogger("lathegen")
    logger.setLevel(level)

    # Calling twice must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt="%H:%M:%S")
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode="w", encoding="utf-8"))

    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(TickFilter())
        logger.addHandler(handler)

    logger.info("Logging initialized at level %s.", logging.getLevelName(level))
