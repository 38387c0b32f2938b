"""
loguru configuration for chartmerge.

Merge progress is logged through loguru. SQLAlchemy and the database
drivers log through the standard library, so their records are forwarded
into the same sinks.
"""

import inspect
import logging
import sys

from loguru import logger as _logger

from ..settings import Settings, settings

DEFAULT_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# stdlib loggers whose records are forwarded to loguru
FORWARDED_LOGGERS = ("sqlalchemy", "aiosqlite", "asyncpg")


class InterceptHandler(logging.Handler):
    """Forward standard library log records to loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        level: str | int
        try:
            level = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Skip logging's own frames so loguru reports the real call site
        frame, depth = inspect.currentframe(), 0
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        _logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(config: Settings) -> None:
    """Replace loguru's sinks with a stderr sink and, if enabled, a rotating file.

    Args:
        config: Settings supplying level, format, file switch, rotation and retention
    """
    log_format = config.log_format or DEFAULT_FORMAT

    _logger.remove()
    _logger.add(sys.stderr, level=config.log_level, format=log_format, colorize=True)

    if config.log_to_file:
        log_path = config.get_log_dir() / "chartmerge.log"
        log_path.parent.mkdir(parents=True, exist_ok=True)
        _logger.add(
            str(log_path),
            level=config.log_level,
            format=log_format,
            rotation=config.log_rotation,
            retention=config.log_retention,
            compression="zip",
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in FORWARDED_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]


setup_logging(settings)

logger = _logger
