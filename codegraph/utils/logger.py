"""
Logging configuration using Loguru.

Modules obtain a bound logger through get_logger(__name__); structured
context is passed as ``extra={...}`` and ends up in the record's extra dict,
so it is kept in the serialized file sink.
"""

import sys
from pathlib import Path

from loguru import logger

from codegraph.config import LoggingConfig

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_NAME = "codegraph_{time:YYYY-MM-DD}.log"


def setup_logging(config: LoggingConfig | None = None) -> None:
    """
    Configure the console sink and, when enabled, a rotating file sink.

    Args:
        config: Logging section of the application config (defaults apply when None)
    """
    config = config or LoggingConfig()
    logger.remove()
    logger.configure(extra={"module": "codegraph"})

    logger.add(sys.stderr, level=config.level, format=CONSOLE_FORMAT, colorize=True)

    if config.log_to_file:
        log_path = Path(config.log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        # Serialized records are JSON lines; rendered ones reuse the console layout
        logger.add(
            log_path / FILE_NAME,
            level=config.level,
            format=CONSOLE_FORMAT,
            colorize=False,
            rotation=config.file_rotation,
            retention=config.file_retention,
            compression=config.compression,
            serialize=config.serialize,
            enqueue=True,
        )


def get_logger(name: str):
    """Logger bound to a module name."""
    return logger.bind(module=name)
