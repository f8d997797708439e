"""Logging setup for the oche scoring engine.

Every module logs under the ``oche`` tree (``oche.reconciliation``,
``oche.standings``, ...). setup_logging() installs the handlers once on the
``oche`` logger and can turn individual modules up or down.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

ROOT_LOGGER = 'oche'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s'
CONSOLE_FORMAT = '%(levelname)s: %(name)s: %(message)s'


def module_logger_name(module: str) -> str:
    """Full logger name for an oche module ('standings' -> 'oche.standings')."""
    if module == ROOT_LOGGER or module.startswith(f'{ROOT_LOGGER}.'):
        return module
    return f'{ROOT_LOGGER}.{module}'


def setup_logging(
    log_dir: Optional[Path] = None,
    level: int = logging.INFO,
    log_to_file: bool = True,
    log_to_console: bool = True,
    module_levels: Optional[dict[str, int]] = None,
) -> logging.Logger:
    """
    Configure the ``oche`` logger and its handlers.

    Calling this again replaces the handlers from the previous call.

    Args:
        log_dir: Directory for log files (default: ./logs)
        level: Level for the whole ``oche`` tree (default: INFO)
        log_to_file: Write a timestamped ``oche_*.log`` file
        log_to_console: Write to stdout
        module_levels: Per-module overrides, e.g. ``{'reconciliation': logging.DEBUG}``

    Returns:
        The ``oche`` logger

    Example:
        from oche.logging_config import setup_logging
        setup_logging(log_to_file=False, module_levels={'standings': logging.DEBUG})
    """
    module_levels = {module_logger_name(name): lvl for name, lvl in (module_levels or {}).items()}

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    for handler in logger.handlers:
        handler.close()
    logger.handlers = []

    for name, module_level in module_levels.items():
        logging.getLogger(name).setLevel(module_level)

    # Handlers must pass anything a module override lets through.
    handler_level = min([level, *module_levels.values()])

    if log_to_file:
        if log_dir is None:
            log_dir = Path('logs')
        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f'oche_{datetime.now().strftime("%Y%m%d_%H%M%S")}.log'
        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(handler_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
        logger.addHandler(file_handler)

    if log_to_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(handler_level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        logger.addHandler(console_handler)

    return logger


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Logger for an oche module; short names are placed under ``oche``."""
    return logging.getLogger(module_logger_name(name))
