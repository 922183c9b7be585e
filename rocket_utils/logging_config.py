"""
Logging setup for the Rocket Flight Engine.

Console output is compact for interactive runs. The optional file log keeps
everything down to DEBUG, with call sites, so per-frame detail can be
inspected after a flight.
"""
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

CONSOLE_FORMAT = '%(asctime)s - %(levelname)s - %(name)s - %(message)s'
FILE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s'

# HTTP and data-download chatter is kept out of flight logs
NOISY_LOGGERS = ('urllib3', 'requests', 'yfinance', 'peewee')


def resolve_level(level: Union[int, str, None]) -> int:
    """
    Accept a logging level as int or name; None reads ROCKET_LOG_LEVEL
    (default INFO).
    """
    if level is None:
        level = os.getenv('ROCKET_LOG_LEVEL', 'INFO')
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return resolved


def setup_logging(
    level: Union[int, str, None] = None,
    log_file: Optional[str] = None,
    log_dir: str = "logs",
    to_file: bool = True
) -> Optional[Path]:
    """
    Configure the root logger.

    Args:
        level: Console level (int or name); None reads ROCKET_LOG_LEVEL
        log_file: File name inside log_dir (default: timestamped)
        log_dir: Directory for the file log
        to_file: Set False for console-only logging (demos, tests)

    Returns:
        Path of the file log, or None when console-only
    """
    console_level = resolve_level(level)

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
    root_logger.setLevel(logging.DEBUG if to_file else console_level)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt='%H:%M:%S'))
    root_logger.addHandler(console_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if not to_file:
        return None

    directory = Path(log_dir)
    directory.mkdir(parents=True, exist_ok=True)
    if log_file is None:
        log_file = f"rocket_flight_{datetime.now().strftime('%Y%m%d_%H%M%S')}.log"
    path = directory / log_file

    file_handler = logging.FileHandler(path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
    root_logger.addHandler(file_handler)

    logging.getLogger(__name__).info(f"Flight log: {path}")
    return path
