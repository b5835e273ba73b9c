"""
Logging setup for ArucoDict-py.
"""

import logging
from pathlib import Path
from typing import Optional, Union


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def setup_logger(name: str = 'arucodict', level: int = logging.INFO,
                 log_file: Optional[Union[str, Path]] = None) -> logging.Logger:
    """
    Configure a logger with a console handler and an optional file handler.

    Args:
        name: Logger name; 'arucodict' configures the whole package
        level: Logging level
        log_file: Also write records to this file (optional)

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid stacking handlers when called more than once
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False
    return logger
