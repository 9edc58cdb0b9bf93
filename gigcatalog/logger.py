"""
Logging configuration for the gig catalog
"""
import logging
import sys
from typing import Optional

from gigcatalog.config import Config

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ('urllib3', 'sqlalchemy.engine')


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    """
    Configure the 'gigcatalog' logger.

    Console output is capped at INFO; the optional log file (LOG_FILE) gets
    everything at the configured level.
    """
    level_name = (level or Config.LOG_LEVEL).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    log_file = log_file or Config.LOG_FILE

    logger = logging.getLogger('gigcatalog')
    logger.setLevel(log_level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(max(log_level, logging.INFO))
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Prevent duplicate logs through the root logger
    logger.propagate = False

    return logger


def get_logger(name=None):
    """Child logger under 'gigcatalog' (e.g. 'gigcatalog.save_events')"""
    if name:
        return logging.getLogger(f'gigcatalog.{name}')
    return logging.getLogger('gigcatalog')


logger = setup_logging()
