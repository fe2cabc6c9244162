import logging
import os
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING

import bittensor as bt

if TYPE_CHECKING:
    from archaeologist.classes import CheckRun

EVENTS_LEVEL_NUM = 38
DEFAULT_LOG_BACKUP_COUNT = 10
EVENTS_LOGGER_NAME = 'event'


def setup_events_logger(full_path, events_retention_size):
    logging.addLevelName(EVENTS_LEVEL_NUM, 'EVENT')

    logger = logging.getLogger(EVENTS_LOGGER_NAME)
    logger.setLevel(EVENTS_LEVEL_NUM)

    def event(self, message, *args, **kws):
        if self.isEnabledFor(EVENTS_LEVEL_NUM):
            self._log(EVENTS_LEVEL_NUM, message, args, **kws)

    logging.Logger.event = event

    formatter = logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    os.makedirs(full_path, exist_ok=True)
    file_handler = RotatingFileHandler(
        os.path.join(full_path, 'events.log'),
        maxBytes=events_retention_size,
        backupCount=DEFAULT_LOG_BACKUP_COUNT,
    )
    file_handler.setFormatter(formatter)
    file_handler.setLevel(EVENTS_LEVEL_NUM)
    logger.addHandler(file_handler)

    return logger


def log_check_conclusion(check_run: 'CheckRun') -> None:
    """Record a finalized check run in the bittensor log and, if configured, the events log."""
    line = (
        f'check={check_run.name} sha={check_run.head_sha} conclusion={check_run.conclusion.value} '
        f'title={check_run.title} elapsed={check_run.elapsed_seconds:.1f}s'
    )

    bt.logging.info(f'  ├─ Check {check_run.id} concluded: {check_run.conclusion.value}')
    bt.logging.info(f'  │   └─ {check_run.title} ({check_run.elapsed_seconds:.1f}s)')

    events_logger = logging.getLogger(EVENTS_LOGGER_NAME)
    if events_logger.isEnabledFor(EVENTS_LEVEL_NUM) and events_logger.handlers:
        events_logger.log(EVENTS_LEVEL_NUM, line)
