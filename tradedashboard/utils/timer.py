"""Wall clock time of slow remote calls."""

import logging
import time
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)


@contextmanager
def timed_task(task_name: str, **context_info) -> Iterator[None]:
    """Log how long the wrapped block took.

    Logged at info level, :py:func:`tradedashboard.cli.log.setup_logging`
    mutes this module unless asked otherwise.

    :param context_info:
        Extra values written to the start log line
    """
    started = time.monotonic()
    logger.info("Task %s started, %s", task_name, context_info)
    try:
        yield
    except Exception as e:
        logger.info("Task %s failed after %.3f s: %s", task_name, time.monotonic() - started, e)
        raise
    logger.info("Task %s done in %.3f s", task_name, time.monotonic() - started)
