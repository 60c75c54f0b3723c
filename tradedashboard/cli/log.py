"""Logging setup for the command line, the web server and tests."""

import logging
from logging import Logger
from pathlib import Path

import coloredlogs


#: Logger name column is wide, so chatty modules are easy to spot
LOG_FORMAT = "%(asctime)s %(name)-50s %(levelname)-8s %(message)s"

#: Library loggers and the level they are capped to
NOISY_LOGGERS = {
    # HTTP connection chatter of the blob store client
    "requests": logging.WARNING,
    "urllib3": logging.WARNING,
    # Waitress warns about every queued request on a busy dashboard
    "waitress.queue": logging.ERROR,
    # Durations of blob store calls, enable manually when needed
    "tradedashboard.utils.timer": logging.WARNING,
}


def _normalise_level(log_level: str | int) -> str | int:
    if isinstance(log_level, str):
        return log_level.upper()
    return log_level


def quiet_noisy_loggers(mute_requests=True):
    for name, level in NOISY_LOGGERS.items():
        if not mute_requests and name in ("requests", "urllib3"):
            continue
        logging.getLogger(name).setLevel(level)


def setup_logging(log_level: None | str | int = logging.INFO) -> Logger:
    """Colored console logging on the root logger.

    :param log_level:
        From `LOG_LEVEL`. `disabled` leaves the logging untouched,
        used when the command runs inside pytest.

    :return:
        The root logger
    """

    if log_level == "disabled":
        return logging.getLogger()

    log_level = _normalise_level(log_level or logging.INFO)

    logger = logging.getLogger()
    coloredlogs.install(level=log_level, fmt=LOG_FORMAT, logger=logger)
    quiet_noisy_loggers()
    return logger


def setup_file_logging(
    log_filename: str | Path,
    log_level: str | int = logging.INFO,
    http_logging=False,
):
    """Copy the log output to a file.

    :param log_level:
        `none` skips the file

    :param http_logging:
        Also write the HTTP access log next to the file
    """
    log_level = _normalise_level(log_level)
    if log_level == "NONE":
        return

    log_filename = Path(log_filename)
    log_filename.parent.mkdir(parents=True, exist_ok=True)

    file_handler = logging.FileHandler(log_filename)
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
    file_handler.setLevel(log_level)
    logging.getLogger().addHandler(file_handler)

    if http_logging:
        # Console commands do not need Pyramid imported
        from tradedashboard.webhook.http_log import configure_http_request_logging
        configure_http_request_logging(log_filename)


def setup_pytest_logging(request=None, mute_requests=True) -> logging.Logger:
    """Logging inside pytest.

    pytest captures the output itself, we only cap the noisy modules.

    :param request:
        pytest.fixtures.SubRequest instance

    :return:
        Test logger
    """
    quiet_noisy_loggers(mute_requests=mute_requests)
    return logging.getLogger("test")
