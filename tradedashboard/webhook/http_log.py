"""HTTP access log.

Client IP addresses and user agents go to their own file, never to the main log.
"""
import itertools
import logging
import time
from pathlib import Path

from pyramid.registry import Registry
from pyramid.request import Request

#: Not registered with :py:func:`logging.getLogger`, so it never reaches the root handlers
http_logger = logging.Logger(name="HTTP traffic")
http_logger.propagate = False

#: Request ids, next() on a count is atomic
_request_ids = itertools.count(1)


def log_tween_factory(handler, registry: Registry):
    """Pyramid tween logging every request and its outcome."""

    def log_tween(request: Request):
        req_id = next(_request_ids)
        ip_addr = request.headers.get("X-Forwarded-For") or request.client_addr or "<no IP>"

        http_logger.info("#%d %s %s %s from %s, %s", req_id, request.method, request.path_qs, request.content_length or 0, ip_addr, request.user_agent)

        started = time.monotonic()
        try:
            response = handler(request)
        except Exception as e:
            http_logger.error("#%d failed after %.3f s: %s", req_id, time.monotonic() - started, e)
            raise

        http_logger.info("#%d %s in %.3f s", req_id, response.status, time.monotonic() - started)
        return response

    return log_tween


def configure_http_request_logging(main_log_path: Path) -> logging.Logger:
    """Write the access log next to the main log file.

    `dashboard.log` gets a sibling `dashboard.http.log`.
    """
    log_path = Path(main_log_path).with_suffix(".http.log")

    file_handler = logging.FileHandler(log_path)
    file_handler.setFormatter(logging.Formatter("%(asctime)s %(message)s"))
    file_handler.setLevel(logging.INFO)

    http_logger.setLevel(logging.INFO)
    http_logger.handlers.clear()
    http_logger.addHandler(file_handler)

    http_logger.info("HTTP access log at %s", log_path)
    return http_logger
