"""Web server error management.

All error responses are JSON objects with a single `error` message.
"""
import json
import logging

from pyramid.httpexceptions import HTTPException
from pyramid.request import Request
from pyramid.response import Response

from tradedashboard.state.errors import DashboardError


logger = logging.getLogger(__name__)


def exception_response(status_code: int, detail: str) -> Response:
    """Creates a JSON error response.

    Example:

    .. code-block:: python

        return exception_response(405, detail="Method not allowed")

    """
    logger.warning("Web server returned an error: %d %s", status_code, detail)
    data = json.dumps({"error": detail})
    return Response(data, status=status_code, content_type="application/json", charset="utf-8")


def exception_view(exc: Exception, request: Request) -> Response:
    """Map exceptions escaping the views to HTTP responses.

    - Our own error kinds carry their status code

    - Pyramid HTTP exceptions (not found routes, etc.) keep theirs

    - Anything else is an internal error, the details of which stay in the logs
    """
    if isinstance(exc, DashboardError):
        logger.info("API endpoint %s failed: %s", request.path, exc)
        return exception_response(exc.status_code, str(exc))

    if isinstance(exc, HTTPException):
        return exception_response(exc.code, exc.title)

    logger.error("An error in API endpoint %s: %s", request.path, exc)
    logger.exception(exc)
    return exception_response(500, "Internal server error")
