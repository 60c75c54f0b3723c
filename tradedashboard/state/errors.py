"""Error kinds raised while obtaining and storing state snapshots.

Every error carries the HTTP status code the web API uses
when the error reaches the boundary,
see :py:func:`tradedashboard.webhook.error.exception_view`.
"""


class DashboardError(Exception):
    """Base class for all errors with a user-facing message."""

    #: HTTP status code used by the web API
    status_code = 500


class NotConfigured(DashboardError):
    """The server lacks the credentials needed for the operation.

    Never retried automatically.
    """

    status_code = 500


class StateNotFound(DashboardError):
    """No snapshot has been written yet.

    Kept separate from other I/O errors so the dashboard can tell
    the user to start the bot first.
    """

    status_code = 404


class StateFetchError(DashboardError):
    """Transport level failure: non-success HTTP status, connection failure, unreadable file."""

    status_code = 500


class StateParseError(DashboardError):
    """Snapshot content is not a valid state document."""

    status_code = 500


class Unauthorized(DashboardError):
    """Upload credential mismatch."""

    status_code = 401


class InvalidInput(DashboardError):
    """Upload payload is not a well-formed JSON object."""

    status_code = 400
