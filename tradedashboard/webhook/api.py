"""API function entrypoints."""

import datetime
import hmac
import logging

from pyramid.request import Request
from pyramid.view import view_config

from tradedashboard.state.errors import InvalidInput, NotConfigured, Unauthorized
from tradedashboard.state.resolver import StateResolver
from tradedashboard.state.upload import upload_state
from tradedashboard.statistics.history import assemble_trade_history
from tradedashboard.statistics.metrics import build_state_view
from tradedashboard.webhook.error import exception_response


logger = logging.getLogger(__name__)


#: The bot uploads its whole state, with trade logs
MAX_UPLOAD_SIZE = 4 * 1024 * 1024


@view_config(route_name='web_ping', renderer='json')
def web_ping(request: Request):
    """/ping endpoint

    Check the server is up.
    """
    return {"ping": "pong"}


@view_config(route_name='web_state', renderer='json')
def web_state(request: Request):
    """/api/state endpoint.

    Serve the latest state of the trading bot with the portfolio metrics attached.

    :return 404:
        If the bot has not written any state yet
    """
    resolver: StateResolver = request.registry["resolver"]
    doc = resolver.resolve()
    return build_state_view(doc)


@view_config(route_name='web_history', renderer='json')
def web_history(request: Request):
    """/api/history endpoint.

    Serve the trades of all symbols, the most recent first.

    Optional `symbol` query parameter filters to a single symbol.
    """
    resolver: StateResolver = request.registry["resolver"]
    symbol = request.params.get("symbol")
    doc = resolver.resolve()
    history = assemble_trade_history(doc, symbol)
    return history.to_json_dict()


def check_api_key(request: Request):
    """Compare the `x-api-key` header to the configured upload secret.

    :raise NotConfigured:
        No upload secret is set

    :raise Unauthorized:
        The key does not match
    """
    expected = request.registry["upload_api_key"]
    if not expected:
        raise NotConfigured("Upload API key not configured")

    given = request.headers.get("x-api-key", "")
    if not hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8")):
        raise Unauthorized("Unauthorized")


@view_config(route_name='web_upload', renderer='json')
def web_upload(request: Request):
    """/api/upload endpoint.

    The trading bot posts its whole state as JSON here.
    The state replaces the previous snapshot in the blob store.
    """

    if request.method != "POST":
        return exception_response(405, "Method not allowed")

    check_api_key(request)

    # Content-Length is absent on chunked uploads, so measure the body too
    if (request.content_length or 0) > MAX_UPLOAD_SIZE or len(request.body) > MAX_UPLOAD_SIZE:
        raise InvalidInput("State data too large")

    try:
        state_data = request.json_body
    except ValueError as e:
        raise InvalidInput("Invalid state data") from e

    resolver: StateResolver = request.registry["resolver"]
    if resolver.blob_store is None:
        raise NotConfigured("Blob storage not configured")

    blob = upload_state(resolver.blob_store, state_data, resolver.config.blob_name)

    # Serve the new snapshot right away
    resolver.invalidate()

    return {
        "success": True,
        "url": blob.url,
        "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
    }
