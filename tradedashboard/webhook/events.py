"""Pyramid event subscribers."""

from pyramid.events import NewResponse, subscriber


#: The frontend can live on another origin, and the bot uploads with a custom header
CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST,GET,OPTIONS",
    "Access-Control-Allow-Headers": "Origin, Content-Type, Accept, X-API-Key",
    "Access-Control-Max-Age": "1728000",
}


@subscriber(NewResponse)
def add_cors_headers(event: NewResponse):
    """Every response, errors included, is readable by the dashboard frontend."""
    event.response.headers.update(CORS_HEADERS)
