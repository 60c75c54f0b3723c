"""Pyramid web server app configuration."""

import logging
from typing import Optional

from pyramid.config import Configurator
from pyramid.renderers import JSON
from pyramid.router import Router

from .error import exception_view
from .json_helper import NaNToNullEncoder
from ..state.resolver import StateResolver

logger = logging.getLogger(__name__)


def init_web_api(config: Configurator):
    """Setup endpoints for the dashboard frontend."""
    config.add_route("web_ping", "/ping")
    config.add_route("web_state", "/api/state")
    config.add_route("web_history", "/api/history")
    config.add_route("web_upload", "/api/upload")

    config.scan(package='tradedashboard.webhook.api')
    config.scan(package='tradedashboard.webhook.events')


def create_pyramid_app(
    resolver: StateResolver,
    upload_api_key: Optional[str] = None,
    production=False,
) -> Router:
    """Create WSGI app for the dashboard backend.

    :param resolver:
        Where to read the trading bot state from

    :param upload_api_key:
        Shared secret the bot uses to upload new state.
        If not given, uploads are refused.
    """

    settings = {
        'production': production,
    }

    with Configurator(settings=settings) as config:

        if not upload_api_key:
            logger.info("Upload API key not set, state uploads disabled")

        config.add_renderer("json", JSON(cls=NaNToNullEncoder))

        init_web_api(config)

        # Expose the state resolver to the views
        config.registry["resolver"] = resolver
        config.registry["upload_api_key"] = upload_api_key

        config.add_exception_view(exception_view)
        config.add_tween("tradedashboard.webhook.http_log.log_tween_factory")

        app = config.make_wsgi_app()
        return app
