"""Web API command

Example::

    BLOB_READ_WRITE_TOKEN=... UPLOAD_API_KEY=... trade-dashboard webapi
"""

import logging
from pathlib import Path
from typing import Optional

import typer
import waitress

from . import shared_options
from .app import app
from ..bootstrap import create_state_resolver
from ..log import setup_logging, setup_file_logging
from ...webhook.app import create_pyramid_app

logger = logging.getLogger(__name__)


@app.command()
def webapi(

    # State source
    blob_token: Optional[str] = shared_options.blob_token,
    use_local_state: bool = shared_options.use_local_state,
    state_file: Path = shared_options.state_file,
    blob_name: str = shared_options.blob_name,
    blob_timeout: float = shared_options.blob_timeout,
    upload_api_key: Optional[str] = shared_options.upload_api_key,

    # Web server options
    http_port: int = typer.Option(3456, envvar="HTTP_PORT", help="Which HTTP port to listen."),
    http_host: str = typer.Option("0.0.0.0", envvar="HTTP_HOST", help="The IP address to bind for the web server. By default listen to all IP addresses available in the run-time environment."),

    # Logging
    log_level: Optional[str] = shared_options.log_level,
    log_file: Optional[Path] = typer.Option(None, envvar="LOG_FILE", help="Write logs to this file. HTTP traffic is logged next to it in a .http.log file."),
    file_log_level: Optional[str] = typer.Option("info", envvar="FILE_LOG_LEVEL", help="Log file log level."),
):
    """Serve the dashboard API."""
    global logger

    logger = setup_logging(log_level)

    if log_file:
        setup_file_logging(
            log_file,
            file_log_level,
            http_logging=True,
        )

    resolver = create_state_resolver(
        blob_token=blob_token,
        use_local_state=use_local_state,
        state_file=state_file,
        blob_name=blob_name,
        blob_timeout=blob_timeout,
    )

    app = create_pyramid_app(
        resolver,
        upload_api_key=upload_api_key,
        production=True,
    )

    logger.info("Dashboard API will spawn at %s:%d", http_host, http_port)
    waitress.serve(app, host=http_host, port=http_port)
