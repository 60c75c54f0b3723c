"""upload-state command.

Push a local state file to a running dashboard, like the trading bot does.

Example::

    UPLOAD_API_KEY=... trade-dashboard upload-state --url https://dashboard.example.com
"""
import json
import logging
from pathlib import Path
from typing import Optional

import requests
from typer import Option

from . import shared_options
from .app import app
from ..log import setup_logging


logger = logging.getLogger(__name__)


@app.command()
def upload_state(
    url: str = Option(..., envvar="DASHBOARD_URL", help="Base URL of the dashboard web API"),
    upload_api_key: str = shared_options.upload_api_key,
    state_file: Path = shared_options.state_file,
    log_level: Optional[str] = shared_options.log_level,
    timeout: float = Option(30.0, envvar="UPLOAD_TIMEOUT", help="HTTP timeout in seconds"),
):
    """Upload a local state file to the dashboard."""

    setup_logging(log_level)

    assert upload_api_key, "UPLOAD_API_KEY missing"
    assert state_file.exists(), f"State file does not exist: {state_file}"

    # Fail early on a broken file instead of having the server reject it
    data = json.loads(state_file.read_text(encoding="utf-8"))

    resp = requests.post(
        f"{url.rstrip('/')}/api/upload",
        json=data,
        headers={"x-api-key": upload_api_key},
        timeout=timeout,
    )

    if not resp.ok:
        raise RuntimeError(f"Upload failed {resp.status_code}: {resp.text}")

    result = resp.json()
    logger.info("Uploaded %s to %s", state_file, result["url"])
    print(f"State uploaded at {result['timestamp']}, blob {result['url']}")
