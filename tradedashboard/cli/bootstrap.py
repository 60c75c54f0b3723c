"""Command line application initialisation helpers."""
import logging
from pathlib import Path
from typing import Optional

from ..state.blob import DEFAULT_BLOB_TIMEOUT
from ..state.reader import DEFAULT_STATE_FILE, DEFAULT_BLOB_NAME
from ..state.resolver import StateResolver, StateSourceConfig


logger = logging.getLogger(__name__)


def create_state_resolver(
    blob_token: Optional[str],
    use_local_state: bool = False,
    state_file: Path = DEFAULT_STATE_FILE,
    blob_name: str = DEFAULT_BLOB_NAME,
    blob_timeout: float = DEFAULT_BLOB_TIMEOUT,
) -> StateResolver:
    """Create the state resolver from the command line options."""

    config = StateSourceConfig(
        blob_token=blob_token or None,
        use_local_state=use_local_state,
        local_state_file=Path(state_file),
        blob_name=blob_name,
        blob_timeout=blob_timeout,
    )

    if config.use_local_state and config.blob_token:
        logger.info("Blob store token given, but local state forced")

    return StateResolver(config)
