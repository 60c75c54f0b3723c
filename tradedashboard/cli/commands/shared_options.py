"""Common Typer options shared across command line commands.

Import from there and use in
"""
from pathlib import Path

from typer import Option

from ...state.blob import DEFAULT_BLOB_TIMEOUT
from ...state.reader import DEFAULT_STATE_FILE, DEFAULT_BLOB_NAME


log_level = Option(None, envvar="LOG_LEVEL", help="The Python default logging level. The default is 'info'. Set 'disabled' in testing.")

blob_token = Option(None, envvar="BLOB_READ_WRITE_TOKEN", help="Blob store read-write token. If not given, the state is read from the local state file.")

use_local_state = Option(False, "--use-local-state", envvar="USE_LOCAL_STATE", help="Read the state from the local state file even if the blob store token is given.")

state_file: Path = Option(DEFAULT_STATE_FILE, envvar="STATE_FILE", help="JSON file where the trading bot writes its state when running on the same host.")

blob_name = Option(DEFAULT_BLOB_NAME, envvar="BLOB_NAME", help="The fixed name the state snapshot is uploaded under in the blob store.")

blob_timeout = Option(DEFAULT_BLOB_TIMEOUT, envvar="BLOB_TIMEOUT", help="Timeout in seconds for blob store HTTP requests.")

upload_api_key = Option(None, envvar="UPLOAD_API_KEY", help="Shared secret the trading bot uses to upload state. Must match the x-api-key header.")
