"""Read state snapshots from a local file or from the remote blob store."""
import abc
import json
import logging
import os
from pathlib import Path
from typing import Union

from tradedashboard.state.blob import BlobStore
from tradedashboard.state.document import StateDocument
from tradedashboard.state.errors import StateNotFound, StateFetchError, StateParseError
from tradedashboard.utils.timer import timed_task
from tradedashboard.utils.url import get_url_domain


logger = logging.getLogger(__name__)


#: Where the trading bot writes its state when running on the same host
DEFAULT_STATE_FILE = Path("data") / "trading_state" / "safe_multi_symbol_state.json"

#: The fixed name the uploader stores the snapshot under in the blob store
DEFAULT_BLOB_NAME = "trading-state.json"


def parse_state_json(content: Union[str, bytes], source: str) -> StateDocument:
    """Decode and parse a JSON snapshot.

    :param source:
        Human readable origin for error messages

    :raise StateParseError:
        Content is not JSON or not a state snapshot
    """
    try:
        data = json.loads(content)
    except ValueError as e:
        raise StateParseError(f"State at {source} is not valid JSON: {e}") from e

    return StateDocument.parse(data)


class StateReader(abc.ABC):
    """Backend to read the latest trading bot state snapshot."""

    @abc.abstractmethod
    def read(self) -> StateDocument:
        """Read the latest snapshot.

        :raise StateNotFound:
            No snapshot has been written yet

        :raise StateFetchError:
            I/O failure

        :raise StateParseError:
            The snapshot is not a valid state document
        """


class LocalStateReader(StateReader):
    """Read the state JSON file the trading bot writes on the local disk.

    Reads are cheap and always current, so there is no caching.
    """

    def __init__(self, path: Union[Path, str] = DEFAULT_STATE_FILE):
        assert path
        if not isinstance(path, Path):
            path = Path(path)
        self.path = path

    def __repr__(self):
        path = os.path.abspath(self.path)
        return f"<JSON file at {path}>"

    def read(self) -> StateDocument:
        try:
            content = self.path.read_text(encoding="utf-8")
        except FileNotFoundError as e:
            raise StateNotFound("State file not found. Start the trading bot first.") from e
        except (OSError, UnicodeDecodeError) as e:
            raise StateFetchError(f"Could not read state file {self.path}: {e}") from e

        logger.info("Loaded state from %s, total %d chars", self.path, len(content))
        return parse_state_json(content, str(self.path))


class RemoteStateReader(StateReader):
    """Read the state snapshot the trading bot uploaded to the blob store.

    The uploader always deletes the old blob before writing a new one under
    the same fixed name, so the listing is assumed to contain at most
    one live blob and the first one is the latest.
    """

    def __init__(self, blob_store: BlobStore, blob_name: str = DEFAULT_BLOB_NAME):
        self.blob_store = blob_store
        self.blob_name = blob_name

    def __repr__(self):
        return f"<Remote state {self.blob_name} at {self.blob_store}>"

    def fetch_latest_url(self) -> str:
        """Resolve the URL of the latest snapshot.

        :raise StateNotFound:
            Nothing has been uploaded yet
        """
        with timed_task("list_state_blobs", blob_name=self.blob_name):
            blobs = self.blob_store.list(self.blob_name)

        if not blobs:
            raise StateNotFound("State not found. Upload state data first.")

        return blobs[0].url

    def read_url(self, url: str) -> StateDocument:
        """Fetch and parse a snapshot."""
        with timed_task("fetch_state_blob", domain=get_url_domain(url)):
            content = self.blob_store.get(url)

        logger.info("Fetched state from %s, total %d bytes", get_url_domain(url), len(content))
        return parse_state_json(content, get_url_domain(url))

    def read(self) -> StateDocument:
        return self.read_url(self.fetch_latest_url())
