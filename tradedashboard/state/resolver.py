"""Choose where the dashboard reads the trading bot state from."""
import datetime
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from tradedashboard.state.blob import BlobStore, HTTPBlobStore, DEFAULT_BLOB_TIMEOUT
from tradedashboard.state.cache import StateCache, DEFAULT_CACHE_TTL
from tradedashboard.state.document import StateDocument
from tradedashboard.state.reader import LocalStateReader, RemoteStateReader, DEFAULT_STATE_FILE, DEFAULT_BLOB_NAME


logger = logging.getLogger(__name__)


@dataclass
class StateSourceConfig:
    """Environment configuration of the state source."""

    #: Blob store read-write token.
    #:
    #: If not given, we can only read the local file.
    blob_token: Optional[str] = None

    #: Read the local file even if we have a blob token
    use_local_state: bool = False

    #: Where the bot writes its state on the local disk
    local_state_file: Path = field(default=DEFAULT_STATE_FILE)

    #: The fixed blob name the snapshot is uploaded under
    blob_name: str = DEFAULT_BLOB_NAME

    #: HTTP timeout for blob store calls, seconds
    blob_timeout: float = DEFAULT_BLOB_TIMEOUT

    #: How long a remote snapshot is cached
    cache_ttl: datetime.timedelta = DEFAULT_CACHE_TTL

    def is_local(self) -> bool:
        return self.use_local_state or not self.blob_token


class StateResolver:
    """Produce the current state snapshot from the configured source.

    - Local mode reads the file directly on every call

    - Remote mode goes through a :py:class:`StateCache` owned by the resolver

    There are no retries. Failures propagate unchanged,
    the dashboard retries by polling again.
    """

    def __init__(self, config: StateSourceConfig, blob_store: Optional[BlobStore] = None):
        """

        :param blob_store:
            Use this blob store instead of creating one from the configured token.
            Used in unit tests.
        """
        self.config = config

        if blob_store is None and config.blob_token:
            blob_store = HTTPBlobStore(config.blob_token, timeout=config.blob_timeout)

        #: Also used by the upload endpoint, `None` if no token is configured
        self.blob_store = blob_store

        self.local_reader = LocalStateReader(config.local_state_file)

        if config.is_local():
            self.cache = None
            logger.info("Reading state from local file %s", self.local_reader)
        else:
            self.cache = StateCache(
                RemoteStateReader(blob_store, config.blob_name),
                ttl=config.cache_ttl,
            )
            logger.info("Reading state from blob store %s", blob_store)

    @property
    def is_remote(self) -> bool:
        return self.cache is not None

    def resolve(self) -> StateDocument:
        """Get the current state snapshot.

        :raise DashboardError:
            As raised by the underlying reader
        """
        if self.cache is None:
            return self.local_reader.read()
        return self.cache.get()

    def invalidate(self):
        """Make the next :py:meth:`resolve` to fetch a fresh snapshot."""
        if self.cache is not None:
            self.cache.invalidate()
