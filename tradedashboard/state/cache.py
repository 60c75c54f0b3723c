"""Short lived in-process cache in front of the remote state reader.

The dashboard polls the state every few seconds from every open browser tab.
We serve the same snapshot for :py:data:`DEFAULT_CACHE_TTL`
to keep the blob store traffic bounded.

Any failure drops the cached snapshot, so an error is never masked by a stale hit
and the next call starts from scratch.
"""
import datetime
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from tradedashboard.state.document import StateDocument
from tradedashboard.state.reader import RemoteStateReader


logger = logging.getLogger(__name__)


#: How long a fetched snapshot is served without touching the network
DEFAULT_CACHE_TTL = datetime.timedelta(seconds=10)


@dataclass(frozen=True)
class CacheEntry:
    """The single cache slot content."""

    #: Blob URL the document was fetched from
    source_url: str

    #: Parsed snapshot
    document: StateDocument

    #: Monotonic clock reading when the fetch started
    fetched_at: float


class StateCache:
    """Single slot cache for the latest remote snapshot.

    - The lock only guards reading and swapping the slot.
      Concurrent callers that both miss will both fetch.

    - The entry is replaced wholesale, never modified
    """

    def __init__(
        self,
        reader: RemoteStateReader,
        ttl: datetime.timedelta = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """

        :param reader:
            Where to fetch the snapshots from

        :param ttl:
            Freshness window

        :param clock:
            Monotonic seconds. Overridden in unit tests.
        """
        self.reader = reader
        self.ttl = ttl
        self.clock = clock
        self._entry: Optional[CacheEntry] = None
        self._lock = threading.Lock()

    def __repr__(self):
        return f"<StateCache ttl:{self.ttl} for {self.reader}>"

    @property
    def entry(self) -> Optional[CacheEntry]:
        with self._lock:
            return self._entry

    def is_fresh(self, entry: Optional[CacheEntry], now: float) -> bool:
        if entry is None:
            return False
        return now - entry.fetched_at < self.ttl.total_seconds()

    def invalidate(self):
        """Drop the cached snapshot."""
        with self._lock:
            self._entry = None

    def get(self) -> StateDocument:
        """Get the latest snapshot.

        :raise DashboardError:
            Any error from the reader, after the cache has been cleared
        """
        now = self.clock()
        entry = self.entry

        if self.is_fresh(entry, now):
            return entry.document

        try:
            url = self.reader.fetch_latest_url()
            if entry is not None and entry.source_url != url:
                logger.info("State blob URL changed")
            document = self.reader.read_url(url)
        except Exception as e:
            logger.info("State fetch failed, dropping cached state: %s", e)
            self.invalidate()
            raise

        new_entry = CacheEntry(source_url=url, document=document, fetched_at=now)
        with self._lock:
            self._entry = new_entry

        return document
