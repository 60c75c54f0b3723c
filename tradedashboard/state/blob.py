"""Remote object store where the trading bot uploads its state snapshots.

We only need a narrow list/get/put/delete contract.
:py:class:`HTTPBlobStore` talks to a Vercel Blob compatible REST API,
:py:class:`InMemoryBlobStore` is used in unit tests.
"""
import abc
import datetime
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import quote

import requests
from dataclasses_json import dataclass_json, LetterCase

from tradedashboard.state.errors import StateFetchError
from tradedashboard.utils.url import get_url_domain


logger = logging.getLogger(__name__)


#: Default REST API endpoint of the blob store
DEFAULT_BLOB_API_URL = "https://blob.vercel-storage.com"

#: How many seconds we wait for the blob store to answer.
DEFAULT_BLOB_TIMEOUT = 10.0


class BlobStoreError(StateFetchError):
    """The blob store API call failed.

    A transport level error for the callers.
    """


@dataclass_json(letter_case=LetterCase.CAMEL)
@dataclass(frozen=True)
class BlobInfo:
    """One object in the blob store listing."""

    #: Public URL where the content can be fetched
    url: str

    #: The name the blob was stored under
    pathname: str

    #: Content length in bytes
    size: Optional[int] = None

    #: ISO-8601 upload time as given by the store
    uploaded_at: Optional[str] = None


class BlobStore(abc.ABC):
    """Remote object storage backend."""

    @abc.abstractmethod
    def list(self, prefix: str) -> List[BlobInfo]:
        """List blobs whose name starts with `prefix`.

        :return:
            Blobs in the store's own order, the most relevant first
        """

    @abc.abstractmethod
    def get(self, url: str) -> bytes:
        """Fetch blob content with an unconditional GET."""

    @abc.abstractmethod
    def put(self, name: str, data: bytes) -> BlobInfo:
        """Store a public blob under `name` exactly, without a random suffix."""

    @abc.abstractmethod
    def delete(self, url: str):
        """Delete a blob."""


class HTTPBlobStore(BlobStore):
    """Vercel Blob REST API client.

    - Listing, uploads and deletes are authenticated with the read-write token

    - Blobs are public, so the content GET does not need authentication
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_BLOB_API_URL,
        timeout: float = DEFAULT_BLOB_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        """

        :param token:
            Blob store read-write token

        :param timeout:
            Timeout in seconds for every HTTP request

        :param session:
            Give a custom session, used in unit tests
        """
        assert token, "Blob store token missing"
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    def __repr__(self):
        return f"<HTTPBlobStore at {get_url_domain(self.api_url)}>"

    def _get_auth_headers(self) -> Dict[str, str]:
        return {"authorization": f"Bearer {self.token}"}

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        logger.debug("Blob store %s %s", method, url)
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise BlobStoreError(f"Blob store {method} {get_url_domain(url)} failed: {e}") from e

        if not resp.ok:
            logger.warning("Blob store %s %s returned %d: %s", method, get_url_domain(url), resp.status_code, resp.text[0:200])
            raise BlobStoreError(f"Blob store {method} {get_url_domain(url)} failed: {resp.status_code}")

        return resp

    def list(self, prefix: str) -> List[BlobInfo]:
        resp = self._request(
            "GET",
            self.api_url,
            params={"prefix": prefix},
            headers=self._get_auth_headers(),
        )

        try:
            data = resp.json()
            return [BlobInfo.from_dict(b) for b in data.get("blobs", [])]
        except (ValueError, KeyError, AttributeError) as e:
            raise BlobStoreError(f"Blob store returned a bad listing for {prefix}") from e

    def get(self, url: str) -> bytes:
        resp = self._request("GET", url)
        return resp.content

    def put(self, name: str, data: bytes) -> BlobInfo:
        headers = self._get_auth_headers()
        headers.update({
            "x-add-random-suffix": "0",
            "x-content-type": "application/json",
        })

        resp = self._request(
            "PUT",
            f"{self.api_url}/{quote(name)}",
            params={"access": "public"},
            data=data,
            headers=headers,
        )

        try:
            return BlobInfo.from_dict(resp.json())
        except (ValueError, KeyError) as e:
            raise BlobStoreError(f"Blob store returned a bad upload response for {name}") from e

    def delete(self, url: str):
        self._request(
            "POST",
            f"{self.api_url}/delete",
            json={"urls": [url]},
            headers=self._get_auth_headers(),
        )


class InMemoryBlobStore(BlobStore):
    """Blob store that is not persistent.

    Used in unit tests. Counts the calls so tests can check the network traffic.
    """

    def __init__(self, base_url: str = "https://blob.example.com"):
        self.base_url = base_url
        self.blobs: Dict[str, bytes] = {}
        self.uploaded_at: Dict[str, datetime.datetime] = {}
        self.list_count = 0
        self.get_count = 0

    def __repr__(self):
        return f"<InMemoryBlobStore with {len(self.blobs)} blobs>"

    def _get_url(self, name: str) -> str:
        return f"{self.base_url}/{name}"

    def list(self, prefix: str) -> List[BlobInfo]:
        self.list_count += 1
        names = sorted(
            (name for name in self.blobs if name.startswith(prefix)),
            key=lambda name: self.uploaded_at[name],
            reverse=True,
        )
        return [
            BlobInfo(
                url=self._get_url(name),
                pathname=name,
                size=len(self.blobs[name]),
                uploaded_at=self.uploaded_at[name].isoformat(),
            ) for name in names
        ]

    def get(self, url: str) -> bytes:
        self.get_count += 1
        for name, data in self.blobs.items():
            if self._get_url(name) == url:
                return data
        raise BlobStoreError("Blob store GET failed: 404")

    def put(self, name: str, data: bytes) -> BlobInfo:
        self.blobs[name] = data
        self.uploaded_at[name] = datetime.datetime.utcnow()
        return BlobInfo(url=self._get_url(name), pathname=name, size=len(data))

    def delete(self, url: str):
        for name in list(self.blobs):
            if self._get_url(name) == url:
                del self.blobs[name]
                del self.uploaded_at[name]
                return
        raise BlobStoreError("Blob store delete failed: 404")
