"""Reading state snapshots from the local disk and the blob store."""
import json

import pytest

from tradedashboard.state.blob import InMemoryBlobStore
from tradedashboard.state.errors import StateNotFound, StateParseError, StateFetchError
from tradedashboard.state.reader import LocalStateReader, RemoteStateReader


def test_local_read(state_file):
    reader = LocalStateReader(state_file)
    doc = reader.read()
    assert doc.get_symbol_count() == 2


def test_local_not_found(tmp_path):
    reader = LocalStateReader(tmp_path / "missing.json")
    with pytest.raises(StateNotFound, match="Start the trading bot first"):
        reader.read()


def test_local_bad_json(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json")
    with pytest.raises(StateParseError):
        LocalStateReader(path).read()


def test_local_directory(tmp_path):
    """Unreadable path is an I/O error, not a missing state."""
    with pytest.raises(StateFetchError):
        LocalStateReader(tmp_path).read()


def test_remote_read(state_data):
    blob_store = InMemoryBlobStore()
    blob_store.put("trading-state.json", json.dumps(state_data).encode())

    reader = RemoteStateReader(blob_store)
    assert reader.fetch_latest_url() == "https://blob.example.com/trading-state.json"
    doc = reader.read()
    assert doc.get_symbols() == ["BTC", "ETH"]


def test_remote_not_found():
    reader = RemoteStateReader(InMemoryBlobStore())
    with pytest.raises(StateNotFound, match="Upload state data first"):
        reader.read()


def test_remote_bad_content():
    blob_store = InMemoryBlobStore()
    blob_store.put("trading-state.json", b"<html>Gateway timeout</html>")
    with pytest.raises(StateParseError):
        RemoteStateReader(blob_store).read()


def test_remote_fetch_failure(state_data):
    """Listed blob disappears before we fetch it."""
    blob_store = InMemoryBlobStore()
    blob_store.put("trading-state.json", json.dumps(state_data).encode())
    reader = RemoteStateReader(blob_store)
    url = reader.fetch_latest_url()
    blob_store.blobs.clear()
    with pytest.raises(StateFetchError):
        reader.read_url(url)
