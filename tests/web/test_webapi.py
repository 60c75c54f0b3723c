"""Check API endpoints."""
import json

import pytest
from pyramid import testing
from webtest import TestApp

from tradedashboard.state.blob import InMemoryBlobStore, BlobStoreError
from tradedashboard.state.errors import InvalidInput
from tradedashboard.state.resolver import StateResolver, StateSourceConfig
from tradedashboard.webhook.app import create_pyramid_app
from tradedashboard.webhook.api import MAX_UPLOAD_SIZE, web_upload


@pytest.fixture()
def blob_store(state_data) -> InMemoryBlobStore:
    blob_store = InMemoryBlobStore()
    blob_store.put("trading-state.json", json.dumps(state_data).encode())
    return blob_store


@pytest.fixture()
def resolver(tmp_path, blob_store) -> StateResolver:
    config = StateSourceConfig(blob_token="secret", local_state_file=tmp_path / "missing.json")
    return StateResolver(config, blob_store=blob_store)


@pytest.fixture()
def web_app(logger, resolver) -> TestApp:
    app = create_pyramid_app(resolver, upload_api_key="upload-secret")
    return TestApp(app)


def test_ping(web_app):
    """Get pong for ping"""
    resp = web_app.get("/ping")
    assert resp.json == {"ping": "pong"}


def test_cors(web_app):
    """Cors headers are in place."""
    resp = web_app.get("/ping")
    assert resp.headers["Access-Control-Allow-Origin"] == "*"


def test_state(web_app):
    """State with metrics attached."""
    resp = web_app.get("/api/state")
    assert resp.content_type == "application/json"
    data = resp.json
    assert data["initial_balance"] == 10000
    assert set(data["traders"].keys()) == {"BTC", "ETH"}
    assert data["metrics"]["totalValue"] == pytest.approx(19500)
    assert data["metrics"]["totalTrades"] == 3
    assert data["metrics"]["symbolCount"] == 2
    assert data["symbol_metrics"]["ETH"]["numTrades"] == 99


def test_state_nan_passthrough(web_app, blob_store, state_data):
    """NaN in fields we do not parse is exported as null."""
    state_data["model_confidence"] = float("nan")
    blob_store.put("trading-state.json", json.dumps(state_data).encode())
    resp = web_app.get("/api/state")
    assert resp.json["model_confidence"] is None


def test_state_not_found(tmp_path, logger):
    """Local state missing."""
    resolver = StateResolver(StateSourceConfig(local_state_file=tmp_path / "missing.json"))
    web_app = TestApp(create_pyramid_app(resolver))
    resp = web_app.get("/api/state", status=404)
    assert resp.json == {"error": "State file not found. Start the trading bot first."}


def test_state_parse_error(web_app, blob_store):
    blob_store.blobs["trading-state.json"] = b"[1, 2"
    resp = web_app.get("/api/state", status=500)
    assert "not valid JSON" in resp.json["error"]


def test_state_fetch_error(web_app, blob_store, mocker):
    mocker.patch.object(blob_store, "list", side_effect=BlobStoreError("Blob store GET blob.example.com failed: 502"))
    resp = web_app.get("/api/state", status=500)
    assert resp.json == {"error": "Blob store GET blob.example.com failed: 502"}


def test_history(web_app):
    """All trades, newest first."""
    resp = web_app.get("/api/history")
    data = resp.json
    assert data["total_count"] == 3
    assert data["last_updated"] == "2024-05-01T12:00:00"
    assert [t["symbol"] for t in data["trades"]] == ["BTC", "ETH", "BTC"]
    assert [t["timestamp"] for t in data["trades"]] == [
        "2024-05-01T11:00:00",
        "2024-05-01T10:00:00",
        "2024-05-01T09:00:00",
    ]


def test_history_filter(web_app):
    resp = web_app.get("/api/history", params={"symbol": "ETH"})
    data = resp.json
    assert data["total_count"] == 1
    assert data["trades"][0]["symbol"] == "ETH"
    assert data["trades"][0]["action_type"] == "SHORT"


def test_history_not_found(web_app, blob_store):
    blob_store.blobs.clear()
    blob_store.uploaded_at.clear()
    resp = web_app.get("/api/history", status=404)
    assert resp.json == {"error": "State not found. Upload state data first."}


def test_upload(web_app, blob_store, state_data):
    """Upload replaces the snapshot and it is served right away."""
    web_app.get("/api/state")

    state_data["initial_balance"] = 5000
    resp = web_app.post_json("/api/upload", state_data, headers={"x-api-key": "upload-secret"})
    assert resp.json["success"] is True
    assert resp.json["url"] == "https://blob.example.com/trading-state.json"
    assert len(blob_store.blobs) == 1

    resp = web_app.get("/api/state")
    assert resp.json["initial_balance"] == 5000


def test_upload_unauthorized(web_app, state_data):
    resp = web_app.post_json("/api/upload", state_data, headers={"x-api-key": "wrong"}, status=401)
    assert resp.json == {"error": "Unauthorized"}


def test_upload_missing_key(web_app, state_data):
    web_app.post_json("/api/upload", state_data, status=401)


def test_upload_method_not_allowed(web_app):
    resp = web_app.get("/api/upload", status=405)
    assert resp.json == {"error": "Method not allowed"}


def test_upload_invalid_json(web_app):
    resp = web_app.post(
        "/api/upload",
        "{broken",
        content_type="application/json",
        headers={"x-api-key": "upload-secret"},
        status=400,
    )
    assert resp.json == {"error": "Invalid state data"}


def test_upload_not_an_object(web_app):
    web_app.post_json("/api/upload", [1, 2, 3], headers={"x-api-key": "upload-secret"}, status=400)


def test_upload_not_configured(tmp_path, logger, state_data):
    """No upload secret, no uploads."""
    resolver = StateResolver(StateSourceConfig(blob_token="secret"), blob_store=InMemoryBlobStore())
    web_app = TestApp(create_pyramid_app(resolver, upload_api_key=None))
    resp = web_app.post_json("/api/upload", state_data, headers={"x-api-key": ""}, status=500)
    assert resp.json == {"error": "Upload API key not configured"}


def test_upload_no_blob_store(tmp_path, logger, state_data):
    """Local mode without a token cannot store uploads."""
    resolver = StateResolver(StateSourceConfig(local_state_file=tmp_path / "state.json"))
    web_app = TestApp(create_pyramid_app(resolver, upload_api_key="upload-secret"))
    resp = web_app.post_json("/api/upload", state_data, headers={"x-api-key": "upload-secret"}, status=500)
    assert resp.json == {"error": "Blob storage not configured"}


def test_state_nan_trade_field(web_app, blob_store, state_data):
    """NaN in a trade log field is served as null, not an error."""
    state_data["traders"]["BTC"]["trade_history"][0]["slippage"] = float("nan")
    blob_store.put("trading-state.json", json.dumps(state_data).encode())

    resp = web_app.get("/api/state")
    assert resp.json["traders"]["BTC"]["trade_history"][0]["slippage"] is None

    resp = web_app.get("/api/history", params={"symbol": "BTC"})
    assert resp.json["trades"][1]["slippage"] is None


def test_upload_too_large_without_content_length(mocker):
    """Chunked uploads carry no Content-Length, the body itself is measured."""
    request = testing.DummyRequest(
        method="POST",
        headers={"x-api-key": "upload-secret"},
        body=b" " * (MAX_UPLOAD_SIZE + 1),
        content_length=None,
    )
    request.registry = {"upload_api_key": "upload-secret", "resolver": mocker.Mock()}

    with pytest.raises(InvalidInput, match="State data too large"):
        web_upload(request)
