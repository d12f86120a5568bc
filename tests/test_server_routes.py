import json
import logging

import pytest
from fastapi.testclient import TestClient

from wallet_mcp import server
from wallet_mcp.config import default_config


@pytest.fixture
def client():
    return TestClient(server.app)


def test_health_route(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json().get("status") == "ok"
    assert resp.headers.get("X-Request-ID")


def test_metrics_endpoint_counts_requests(client):
    client.get("/health")
    resp = client.get("/metrics")
    assert resp.status_code == 200
    data = resp.json()
    # Two requests so far: /health and /metrics
    assert data.get("requests", 0) >= 2
    assert data.get("skipped_transactions") == 0


def test_wallet_analytics_route_returns_parsed_summary(monkeypatch, client):
    captured = {}

    async def fake_tool(address=None, limit=None):
        captured.update(address=address, limit=limit)
        return json.dumps({"address": address, "recentTransactions": []}, indent=2)

    monkeypatch.setattr(server, "wallet_analytics", fake_tool)
    address = "0x" + "ab" * 20
    resp = client.get(f"/tools/wallet_analytics?address={address}&limit=5")
    assert resp.status_code == 200
    assert resp.json() == {"address": address, "recentTransactions": []}
    assert captured == {"address": address, "limit": 5}
    assert client.get("/metrics").json()["tool_success"] == {"wallet_analytics": 1}


def test_wallet_analytics_route_error(monkeypatch, client):
    async def fake_tool(address=None, limit=None):
        return {"error": "Invalid address."}

    monkeypatch.setattr(server, "wallet_analytics", fake_tool)
    resp = client.get("/tools/wallet_analytics")
    assert resp.status_code == 200
    assert resp.json() == {"error": "Invalid address."}
    assert client.get("/metrics").json()["tool_error"] == {"wallet_analytics": 1}


def test_validate_address_route(client):
    resp = client.get("/tools/validate_address/0x" + "1" * 40)
    assert resp.status_code == 200
    assert resp.json() == {"isValid": True}
    assert "X-Request-ID" in resp.headers


def test_log_tool_result_handles_non_dict():
    # Should not raise even if result is not a dict.
    server._log_tool_result("dummy", {"ok": True})
    server._log_tool_result("dummy", {"error": "fail"})
    server._log_tool_result("dummy", None)  # type: ignore[arg-type]


def test_json_formatter_includes_extras():
    record = logging.LogRecord("wallet_mcp", logging.WARNING, __file__, 1, "tool failed", None, None)
    record.tool = "wallet_analytics"
    record.request_id = "rid-1"
    payload = json.loads(server.JsonFormatter().format(record))
    assert payload == {
        "level": "WARNING",
        "message": "tool failed",
        "name": "wallet_mcp",
        "tool": "wallet_analytics",
        "request_id": "rid-1",
    }


def test_logging_level_config():
    level = getattr(logging, default_config.log_level.upper(), logging.INFO)
    assert level in (
        logging.DEBUG,
        logging.INFO,
        logging.WARNING,
        logging.ERROR,
        logging.CRITICAL,
    )
