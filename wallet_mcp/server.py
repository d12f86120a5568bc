"""FastAPI application wiring wallet MCP tools to HTTP routes."""

from __future__ import annotations

import json
import logging
import time
import uuid
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

from wallet_mcp import mcp
from wallet_mcp.chain_api import default_client
from wallet_mcp.config import default_config
from wallet_mcp.metrics import default_metrics
from wallet_mcp.tools import validate_address, wallet_analytics

logger = logging.getLogger(__name__)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "message": record.getMessage(),
            "name": record.name,
        }
        for key in ("tool", "request_id", "error"):
            if hasattr(record, key):
                payload[key] = getattr(record, key)
        return json.dumps(payload)


def configure_logging(level: str, log_format: str) -> None:
    resolved_level = getattr(logging, level.upper(), logging.INFO)
    if log_format.lower() == "json":
        handler = logging.StreamHandler()
        handler.setFormatter(JsonFormatter())
        logging.basicConfig(level=resolved_level, handlers=[handler])
    else:
        logging.basicConfig(level=resolved_level)


configure_logging(default_config.log_level, default_config.log_format)
HEALTH_STATUS = {"status": "ok"}
APP_VERSION = "0.1.0"
MCP_SERVER_NAME = "wallet-analytics-mcp"
MCP_SERVER_VERSION = APP_VERSION


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Startup
    yield
    # Shutdown
    await default_client.aclose()


app = FastAPI(
    title="Wallet Analytics MCP Server",
    description="Read-only wallet analytics tool surface for LLM agents.",
    version=APP_VERSION,
    lifespan=lifespan,
)


@app.middleware("http")
async def add_request_context(request: Request, call_next):
    request_id = str(uuid.uuid4())
    request.state.request_id = request_id
    start = time.time()
    default_metrics.incr_request()
    response = await call_next(request)
    duration_ms = (time.time() - start) * 1000
    default_metrics.record_duration(request_id, duration_ms)
    response.headers["X-Request-ID"] = request_id
    return response


def _log_tool_result(tool_name: str, result: Dict[str, Any], request_id: Optional[str] = None) -> None:
    if isinstance(result, dict) and result.get("error"):
        logger.warning(
            "tool=%s outcome=error error=%s request_id=%s",
            tool_name,
            result.get("error"),
            request_id,
            extra={"tool": tool_name, "request_id": request_id, "error": result.get("error")},
        )
        default_metrics.record_tool(tool_name, success=False)
    else:
        logger.info(
            "tool=%s outcome=success request_id=%s",
            tool_name,
            request_id,
            extra={"tool": tool_name, "request_id": request_id},
        )
        default_metrics.record_tool(tool_name, success=True)


@app.get("/health")
async def health() -> JSONResponse:
    """Lightweight health endpoint for monitoring."""
    return JSONResponse(content=HEALTH_STATUS)


@app.get("/metrics")
async def metrics() -> JSONResponse:
    """Return in-process metrics snapshot."""
    return JSONResponse(content=default_metrics.snapshot())


@app.get("/tools/wallet_analytics")
async def wallet_analytics_route(
    request: Request,
    address: str | None = None,
    limit: int | None = Query(None),
) -> JSONResponse:
    """Proxy for wallet_analytics tool."""
    result = await wallet_analytics(address=address, limit=limit)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("wallet_analytics", result if isinstance(result, dict) else {}, request_id)
    if isinstance(result, str):
        return JSONResponse(content=json.loads(result))
    return JSONResponse(content=result)


@app.get("/tools/validate_address/{address}")
async def validate_address_route(address: str, request: Request) -> JSONResponse:
    """Proxy for validate_address utility."""
    result = validate_address(address)
    request_id = getattr(request.state, "request_id", None)
    _log_tool_result("validate_address", result, request_id)
    return JSONResponse(content=result)


@app.post("/mcp")
async def mcp_gateway(request: Request) -> Response:
    """
    Minimal JSON-RPC-like gateway for MCP-style integrations.

    Supported methods:
      - initialize
      - list_tools / tools/list
      - call_tool / tools/call
    """
    request_id = getattr(request.state, "request_id", None)
    start_time = time.time()

    def _respond(
        payload: Dict[str, Any],
        status_code: int = 200,
        *,
        outcome: str,
        method_label: Optional[str] = None,
        tool_label: Optional[str] = None,
        error_code: Optional[int] = None,
    ) -> JSONResponse:
        duration_ms = (time.time() - start_time) * 1000
        logger.debug(
            "mcp outcome=%s method=%s tool=%s id=%s status=%s duration_ms=%.2f error_code=%s",
            outcome,
            method_label,
            tool_label,
            payload.get("id"),
            status_code,
            duration_ms,
            error_code,
            extra={"request_id": request_id, "tool": tool_label, "error": error_code},
        )
        return JSONResponse(status_code=status_code, content=payload)

    try:
        body = await request.json()
    except Exception:
        payload = _jsonrpc_error_payload(None, -32700, "Parse error", request_id=request_id)
        return _respond(payload, status_code=400, outcome="error", error_code=-32700)

    if not isinstance(body, dict):
        payload = _jsonrpc_error_payload(None, -32600, "Invalid request", request_id=request_id)
        return _respond(payload, status_code=400, outcome="error", error_code=-32600)

    method = body.get("method")
    rpc_id = body.get("id")
    raw_params = body.get("params")
    if raw_params is None:
        params = {}
    elif isinstance(raw_params, dict):
        params = raw_params
    else:
        payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params", request_id=request_id)
        return _respond(payload, outcome="error", method_label=method, error_code=-32602)

    if not method:
        payload = _jsonrpc_error_payload(rpc_id, -32600, "Invalid request", request_id=request_id)
        return _respond(payload, outcome="error", error_code=-32600)

    if method == "initialize":
        protocol_version = params.get("protocolVersion")
        if not isinstance(protocol_version, str) or not protocol_version:
            payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params", request_id=request_id)
            return _respond(payload, outcome="error", method_label=method, error_code=-32602)

        logger.debug(
            "mcp initialize requested protocol=%s request_id=%s",
            protocol_version,
            request_id,
            extra={"request_id": request_id},
        )
        result = {
            "protocolVersion": protocol_version,
            "serverInfo": {"name": MCP_SERVER_NAME, "version": MCP_SERVER_VERSION},
            "capabilities": {"tools": {"listChanged": False}},
        }
        return _respond(
            _jsonrpc_success_payload(rpc_id, result, request_id=request_id),
            outcome="success",
            method_label=method,
        )

    if method in ("list_tools", "tools/list"):
        result = {"tools": mcp.list_tools()}
        return _respond(
            _jsonrpc_success_payload(rpc_id, result, request_id=request_id),
            outcome="success",
            method_label=method,
        )

    if method in ("call_tool", "tools/call"):
        tool_name = params.get("tool") or params.get("name")
        tool_params = params.get("params")
        if tool_params is None:
            tool_params = params.get("arguments") or {}
        if not isinstance(tool_name, str) or not tool_name.strip():
            payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params", request_id=request_id)
            return _respond(payload, outcome="error", method_label=method, error_code=-32602)
        if not isinstance(tool_params, dict):
            payload = _jsonrpc_error_payload(rpc_id, -32602, "Invalid params", request_id=request_id)
            return _respond(payload, outcome="error", method_label=method, tool_label=tool_name, error_code=-32602)
        result = await mcp.call_tool(tool_name, tool_params)
        _log_tool_result(tool_name, result if isinstance(result, dict) else {}, request_id)
        wrapped = _wrap_tool_result(result)
        return _respond(
            _jsonrpc_success_payload(rpc_id, wrapped, request_id=request_id),
            outcome="success",
            method_label=method,
            tool_label=tool_name,
        )

    if method in ("notifications/initialized", "initialized"):
        # Notifications should not return a JSON-RPC response body.
        logger.debug(
            "mcp initialized notification received request_id=%s",
            request_id,
            extra={"request_id": request_id},
        )
        return Response(status_code=204)

    payload = _jsonrpc_error_payload(rpc_id, -32601, "Method not found", request_id=request_id)
    return _respond(payload, outcome="error", method_label=method, error_code=-32601)


# Run with: uvicorn wallet_mcp.server:app --reload


def _jsonrpc_success_payload(rpc_id: Any, result: Any, request_id: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"jsonrpc": "2.0", "id": rpc_id, "result": result}
    if request_id:
        payload["requestId"] = request_id
    return payload


def _jsonrpc_error_payload(rpc_id: Any, code: int, message: str, request_id: Optional[str] = None) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"jsonrpc": "2.0", "id": rpc_id, "error": {"code": code, "message": message}}
    if request_id:
        payload["requestId"] = request_id
    return payload


def _wrap_tool_result(result: Any) -> Dict[str, Any]:
    """
    Shape tool outputs into MCP-friendly content array.
    """
    # Tool-level errors are returned in-band with isError flag.
    if isinstance(result, dict) and "error" in result:
        message = result.get("error") or "Error"
        return {
            "content": [{"type": "text", "text": str(message)}],
            "isError": True,
            "structuredContent": result,
        }

    # Plain string results (analytics JSON included) are returned directly as text.
    if isinstance(result, str):
        return {"content": [{"type": "text", "text": result}]}

    try:
        text_repr = json.dumps(result, ensure_ascii=True)
    except (TypeError, ValueError):
        text_repr = str(result)
    return {
        "content": [{"type": "text", "text": text_repr}],
        "structuredContent": result,
    }
