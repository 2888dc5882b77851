"""In-process HTTP stand-in for the services corewait probes.

One app serves both a `/healthz` endpoint and a JSON-RPC endpoint at `/`, so
a single stub can play an L1/L2 node and the bridge at the same time.
"""

import threading
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from corewait.poller import poll


@dataclass
class StubState:
    healthz_status: int = 200
    healthz_body: Any = field(default_factory=dict)
    healthz_raw: str | None = None
    # method -> result, or a callable taking the request params
    rpc_results: dict[str, Any] = field(default_factory=dict)
    rpc_errors: dict[str, dict[str, Any]] = field(default_factory=dict)
    rpc_raw: str | None = None
    # methods answered with an envelope that has neither result nor error
    rpc_without_result: set[str] = field(default_factory=set)
    rpc_calls: list[str] = field(default_factory=list)

    def calls_to(self, method: str) -> int:
        return self.rpc_calls.count(method)


def create_stub_app(state: StubState) -> FastAPI:
    app = FastAPI()

    @app.get("/healthz")
    async def healthz() -> Response:
        if state.healthz_raw is not None:
            return PlainTextResponse(state.healthz_raw, status_code=state.healthz_status)
        return JSONResponse(state.healthz_body, status_code=state.healthz_status)

    @app.post("/")
    async def jsonrpc(request: Request) -> Response:
        body = await request.json()
        method = body["method"]
        state.rpc_calls.append(method)

        if state.rpc_raw is not None:
            return PlainTextResponse(state.rpc_raw)

        envelope: dict[str, Any] = {"jsonrpc": "2.0", "id": body.get("id")}
        if method in state.rpc_errors:
            envelope["error"] = state.rpc_errors[method]
            return JSONResponse(envelope)

        if method in state.rpc_without_result:
            return JSONResponse(envelope)

        result = state.rpc_results.get(method)
        if callable(result):
            result = result(body.get("params", []))
        envelope["result"] = result
        return JSONResponse(envelope)

    return app


class StubServer:
    """Runs a stub app under uvicorn on a background thread."""

    def __init__(self, state: StubState, port: int):
        self.state = state
        self.base_url = f"http://127.0.0.1:{port}"
        config = uvicorn.Config(create_stub_app(state), host="127.0.0.1", port=port, log_level="warning")
        self._server = uvicorn.Server(config)
        self._thread = threading.Thread(target=self._server.run, daemon=True)

    def start(self) -> None:
        self._thread.start()
        poll(timedelta(milliseconds=10), timedelta(seconds=10), lambda: self._server.started)

    def stop(self) -> None:
        self._server.should_exit = True
        self._thread.join(timeout=5.0)
