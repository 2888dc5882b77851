from datetime import timedelta
from typing import Any

import requests

from corewait.errors import JsonRpcError, MalformedResponseError

JSONRPC_VERSION = "2.0"


def call_jsonrpc(
    url: str,
    method: str,
    params: list[Any] | None = None,
    timeout: timedelta = timedelta(seconds=1),
    session: requests.Session | None = None,
) -> Any:
    """
    POST a single JSON-RPC 2.0 request and return its `result` member.

    Transport failures surface as `requests.RequestException` so that callers
    decide for themselves whether a node that is not listening yet is an error.
    """
    payload = {
        "jsonrpc": JSONRPC_VERSION,
        "method": method,
        "params": params if params is not None else [],
        "id": 1,
    }
    post = session.post if session is not None else requests.post

    with post(
        url,
        json=payload,
        headers={"Content-Type": "application/json"},
        timeout=timeout.total_seconds(),
    ) as response:
        try:
            body = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"{method} returned a non-JSON body (HTTP {response.status_code}): {response.text[:200]!r}",
            ) from e

    if not isinstance(body, dict):
        raise MalformedResponseError(f"{method} returned a non-object JSON body: {body!r}")

    error = body.get("error")
    if error is not None:
        if isinstance(error, dict):
            raise JsonRpcError(error.get("code"), str(error.get("message", "")))
        raise JsonRpcError(None, str(error))

    if "result" not in body:
        raise MalformedResponseError(f"{method} response has no result member: {body!r}")

    return body["result"]
