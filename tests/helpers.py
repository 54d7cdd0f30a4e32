"""
Test helpers for the storefront gateway tests.

Transports that record or route requests, and small parsers for inspecting
the bodies the gateway produced.
"""

import json
from typing import Any, Callable, Dict, List

import httpx

Handler = Callable[[httpx.Request], httpx.Response]


def envelope_json(is_success: bool = True, message: str = "", result: Any = None) -> Dict[str, Any]:
    """Wire-format envelope body."""
    return {"isSuccess": is_success, "message": message, "result": result}


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler: Handler):
        self.requests: List[httpx.Request] = []

        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(record)


class RoutingASGITransport(httpx.AsyncBaseTransport):
    """Dispatch requests to in-process ASGI apps by host name."""

    def __init__(self, apps: Dict[str, Any]):
        self.transports = {host: httpx.ASGITransport(app=app) for host, app in apps.items()}

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        transport = self.transports.get(request.url.host)
        if transport is None:
            raise httpx.ConnectError(f"No route to host {request.url.host}", request=request)
        return await transport.handle_async_request(request)


def multipart_parts(request: httpx.Request) -> List[bytes]:
    """Split a multipart request body into its raw parts."""
    boundary = request.headers["Content-Type"].split("boundary=", 1)[1].encode()
    chunks = request.content.split(b"--" + boundary)
    return [chunk for chunk in chunks[1:] if chunk.strip() not in (b"", b"--")]


def json_body(request: httpx.Request) -> Any:
    return json.loads(request.content.decode("utf-8"))
