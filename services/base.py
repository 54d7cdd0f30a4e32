"""
API gateway client for the storefront services.

BaseService turns a RequestDescriptor into one HTTP call over a pooled httpx
client and normalizes whatever happens (a response, a transport failure, a
serialization error) into a ResponseEnvelope. It never raises to its caller.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic_core import to_jsonable_python

from models.envelope import FilePart, RequestDescriptor, ResponseEnvelope
from services.token_provider import TokenProvider

# Status codes answered with a fixed message, whatever the body says
STATUS_MESSAGES: Dict[int, str] = {
    404: "Not Found",
    403: "Access Denied",
    401: "Unauthorized",
    500: "Internal Server Error",
}

# A JSON body is an envelope only if it carries the success flag
ENVELOPE_KEYS = frozenset({"isSuccess", "is_success"})


def create_http_client(
    timeout: float = 30.0,
    max_connections: int = 100,
    max_keepalive_connections: int = 20,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """
    Create the pooled async client shared by every gateway call.

    Args:
        timeout: Transport timeout in seconds for connect/read/write/pool
        max_connections: Upper bound on open connections
        max_keepalive_connections: Idle connections kept for reuse
        transport: Optional transport override (mock or ASGI transports in tests)

    Returns:
        Configured httpx.AsyncClient
    """
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        limits=httpx.Limits(
            max_connections=max_connections,
            max_keepalive_connections=max_keepalive_connections,
        ),
        transport=transport,
    )


class BaseService:
    """
    Outbound gateway with bearer-token attachment and envelope normalization.

    One instance owns (or borrows) a single pooled client. Concurrent calls
    share it and are otherwise independent; nothing is cached between calls
    and each call is exactly one attempt.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the gateway.

        Args:
            token_provider: Source of the caller's bearer token
            client: Shared pooled client; created lazily when omitted
            timeout: Transport timeout used when the client is created here
        """
        self.token_provider = token_provider
        self.timeout = timeout

        self._client: Optional[httpx.AsyncClient] = client
        self._owns_client: bool = client is None

        self.logger: logging.Logger = logging.getLogger("services.base")
        self.logger.setLevel(logging.INFO)

    @property
    def client(self) -> httpx.AsyncClient:
        """The pooled transport handle, reused across calls."""
        if self._client is None:
            self._client = create_http_client(timeout=self.timeout)
        return self._client

    async def send(self, descriptor: RequestDescriptor) -> ResponseEnvelope:
        """
        Perform the call described by `descriptor`.

        Args:
            descriptor: What to call and how to encode it

        Returns:
            ResponseEnvelope; failures are reported in it, never raised
        """
        try:
            request = self._build_request(descriptor)
            self.logger.debug(f"Sending {request.method} {request.url}")

            response = await self.client.send(request)

            return self._to_envelope(descriptor, response)

        except Exception as e:
            self.logger.error(f"Error calling {descriptor.api_type.value} {descriptor.url}: {e}")
            return ResponseEnvelope.failure(str(e) or e.__class__.__name__)

    def _build_request(self, descriptor: RequestDescriptor) -> httpx.Request:
        """Build the outbound request: headers, method, URL and body."""
        headers: Dict[str, str] = {
            "Accept": "*/*" if descriptor.is_multipart else "application/json",
        }

        if descriptor.requires_auth:
            token = self.token_provider.get_token()
            if token:
                headers["Authorization"] = f"Bearer {token}"
            else:
                self.logger.warning(f"No bearer token available for {descriptor.url}")

        body: Dict[str, Any] = {}
        if descriptor.is_multipart:
            body["files"] = self._form_parts(descriptor.data)
        elif descriptor.data is not None:
            body["json"] = to_jsonable_python(descriptor.data, by_alias=True)

        return self.client.build_request(
            descriptor.api_type.value,
            descriptor.url,
            headers=headers,
            **body,
        )

    @staticmethod
    def _form_parts(fields: Dict[str, Any]) -> List[Tuple[str, Tuple[Any, ...]]]:
        """One multipart part per field, in payload order."""
        parts: List[Tuple[str, Tuple[Any, ...]]] = []
        for name, field in fields.items():
            if isinstance(field, FilePart):
                if field.content_type:
                    parts.append((name, (field.filename, field.stream, field.content_type)))
                else:
                    parts.append((name, (field.filename, field.stream)))
            else:
                # No filename: sent as a plain form-data text part
                parts.append((name, (None, field.as_text())))
        return parts

    def _to_envelope(self, descriptor: RequestDescriptor, response: httpx.Response) -> ResponseEnvelope:
        """Map an HTTP response to an envelope."""
        status_message = STATUS_MESSAGES.get(response.status_code)
        if status_message:
            self.logger.warning(f"{descriptor.api_type.value} {descriptor.url} returned {response.status_code}")
            return ResponseEnvelope.failure(status_message)

        if not response.content.strip():
            return ResponseEnvelope(
                is_success=response.is_success,
                message="" if response.is_success else response.reason_phrase,
            )

        # Any other status: the server's envelope is authoritative, if it is one
        body = response.json()
        if not isinstance(body, dict) or ENVELOPE_KEYS.isdisjoint(body):
            self.logger.warning(
                f"{descriptor.api_type.value} {descriptor.url} returned {response.status_code} without an envelope"
            )
            if response.is_success:
                return ResponseEnvelope.failure("Response body is not a response envelope")
            return ResponseEnvelope.failure(response.reason_phrase or f"HTTP {response.status_code}")

        return ResponseEnvelope.model_validate(body)

    async def aclose(self) -> None:
        """Close the pooled client if this gateway created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "BaseService":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(owns_client={self._owns_client})"
