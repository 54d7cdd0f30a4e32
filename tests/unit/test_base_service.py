"""
Unit tests for the storefront API gateway client.

Covers header construction, body encoding, status mapping and the
never-raise contract of BaseService.send.
"""

import asyncio
import io

import httpx
import pytest
from models.dto import CouponDto
from models.envelope import ApiType, ContentType, FilePart, RequestDescriptor, ResponseEnvelope, TextField
from services.base import STATUS_MESSAGES, BaseService, create_http_client
from services.token_provider import InMemoryTokenProvider

from tests.helpers import envelope_json, json_body, multipart_parts


def json_descriptor(**overrides) -> RequestDescriptor:
    values = {"url": "https://api.example/products"}
    values.update(overrides)
    return RequestDescriptor(**values)


class TestRequestHeaders:
    """Test cases for Accept and Authorization headers."""

    @pytest.mark.asyncio
    async def test_bearer_token_attached_once(self, gateway_factory):
        """Test that an authenticated call carries the token exactly once."""
        gateway, transport = gateway_factory()

        await gateway.send(json_descriptor(requires_auth=True))

        request = transport.requests[0]
        assert request.headers.get_list("Authorization") == ["Bearer abc123"]

    @pytest.mark.asyncio
    async def test_no_token_when_auth_not_required(self, gateway_factory):
        """Test that anonymous calls carry no Authorization header."""
        gateway, transport = gateway_factory()

        await gateway.send(json_descriptor(requires_auth=False))

        assert "Authorization" not in transport.requests[0].headers

    @pytest.mark.asyncio
    async def test_missing_token_still_sends(self, gateway_factory):
        """Test that a signed-out caller's request is sent without a token."""
        gateway, transport = gateway_factory(provider=InMemoryTokenProvider())

        envelope = await gateway.send(json_descriptor(requires_auth=True))

        assert len(transport.requests) == 1
        assert "Authorization" not in transport.requests[0].headers
        assert envelope.is_success is True

    @pytest.mark.asyncio
    async def test_token_read_per_call(self, gateway_factory):
        """Test that the current token is read on every call."""
        provider = InMemoryTokenProvider("first")
        gateway, transport = gateway_factory(provider=provider)

        await gateway.send(json_descriptor())
        provider.set_token("second")
        await gateway.send(json_descriptor())

        assert transport.requests[0].headers["Authorization"] == "Bearer first"
        assert transport.requests[1].headers["Authorization"] == "Bearer second"

    @pytest.mark.asyncio
    async def test_accept_json(self, gateway_factory):
        """Test the Accept header of JSON calls."""
        gateway, transport = gateway_factory()

        await gateway.send(json_descriptor())

        assert transport.requests[0].headers["Accept"] == "application/json"

    @pytest.mark.asyncio
    async def test_accept_any_for_multipart(self, gateway_factory):
        """Test the Accept header of multipart calls."""
        gateway, transport = gateway_factory()

        await gateway.send(
            json_descriptor(api_type=ApiType.POST, content_type=ContentType.MULTIPART_FORM_DATA, data={"name": "Pen"})
        )

        assert transport.requests[0].headers["Accept"] == "*/*"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("api_type", list(ApiType))
    async def test_method_and_url(self, gateway_factory, api_type):
        """Test that method and URL come from the descriptor."""
        gateway, transport = gateway_factory()

        await gateway.send(json_descriptor(url="https://api.example/coupon/5", api_type=api_type))

        request = transport.requests[0]
        assert request.method == api_type.value
        assert str(request.url) == "https://api.example/coupon/5"


class TestRequestBody:
    """Test cases for JSON and multipart encoding."""

    @pytest.mark.asyncio
    async def test_json_body(self, gateway_factory):
        """Test that dict payloads are sent as UTF-8 JSON."""
        gateway, transport = gateway_factory()

        await gateway.send(json_descriptor(api_type=ApiType.POST, data={"name": "Crème brûlée", "count": 2}))

        request = transport.requests[0]
        assert request.headers["Content-Type"] == "application/json"
        assert json_body(request) == {"name": "Crème brûlée", "count": 2}

    @pytest.mark.asyncio
    async def test_json_body_from_dto(self, gateway_factory):
        """Test that DTO payloads are sent with their wire names."""
        gateway, transport = gateway_factory()

        await gateway.send(
            json_descriptor(api_type=ApiType.PUT, data=CouponDto(coupon_id=3, coupon_code="5OFF", discount_amount=5, min_amount=10))
        )

        assert json_body(transport.requests[0]) == {
            "couponId": 3,
            "couponCode": "5OFF",
            "discountAmount": 5.0,
            "minAmount": 10,
        }

    @pytest.mark.asyncio
    async def test_scalar_json_body(self, gateway_factory):
        """Test that a bare number is a valid JSON payload."""
        gateway, transport = gateway_factory()

        await gateway.send(json_descriptor(api_type=ApiType.POST, data=42))

        assert json_body(transport.requests[0]) == 42

    @pytest.mark.asyncio
    async def test_no_body_without_payload(self, gateway_factory):
        """Test that a missing payload sends no body."""
        gateway, transport = gateway_factory()

        await gateway.send(json_descriptor())

        request = transport.requests[0]
        assert request.content == b""
        assert "Content-Type" not in request.headers

    @pytest.mark.asyncio
    async def test_multipart_one_part_per_field(self, gateway_factory):
        """Test part count and part naming of a multipart form."""
        gateway, transport = gateway_factory()

        await gateway.send(
            json_descriptor(
                api_type=ApiType.POST,
                content_type=ContentType.MULTIPART_FORM_DATA,
                data={
                    "name": TextField(value="Pen"),
                    "price": 1.5,
                    "description": None,
                    "image": FilePart(filename="pen.png", stream=b"\x89PNG", content_type="image/png"),
                },
            )
        )

        request = transport.requests[0]
        assert request.headers["Content-Type"].startswith("multipart/form-data; boundary=")

        parts = multipart_parts(request)
        assert len(parts) == 4
        assert b'name="name"' in parts[0] and b"Pen" in parts[0]
        assert b'name="price"' in parts[1] and b"1.5" in parts[1]
        assert b'name="description"' in parts[2] and b"filename=" not in parts[2]
        assert b'name="image"; filename="pen.png"' in parts[3]
        assert b"Content-Type: image/png" in parts[3]
        assert b"\x89PNG" in parts[3]

    @pytest.mark.asyncio
    async def test_multipart_text_only_form(self, gateway_factory):
        """Test that a form without files is still multipart."""
        gateway, transport = gateway_factory()

        await gateway.send(
            json_descriptor(api_type=ApiType.PUT, content_type=ContentType.MULTIPART_FORM_DATA, data={"name": "Pen"})
        )

        request = transport.requests[0]
        assert request.headers["Content-Type"].startswith("multipart/form-data")
        assert len(multipart_parts(request)) == 1

    @pytest.mark.asyncio
    async def test_multipart_file_stream(self, gateway_factory):
        """Test that file objects are streamed into their part."""
        gateway, transport = gateway_factory()

        await gateway.send(
            json_descriptor(
                api_type=ApiType.POST,
                content_type=ContentType.MULTIPART_FORM_DATA,
                data={"document": FilePart(filename="terms.txt", stream=io.BytesIO(b"terms and conditions"))},
            )
        )

        parts = multipart_parts(transport.requests[0])
        assert len(parts) == 1
        assert b'name="document"; filename="terms.txt"' in parts[0]
        assert b"terms and conditions" in parts[0]


class TestResponseMapping:
    """Test cases for mapping HTTP responses to envelopes."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", sorted(STATUS_MESSAGES))
    async def test_fixed_messages_ignore_body(self, gateway_factory, status_code):
        """Test that recognized statuses get fixed messages whatever the body says."""
        gateway, _ = gateway_factory(
            lambda request: httpx.Response(status_code, json=envelope_json(True, "server text", {"id": 1}))
        )

        envelope = await gateway.send(json_descriptor())

        assert envelope == ResponseEnvelope(is_success=False, message=STATUS_MESSAGES[status_code])

    @pytest.mark.asyncio
    async def test_not_found(self, gateway_factory):
        """Test the 404 mapping with a non-JSON body."""
        gateway, _ = gateway_factory(lambda request: httpx.Response(404, text="<html>missing</html>"))

        envelope = await gateway.send(json_descriptor())

        assert envelope.is_success is False
        assert envelope.message == "Not Found"
        assert envelope.result is None

    @pytest.mark.asyncio
    async def test_products_end_to_end(self, gateway_factory):
        """Test a successful product listing with a bearer token."""
        products = [{"id": 1, "name": "Pen"}]
        gateway, transport = gateway_factory(
            lambda request: httpx.Response(200, json={"isSuccess": True, "message": "", "result": products})
        )

        envelope = await gateway.send(
            RequestDescriptor(
                url="https://api.example/products",
                api_type=ApiType.GET,
                requires_auth=True,
                content_type=ContentType.JSON,
            )
        )

        assert transport.requests[0].headers["Authorization"] == "Bearer abc123"
        assert envelope.is_success is True
        assert envelope.message == ""
        assert envelope.result == products

    @pytest.mark.asyncio
    async def test_server_failure_passed_through(self, gateway_factory):
        """Test that a server-reported failure keeps its message."""
        gateway, _ = gateway_factory(
            lambda request: httpx.Response(200, json=envelope_json(False, "Coupon code is invalid"))
        )

        envelope = await gateway.send(json_descriptor())

        assert envelope.is_success is False
        assert envelope.message == "Coupon code is invalid"

    @pytest.mark.asyncio
    async def test_unlisted_error_status_parses_body(self, gateway_factory):
        """Test that a 400 with an envelope body is returned verbatim."""
        gateway, _ = gateway_factory(
            lambda request: httpx.Response(400, json=envelope_json(False, "Username or password is incorrect"))
        )

        envelope = await gateway.send(json_descriptor())

        assert envelope.is_success is False
        assert envelope.message == "Username or password is incorrect"

    @pytest.mark.asyncio
    async def test_non_json_body_becomes_failure(self, gateway_factory):
        """Test that an unparseable body on an unlisted status is a failure, not an exception."""
        gateway, _ = gateway_factory(lambda request: httpx.Response(502, text="Bad gateway from proxy"))

        envelope = await gateway.send(json_descriptor())

        assert envelope.is_success is False
        assert envelope.message

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status_code,body,message",
        [
            (422, {"detail": [{"loc": ["body", "cartHeader"], "msg": "Field required", "type": "missing"}]}, "Unprocessable Entity"),
            (405, {"detail": "Method Not Allowed"}, "Method Not Allowed"),
            (400, {"error": "bad"}, "Bad Request"),
            (502, {}, "Bad Gateway"),
            (409, [1, 2, 3], "Conflict"),
        ],
    )
    async def test_error_body_without_envelope_keys(self, gateway_factory, status_code, body, message):
        """Test that a JSON error body lacking isSuccess is a failure with the reason phrase."""
        gateway, _ = gateway_factory(lambda request: httpx.Response(status_code, json=body))

        envelope = await gateway.send(json_descriptor())

        assert envelope == ResponseEnvelope(is_success=False, message=message)

    @pytest.mark.asyncio
    async def test_success_body_without_envelope_keys(self, gateway_factory):
        """Test that a 2xx JSON body that is not an envelope is still a failure."""
        gateway, _ = gateway_factory(lambda request: httpx.Response(200, json={"id": 1, "name": "Pen"}))

        envelope = await gateway.send(json_descriptor())

        assert envelope.is_success is False
        assert envelope.message == "Response body is not a response envelope"
        assert envelope.result is None

    @pytest.mark.asyncio
    async def test_python_field_names_accepted(self, gateway_factory):
        gateway, _ = gateway_factory(
            lambda request: httpx.Response(200, json={"is_success": False, "message": "Cart is empty"})
        )

        envelope = await gateway.send(json_descriptor())

        assert envelope == ResponseEnvelope(is_success=False, message="Cart is empty")

    @pytest.mark.asyncio
    async def test_empty_success_body(self, gateway_factory):
        """Test that 204 No Content is a success without a result."""
        gateway, _ = gateway_factory(lambda request: httpx.Response(204))

        envelope = await gateway.send(json_descriptor(api_type=ApiType.DELETE))

        assert envelope == ResponseEnvelope(is_success=True, message="", result=None)

    @pytest.mark.asyncio
    async def test_empty_error_body(self, gateway_factory):
        """Test that an empty error body reports the reason phrase."""
        gateway, _ = gateway_factory(lambda request: httpx.Response(503))

        envelope = await gateway.send(json_descriptor())

        assert envelope.is_success is False
        assert envelope.message == "Service Unavailable"


class TestFailureHandling:
    """Test cases for the never-raise contract."""

    @pytest.mark.asyncio
    async def test_connection_failure(self, gateway_factory):
        """Test that a refused connection becomes a failure envelope."""

        def refuse(request):
            raise httpx.ConnectError("Connection refused", request=request)

        gateway, _ = gateway_factory(refuse)

        envelope = await gateway.send(json_descriptor())

        assert envelope.is_success is False
        assert envelope.message == "Connection refused"

    @pytest.mark.asyncio
    async def test_timeout(self, gateway_factory):
        """Test that a transport timeout becomes a failure envelope."""

        def time_out(request):
            raise httpx.ReadTimeout("timed out", request=request)

        gateway, _ = gateway_factory(time_out)

        envelope = await gateway.send(json_descriptor())

        assert envelope == ResponseEnvelope(is_success=False, message="timed out")

    @pytest.mark.asyncio
    async def test_exception_without_text_uses_class_name(self, gateway_factory):
        """Test that an empty exception message still yields a non-empty envelope message."""

        def fail(request):
            raise RuntimeError()

        gateway, _ = gateway_factory(fail)

        envelope = await gateway.send(json_descriptor())

        assert envelope.is_success is False
        assert envelope.message == "RuntimeError"

    @pytest.mark.asyncio
    async def test_malformed_url(self, gateway_factory):
        """Test that an unusable URL is reported, not raised."""
        gateway, transport = gateway_factory()

        envelope = await gateway.send(json_descriptor(url="http://api.example:notaport/products"))

        assert envelope.is_success is False
        assert envelope.message
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_unserializable_payload(self, gateway_factory):
        """Test that a payload JSON cannot express is reported, not raised."""
        gateway, transport = gateway_factory()

        envelope = await gateway.send(json_descriptor(api_type=ApiType.POST, data={"lock": asyncio.Lock()}))

        assert envelope.is_success is False
        assert envelope.message
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_token_provider_failure(self, gateway_factory):
        """Test that a failing token store is reported, not raised."""

        class BrokenProvider:
            def get_token(self):
                raise LookupError("session expired")

        gateway, transport = gateway_factory(provider=BrokenProvider())

        envelope = await gateway.send(json_descriptor())

        assert envelope == ResponseEnvelope(is_success=False, message="session expired")
        assert transport.requests == []


class TestPoolingAndIndependence:
    """Test cases for transport reuse and call independence."""

    @pytest.mark.asyncio
    async def test_identical_calls_hit_the_network_twice(self, gateway_factory):
        """Test that nothing is cached between identical calls."""
        counter = {"calls": 0}

        def handler(request):
            counter["calls"] += 1
            return httpx.Response(200, json=envelope_json(result=counter["calls"]))

        gateway, transport = gateway_factory(handler)
        descriptor = json_descriptor()

        first = await gateway.send(descriptor)
        second = await gateway.send(descriptor)

        assert len(transport.requests) == 2
        assert first.result == 1
        assert second.result == 2

    @pytest.mark.asyncio
    async def test_concurrent_calls_are_independent(self, gateway_factory):
        """Test concurrent calls over the shared client."""

        def handler(request):
            if request.url.path.endswith("/fail"):
                return httpx.Response(500)
            return httpx.Response(200, json=envelope_json(result=request.url.path))

        gateway, transport = gateway_factory(handler)

        envelopes = await asyncio.gather(
            gateway.send(json_descriptor(url="https://api.example/a")),
            gateway.send(json_descriptor(url="https://api.example/fail")),
            gateway.send(json_descriptor(url="https://api.example/b")),
        )

        assert [e.result for e in envelopes] == ["/a", None, "/b"]
        assert envelopes[1].message == "Internal Server Error"
        assert len(transport.requests) == 3

    @pytest.mark.asyncio
    async def test_client_created_once_and_reused(self):
        """Test that a gateway without an injected client reuses its own."""
        gateway = BaseService(InMemoryTokenProvider("abc123"))

        first = gateway.client
        second = gateway.client

        assert first is second
        await gateway.aclose()

    @pytest.mark.asyncio
    async def test_injected_client_not_closed(self):
        """Test that a borrowed client outlives the gateway."""
        client = create_http_client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))

        async with BaseService(InMemoryTokenProvider(), client=client) as gateway:
            assert gateway.client is client

        assert client.is_closed is False
        await client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_closed(self):
        """Test that a gateway closes the client it created."""
        gateway = BaseService(InMemoryTokenProvider())
        client = gateway.client

        await gateway.aclose()

        assert client.is_closed is True

    def test_create_http_client_limits(self):
        """Test transport configuration."""
        client = create_http_client(timeout=5.0)

        assert client.timeout.read == 5.0
        assert client.timeout.connect == 5.0
