"""
Pytest configuration and shared fixtures for the storefront gateway tests.

This module provides recording mock transports for gateway unit tests, token
fixtures for the mock APIs, and an in-process storefront wired to all four
mock services over ASGI.
"""

from typing import List, Optional

import httpx
import pytest
import pytest_asyncio

from mock_services.auth_api import app as auth_app
from mock_services.auth_api import mock_auth_api
from mock_services.cart_api import app as cart_app
from mock_services.cart_api import mock_cart_api
from mock_services.coupon_api import app as coupon_app
from mock_services.coupon_api import mock_coupon_api
from mock_services.product_api import app as product_app
from mock_services.product_api import mock_product_api
from mock_services.security import ROLE_ADMIN, ROLE_CUSTOMER, issue_token
from services.base import BaseService
from services.config import ServiceUrls
from services.storefront import Storefront
from services.token_provider import InMemoryTokenProvider
from tests.helpers import Handler, RecordingTransport, RoutingASGITransport, envelope_json


# Gateway fixtures
@pytest.fixture
def token_provider():
    """Token store holding a known token."""
    return InMemoryTokenProvider("abc123")


@pytest.fixture
def recording_transport():
    """Factory for recording transports around a handler."""

    def factory(handler: Optional[Handler] = None) -> RecordingTransport:
        if handler is None:
            handler = lambda request: httpx.Response(200, json=envelope_json())  # noqa: E731
        return RecordingTransport(handler)

    return factory


@pytest_asyncio.fixture
async def gateway_factory(token_provider, recording_transport):
    """Build gateways over recording transports; closes their clients afterwards."""
    clients: List[httpx.AsyncClient] = []

    def factory(handler: Optional[Handler] = None, provider=None):
        transport = recording_transport(handler)
        client = httpx.AsyncClient(transport=transport)
        clients.append(client)
        gateway = BaseService(provider or token_provider, client=client)
        return gateway, transport

    yield factory

    for client in clients:
        await client.aclose()


# Mock service fixtures
@pytest.fixture
def fresh_mock_services():
    """Reset every mock API to its sample data."""
    for api in (mock_auth_api, mock_coupon_api, mock_product_api, mock_cart_api):
        api.reset()
    yield
    for api in (mock_auth_api, mock_coupon_api, mock_product_api, mock_cart_api):
        api.reset()


@pytest.fixture
def admin_token():
    """Signed token carrying the ADMIN role."""
    return issue_token("admin-id", "admin@example.com", "Store Admin", [ROLE_ADMIN])


@pytest.fixture
def customer_token():
    """Signed token carrying the CUSTOMER role."""
    return issue_token("customer-id", "customer@example.com", "Customer", [ROLE_CUSTOMER])


@pytest.fixture
def storefront_urls():
    """Service URLs routed to the in-process mock APIs."""
    return ServiceUrls(
        auth_api="http://auth.test",
        coupon_api="http://coupon.test",
        product_api="http://product.test",
        cart_api="http://cart.test",
    )


@pytest_asyncio.fixture
async def asgi_storefront(fresh_mock_services, storefront_urls):
    """Storefront whose pooled client talks to the mock APIs in-process."""
    transport = RoutingASGITransport(
        {
            "auth.test": auth_app,
            "coupon.test": coupon_app,
            "product.test": product_app,
            "cart.test": cart_app,
        }
    )
    client = httpx.AsyncClient(transport=transport)
    storefront = Storefront(service_urls=storefront_urls, client=client)
    try:
        yield storefront
    finally:
        await storefront.aclose()
        await client.aclose()
