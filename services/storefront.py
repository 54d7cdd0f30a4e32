"""
Storefront client wiring for the web front-end.

Builds one pooled gateway and one token store, and hands both to the typed
Auth, Coupon, Product and ShoppingCart clients.
"""

import logging
from typing import Any, Optional

import httpx

from models.dto import LoginRequestDto, LoginResponseDto
from models.envelope import ResponseEnvelope
from services.auth_service import AuthService
from services.base import BaseService
from services.cart_service import CartService
from services.config import ServiceUrls
from services.coupon_service import CouponService
from services.product_service import ProductService
from services.token_provider import InMemoryTokenProvider


class Storefront:
    """All storefront API clients sharing one gateway and one session token."""

    def __init__(
        self,
        service_urls: Optional[ServiceUrls] = None,
        token_provider: Optional[InMemoryTokenProvider] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.service_urls = service_urls or ServiceUrls()
        self.token_provider = token_provider or InMemoryTokenProvider()
        self.base_service = BaseService(self.token_provider, client=client)

        self.auth = AuthService(self.base_service, self.service_urls)
        self.coupons = CouponService(self.base_service, self.service_urls)
        self.products = ProductService(self.base_service, self.service_urls)
        self.cart = CartService(self.base_service, self.service_urls)

        self.logger = logging.getLogger("services.storefront")
        self.logger.setLevel(logging.INFO)

    async def login(self, login_request: LoginRequestDto) -> ResponseEnvelope:
        """
        Sign in and keep the issued token for later calls.

        The token is stored only when the Auth API reports success and returns
        a non-empty token; otherwise the session stays signed out.
        """
        response = await self.auth.login(login_request)
        if not response.is_success or response.result is None:
            self.logger.warning(f"Login failed for {login_request.user_name}: {response.message}")
            return response

        try:
            login_response = LoginResponseDto.model_validate(response.result)
        except ValueError as e:
            self.logger.error(f"Unexpected login response: {e}")
            return ResponseEnvelope.failure(str(e))

        if not login_response.token:
            return ResponseEnvelope.failure("Login response did not include a token")

        self.token_provider.set_token(login_response.token)
        self.logger.info(f"Signed in as {login_request.user_name}")
        return response

    def logout(self) -> None:
        self.token_provider.clear_token()

    @property
    def is_authenticated(self) -> bool:
        return self.token_provider.get_token() is not None

    async def aclose(self) -> None:
        await self.base_service.aclose()

    async def __aenter__(self) -> "Storefront":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def create_storefront(
    service_urls: Optional[ServiceUrls] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Storefront:
    """Create a Storefront instance."""
    return Storefront(service_urls=service_urls, client=client)
