"""
ShoppingCart API client.
"""

import logging
from typing import Optional
from urllib.parse import quote

from models.dto import CartDto
from models.envelope import ApiType, RequestDescriptor, ResponseEnvelope
from services.base import BaseService
from services.config import ServiceUrls


class CartService:
    """Typed client for the ShoppingCart API."""

    def __init__(self, base_service: BaseService, service_urls: Optional[ServiceUrls] = None) -> None:
        self.base_service = base_service
        self.service_urls = service_urls or ServiceUrls()
        self.logger = logging.getLogger("services.cart")
        self.logger.setLevel(logging.INFO)

    def _url(self, action: str) -> str:
        return f"{self.service_urls.cart_api}/api/cart/{action}"

    async def get_cart_by_user_id(self, user_id: str) -> ResponseEnvelope:
        return await self.base_service.send(
            RequestDescriptor(api_type=ApiType.GET, url=self._url(f"GetCart/{quote(user_id, safe='')}"))
        )

    async def upsert_cart(self, cart: CartDto) -> ResponseEnvelope:
        """Add the cart's lines, creating the cart or increasing quantities as needed."""
        return await self.base_service.send(
            RequestDescriptor(api_type=ApiType.POST, url=self._url("CartUpsert"), data=cart)
        )

    async def remove_from_cart(self, cart_details_id: int) -> ResponseEnvelope:
        self.logger.info(f"Removing cart line {cart_details_id}")
        return await self.base_service.send(
            RequestDescriptor(api_type=ApiType.POST, url=self._url("RemoveCart"), data=cart_details_id)
        )

    async def apply_coupon(self, cart: CartDto) -> ResponseEnvelope:
        return await self.base_service.send(
            RequestDescriptor(api_type=ApiType.POST, url=self._url("ApplyCoupon"), data=cart)
        )

    async def remove_coupon(self, cart: CartDto) -> ResponseEnvelope:
        return await self.base_service.send(
            RequestDescriptor(api_type=ApiType.POST, url=self._url("RemoveCoupon"), data=cart)
        )
