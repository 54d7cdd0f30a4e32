"""
Coupon API client.
"""

import logging
from typing import Optional
from urllib.parse import quote

from models.dto import CouponDto
from models.envelope import ApiType, RequestDescriptor, ResponseEnvelope
from services.base import BaseService
from services.config import ServiceUrls


class CouponService:
    """Typed client for the Coupon API."""

    def __init__(self, base_service: BaseService, service_urls: Optional[ServiceUrls] = None) -> None:
        self.base_service = base_service
        self.service_urls = service_urls or ServiceUrls()
        self.logger = logging.getLogger("services.coupon")
        self.logger.setLevel(logging.INFO)

    @property
    def _base_url(self) -> str:
        return f"{self.service_urls.coupon_api}/api/coupon"

    async def get_all_coupons(self) -> ResponseEnvelope:
        return await self.base_service.send(RequestDescriptor(api_type=ApiType.GET, url=self._base_url))

    async def get_coupon_by_id(self, coupon_id: int) -> ResponseEnvelope:
        return await self.base_service.send(
            RequestDescriptor(api_type=ApiType.GET, url=f"{self._base_url}/{coupon_id}")
        )

    async def get_coupon(self, coupon_code: str) -> ResponseEnvelope:
        """Look a coupon up by its code."""
        return await self.base_service.send(
            RequestDescriptor(
                api_type=ApiType.GET,
                url=f"{self._base_url}/GetByCode/{quote(coupon_code, safe='')}",
            )
        )

    async def create_coupon(self, coupon: CouponDto) -> ResponseEnvelope:
        self.logger.info(f"Creating coupon {coupon.coupon_code}")
        return await self.base_service.send(
            RequestDescriptor(api_type=ApiType.POST, url=self._base_url, data=coupon)
        )

    async def update_coupon(self, coupon: CouponDto) -> ResponseEnvelope:
        self.logger.info(f"Updating coupon {coupon.coupon_id}")
        return await self.base_service.send(
            RequestDescriptor(api_type=ApiType.PUT, url=self._base_url, data=coupon)
        )

    async def delete_coupon(self, coupon_id: int) -> ResponseEnvelope:
        self.logger.info(f"Deleting coupon {coupon_id}")
        return await self.base_service.send(
            RequestDescriptor(api_type=ApiType.DELETE, url=f"{self._base_url}/{coupon_id}")
        )
