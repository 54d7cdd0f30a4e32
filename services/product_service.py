"""
Product API client.

Create and update send the product as a multipart form so an image file can
travel with it; everything else is plain JSON.
"""

import logging
from typing import Optional

from models.dto import ProductDto
from models.envelope import ApiType, ContentType, RequestDescriptor, ResponseEnvelope
from services.base import BaseService
from services.config import ServiceUrls


class ProductService:
    """Typed client for the Product API."""

    def __init__(self, base_service: BaseService, service_urls: Optional[ServiceUrls] = None) -> None:
        self.base_service = base_service
        self.service_urls = service_urls or ServiceUrls()
        self.logger = logging.getLogger("services.product")
        self.logger.setLevel(logging.INFO)

    @property
    def _base_url(self) -> str:
        return f"{self.service_urls.product_api}/api/product"

    async def get_all_products(self) -> ResponseEnvelope:
        return await self.base_service.send(RequestDescriptor(api_type=ApiType.GET, url=self._base_url))

    async def get_product_by_id(self, product_id: int) -> ResponseEnvelope:
        return await self.base_service.send(
            RequestDescriptor(api_type=ApiType.GET, url=f"{self._base_url}/{product_id}")
        )

    async def create_product(self, product: ProductDto) -> ResponseEnvelope:
        self.logger.info(f"Creating product '{product.name}'")
        return await self.base_service.send(
            RequestDescriptor(
                api_type=ApiType.POST,
                url=self._base_url,
                data=product.to_form_fields(),
                content_type=ContentType.MULTIPART_FORM_DATA,
            )
        )

    async def update_product(self, product: ProductDto) -> ResponseEnvelope:
        self.logger.info(f"Updating product {product.product_id}")
        return await self.base_service.send(
            RequestDescriptor(
                api_type=ApiType.PUT,
                url=self._base_url,
                data=product.to_form_fields(),
                content_type=ContentType.MULTIPART_FORM_DATA,
            )
        )

    async def delete_product(self, product_id: int) -> ResponseEnvelope:
        self.logger.info(f"Deleting product {product_id}")
        return await self.base_service.send(
            RequestDescriptor(api_type=ApiType.DELETE, url=f"{self._base_url}/{product_id}")
        )
