"""
Mock Product API service for the storefront.

This module provides an in-memory product catalogue. Reads are open to any
signed-in user; create and update take a multipart form (with an optional
image file) and, like delete, require the ADMIN role.
"""

import logging
import os
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from fastapi import Depends, FastAPI, HTTPException, Request
from starlette.datastructures import UploadFile

from mock_services.security import ROLE_ADMIN, require_role, require_user
from models.dto import ProductDto
from models.envelope import ResponseEnvelope

# Form fields that map onto ProductDto (wire names)
PRODUCT_FORM_FIELDS = ("productId", "name", "price", "description", "categoryName", "imageUrl", "imageLocalPath")


class MockProductAPI:
    """Mock product API implementation."""

    def __init__(self):
        """Initialize mock data."""
        self.logger = logging.getLogger("mock_product_api")
        self.products: Dict[int, ProductDto] = {}
        self.images: Dict[int, Tuple[str, bytes]] = {}
        self._next_id = 1
        self._initialize_mock_data()

    def _initialize_mock_data(self):
        """Create a sample catalogue."""
        sample_products = [
            {"name": "Samosa", "price": 15.0, "category_name": "Appetizer", "description": "Crispy pastry with spiced potatoes."},
            {"name": "Paneer Tikka", "price": 13.99, "category_name": "Appetizer", "description": "Grilled cottage cheese cubes."},
            {"name": "Sweet Pie", "price": 10.99, "category_name": "Dessert", "description": "Seasonal fruit pie."},
            {"name": "Pav Bhaji", "price": 15.0, "category_name": "Entree", "description": "Spiced vegetable mash with buttered buns."},
        ]
        for data in sample_products:
            self._add(ProductDto(**data))

    def reset(self):
        """Restore the sample catalogue."""
        self.products.clear()
        self.images.clear()
        self._next_id = 1
        self._initialize_mock_data()

    def _add(self, product: ProductDto) -> ProductDto:
        stored = product.model_copy(update={"product_id": self._next_id, "image": None})
        self.products[stored.product_id] = stored
        self._next_id += 1
        return stored

    def _store_image(self, product: ProductDto, filename: str, content: bytes) -> ProductDto:
        extension = os.path.splitext(filename)[1]
        image_name = f"{product.product_id}{extension}"
        self.images[product.product_id] = (filename, content)
        return product.model_copy(
            update={
                "image_url": f"/ProductImages/{image_name}",
                "image_local_path": f"wwwroot/ProductImages/{image_name}",
            }
        )

    async def list_products(self) -> List[ProductDto]:
        return list(self.products.values())

    async def get_product(self, product_id: int) -> Optional[ProductDto]:
        return self.products.get(product_id)

    async def create_product(self, product: ProductDto, image: Optional[Tuple[str, bytes]] = None) -> ProductDto:
        stored = self._add(product)
        if image:
            stored = self._store_image(stored, *image)
            self.products[stored.product_id] = stored
        self.logger.info(f"Created product {stored.product_id} '{stored.name}'")
        return stored

    async def update_product(self, product: ProductDto, image: Optional[Tuple[str, bytes]] = None) -> ProductDto:
        if product.product_id not in self.products:
            raise KeyError(f"Product {product.product_id} does not exist")
        updated = product.model_copy(update={"image": None})
        if image:
            updated = self._store_image(updated, *image)
        self.products[updated.product_id] = updated
        self.logger.info(f"Updated product {updated.product_id}")
        return updated

    async def delete_product(self, product_id: int) -> None:
        if self.products.pop(product_id, None) is None:
            raise KeyError(f"Product {product_id} does not exist")
        self.images.pop(product_id, None)
        self.logger.info(f"Deleted product {product_id}")


# Global instance
mock_product_api = MockProductAPI()

# FastAPI app for HTTP endpoints
app = FastAPI(title="Mock Product API", version="1.0.0")


async def _read_product_form(request: Request) -> Tuple[ProductDto, Optional[Tuple[str, bytes]]]:
    """Parse a multipart product form; empty text fields fall back to defaults."""
    form = await request.form()
    values: Dict[str, Any] = {}
    for name in PRODUCT_FORM_FIELDS:
        value = form.get(name)
        if isinstance(value, str) and value != "":
            values[name] = value

    image = None
    upload = form.get("image")
    if isinstance(upload, UploadFile) and upload.filename:
        image = (upload.filename, await upload.read())

    return ProductDto.model_validate(values), image


@app.get("/api/product")
async def get_products(claims: dict = Depends(require_user)):
    """List the catalogue."""
    products = await mock_product_api.list_products()
    return ResponseEnvelope.success(products).to_wire()


@app.get("/api/product/{product_id}")
async def get_product(product_id: int, claims: dict = Depends(require_user)):
    """Get one product."""
    product = await mock_product_api.get_product(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return ResponseEnvelope.success(product).to_wire()


@app.post("/api/product")
async def create_product(request: Request, claims: dict = Depends(require_role(ROLE_ADMIN))):
    """Create a product from a multipart form."""
    try:
        product, image = await _read_product_form(request)
        created = await mock_product_api.create_product(product, image)
    except ValueError as e:
        return ResponseEnvelope.failure(str(e)).to_wire()
    return ResponseEnvelope.success(created).to_wire()


@app.put("/api/product")
async def update_product(request: Request, claims: dict = Depends(require_role(ROLE_ADMIN))):
    """Update a product from a multipart form."""
    try:
        product, image = await _read_product_form(request)
        updated = await mock_product_api.update_product(product, image)
    except ValueError as e:
        return ResponseEnvelope.failure(str(e)).to_wire()
    except KeyError as e:
        return ResponseEnvelope.failure(e.args[0]).to_wire()
    return ResponseEnvelope.success(updated).to_wire()


@app.delete("/api/product/{product_id}")
async def delete_product(product_id: int, claims: dict = Depends(require_role(ROLE_ADMIN))):
    """Delete a product."""
    try:
        await mock_product_api.delete_product(product_id)
    except KeyError as e:
        return ResponseEnvelope.failure(e.args[0]).to_wire()
    return ResponseEnvelope.success().to_wire()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Mock Product API",
        "products_count": len(mock_product_api.products),
        "timestamp": datetime.now().isoformat(),
    }


# Utility functions for direct access (non-HTTP)
async def get_product_api() -> MockProductAPI:
    """Get the mock product API instance."""
    return mock_product_api
