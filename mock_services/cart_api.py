"""
Mock ShoppingCart API service for the storefront.

This module provides an in-memory cart service. Carts are stored as a header
(owner, coupon) plus product lines; reading a cart prices every line from the
product catalogue and applies the coupon discount when the cart total reaches
the coupon's minimum amount.
"""

import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, List, Optional

from fastapi import Body, Depends, FastAPI

from mock_services.coupon_api import mock_coupon_api
from mock_services.product_api import mock_product_api
from mock_services.security import require_user
from models.dto import CartDetailsDto, CartDto, CartHeaderDto, CouponDto, ProductDto
from models.envelope import ResponseEnvelope

ProductLookup = Callable[[int], Awaitable[Optional[ProductDto]]]
CouponLookup = Callable[[str], Awaitable[Optional[CouponDto]]]


class MockCartAPI:
    """Mock shopping cart API implementation."""

    def __init__(
        self,
        product_lookup: Optional[ProductLookup] = None,
        coupon_lookup: Optional[CouponLookup] = None,
    ):
        """
        Initialize the cart store.

        Args:
            product_lookup: Resolves a product id to its catalogue entry
            coupon_lookup: Resolves a coupon code to its coupon
        """
        self.logger = logging.getLogger("mock_cart_api")

        self.product_lookup: ProductLookup = product_lookup or mock_product_api.get_product
        self.coupon_lookup: CouponLookup = coupon_lookup or mock_coupon_api.get_coupon_by_code

        self.headers: Dict[int, CartHeaderDto] = {}
        self.details: Dict[int, CartDetailsDto] = {}
        self._next_header_id = 1
        self._next_details_id = 1

    def reset(self):
        """Drop every cart."""
        self.headers.clear()
        self.details.clear()
        self._next_header_id = 1
        self._next_details_id = 1

    def _header_for_user(self, user_id: Optional[str]) -> Optional[CartHeaderDto]:
        for header in self.headers.values():
            if header.user_id == user_id:
                return header
        return None

    def _lines(self, cart_header_id: int) -> List[CartDetailsDto]:
        return [line for line in self.details.values() if line.cart_header_id == cart_header_id]

    def _add_line(self, cart_header_id: int, line: CartDetailsDto) -> CartDetailsDto:
        stored = CartDetailsDto(
            cart_details_id=self._next_details_id,
            cart_header_id=cart_header_id,
            product_id=line.product_id,
            count=line.count,
        )
        self.details[stored.cart_details_id] = stored
        self._next_details_id += 1
        return stored

    async def upsert_cart(self, cart: CartDto) -> CartDto:
        """
        Merge the cart's lines into the stored cart.

        A user's first upsert creates the header; a product already in the cart
        has its count increased, a new product is added as a new line.
        """
        user_id = cart.cart_header.user_id
        if not user_id:
            raise ValueError("Cart header must carry a user id")

        header = self._header_for_user(user_id)
        if header is None:
            header = CartHeaderDto(
                cart_header_id=self._next_header_id,
                user_id=user_id,
                coupon_code=cart.cart_header.coupon_code,
            )
            self.headers[header.cart_header_id] = header
            self._next_header_id += 1
            self.logger.info(f"Created cart {header.cart_header_id} for user {user_id}")

        for line in cart.cart_details or []:
            existing = next(
                (d for d in self._lines(header.cart_header_id) if d.product_id == line.product_id),
                None,
            )
            if existing is None:
                self._add_line(header.cart_header_id, line)
            else:
                existing.count += line.count

        return await self.get_cart(user_id)

    async def get_cart(self, user_id: str) -> CartDto:
        """Price the user's cart and apply its coupon."""
        stored = self._header_for_user(user_id)
        if stored is None:
            raise KeyError(f"No cart found for user {user_id}")

        header = stored.model_copy(update={"discount": 0.0, "cart_total": 0.0})
        lines: List[CartDetailsDto] = []
        total = 0.0
        for line in self._lines(header.cart_header_id):
            product = await self.product_lookup(line.product_id)
            priced = line.model_copy(update={"product": product})
            if product is not None:
                total += priced.count * product.price
            lines.append(priced)

        if header.coupon_code:
            coupon = await self.coupon_lookup(header.coupon_code)
            if coupon is not None and total >= coupon.min_amount:
                total -= coupon.discount_amount
                header.discount = coupon.discount_amount

        header.cart_total = round(total, 2)
        return CartDto(cart_header=header, cart_details=lines)

    async def remove_line(self, cart_details_id: int) -> None:
        """Remove one line; the header goes too when it was the last line."""
        line = self.details.pop(cart_details_id, None)
        if line is None:
            raise KeyError(f"Cart line {cart_details_id} does not exist")
        if not self._lines(line.cart_header_id):
            self.headers.pop(line.cart_header_id, None)
            self.logger.info(f"Removed empty cart {line.cart_header_id}")

    async def set_coupon(self, user_id: Optional[str], coupon_code: str) -> None:
        header = self._header_for_user(user_id)
        if header is None:
            raise KeyError(f"No cart found for user {user_id}")
        header.coupon_code = coupon_code


# Global instance
mock_cart_api = MockCartAPI()

# FastAPI app for HTTP endpoints
app = FastAPI(title="Mock ShoppingCart API", version="1.0.0")


@app.get("/api/cart/GetCart/{user_id}")
async def get_cart(user_id: str, claims: dict = Depends(require_user)):
    """Get the priced cart of a user."""
    try:
        cart = await mock_cart_api.get_cart(user_id)
    except KeyError as e:
        return ResponseEnvelope.failure(e.args[0]).to_wire()
    return ResponseEnvelope.success(cart).to_wire()


@app.post("/api/cart/CartUpsert")
async def cart_upsert(cart: CartDto, claims: dict = Depends(require_user)):
    """Create a cart or add lines to it."""
    try:
        updated = await mock_cart_api.upsert_cart(cart)
    except ValueError as e:
        return ResponseEnvelope.failure(str(e)).to_wire()
    return ResponseEnvelope.success(updated).to_wire()


@app.post("/api/cart/RemoveCart")
async def remove_cart(cart_details_id: int = Body(...), claims: dict = Depends(require_user)):
    """Remove one cart line."""
    try:
        await mock_cart_api.remove_line(cart_details_id)
    except KeyError as e:
        return ResponseEnvelope.failure(e.args[0]).to_wire()
    return ResponseEnvelope.success(True).to_wire()


@app.post("/api/cart/ApplyCoupon")
async def apply_coupon(cart: CartDto, claims: dict = Depends(require_user)):
    """Attach the header's coupon code to the stored cart."""
    try:
        await mock_cart_api.set_coupon(cart.cart_header.user_id, cart.cart_header.coupon_code or "")
    except KeyError as e:
        return ResponseEnvelope.failure(e.args[0]).to_wire()
    return ResponseEnvelope.success(True).to_wire()


@app.post("/api/cart/RemoveCoupon")
async def remove_coupon(cart: CartDto, claims: dict = Depends(require_user)):
    """Detach the coupon from the stored cart."""
    try:
        await mock_cart_api.set_coupon(cart.cart_header.user_id, "")
    except KeyError as e:
        return ResponseEnvelope.failure(e.args[0]).to_wire()
    return ResponseEnvelope.success(True).to_wire()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Mock ShoppingCart API",
        "carts_count": len(mock_cart_api.headers),
        "timestamp": datetime.now().isoformat(),
    }


# Utility functions for direct access (non-HTTP)
async def get_cart_api() -> MockCartAPI:
    """Get the mock cart API instance."""
    return mock_cart_api
