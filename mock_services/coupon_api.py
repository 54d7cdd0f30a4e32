"""
Mock Coupon API service for the storefront.

This module provides an in-memory coupon service that speaks the response
envelope wire format: coupon lookup by id or code, and admin-only CRUD.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI

from mock_services.security import ROLE_ADMIN, require_role, require_user
from models.dto import CouponDto
from models.envelope import ResponseEnvelope


class MockCouponAPI:
    """Mock coupon API implementation."""

    def __init__(self):
        """Initialize mock data."""
        self.logger = logging.getLogger("mock_coupon_api")
        self.coupons: Dict[int, CouponDto] = {}
        self._next_id = 1
        self._initialize_mock_data()

    def _initialize_mock_data(self):
        """Create sample coupons."""
        for code, amount, minimum in [("10OFF", 10.0, 20), ("20OFF", 20.0, 40)]:
            self._add(CouponDto(coupon_code=code, discount_amount=amount, min_amount=minimum))

    def reset(self):
        """Restore the sample data."""
        self.coupons.clear()
        self._next_id = 1
        self._initialize_mock_data()

    def _add(self, coupon: CouponDto) -> CouponDto:
        stored = coupon.model_copy(update={"coupon_id": self._next_id})
        self.coupons[stored.coupon_id] = stored
        self._next_id += 1
        return stored

    async def list_coupons(self) -> List[CouponDto]:
        return list(self.coupons.values())

    async def get_coupon(self, coupon_id: int) -> Optional[CouponDto]:
        return self.coupons.get(coupon_id)

    async def get_coupon_by_code(self, code: str) -> Optional[CouponDto]:
        """Case-insensitive lookup by coupon code."""
        wanted = code.lower()
        for coupon in self.coupons.values():
            if coupon.coupon_code.lower() == wanted:
                return coupon
        return None

    async def create_coupon(self, coupon: CouponDto) -> CouponDto:
        if await self.get_coupon_by_code(coupon.coupon_code):
            raise ValueError(f"Coupon code '{coupon.coupon_code}' already exists")
        stored = self._add(coupon)
        self.logger.info(f"Created coupon {stored.coupon_code} ({stored.coupon_id})")
        return stored

    async def update_coupon(self, coupon: CouponDto) -> CouponDto:
        if coupon.coupon_id not in self.coupons:
            raise KeyError(f"Coupon {coupon.coupon_id} does not exist")
        self.coupons[coupon.coupon_id] = coupon
        self.logger.info(f"Updated coupon {coupon.coupon_id}")
        return coupon

    async def delete_coupon(self, coupon_id: int) -> None:
        if self.coupons.pop(coupon_id, None) is None:
            raise KeyError(f"Coupon {coupon_id} does not exist")
        self.logger.info(f"Deleted coupon {coupon_id}")


# Global instance
mock_coupon_api = MockCouponAPI()

# FastAPI app for HTTP endpoints
app = FastAPI(title="Mock Coupon API", version="1.0.0")


def _error(e: Exception) -> Dict[str, Any]:
    message = e.args[0] if isinstance(e, KeyError) and e.args else str(e)
    return ResponseEnvelope.failure(message).to_wire()


@app.get("/api/coupon")
async def get_coupons(claims: dict = Depends(require_user)):
    """List all coupons."""
    coupons = await mock_coupon_api.list_coupons()
    return ResponseEnvelope.success(coupons).to_wire()


@app.get("/api/coupon/GetByCode/{code}")
async def get_coupon_by_code(code: str, claims: dict = Depends(require_user)):
    """Get a coupon by its code."""
    coupon = await mock_coupon_api.get_coupon_by_code(code)
    if not coupon:
        return ResponseEnvelope.failure(f"Coupon '{code}' not found").to_wire()
    return ResponseEnvelope.success(coupon).to_wire()


@app.get("/api/coupon/{coupon_id}")
async def get_coupon(coupon_id: int, claims: dict = Depends(require_user)):
    """Get a coupon by id."""
    coupon = await mock_coupon_api.get_coupon(coupon_id)
    if not coupon:
        return ResponseEnvelope.failure(f"Coupon {coupon_id} not found").to_wire()
    return ResponseEnvelope.success(coupon).to_wire()


@app.post("/api/coupon")
async def create_coupon(coupon: CouponDto, claims: dict = Depends(require_role(ROLE_ADMIN))):
    """Create a coupon."""
    try:
        created = await mock_coupon_api.create_coupon(coupon)
    except ValueError as e:
        return _error(e)
    return ResponseEnvelope.success(created).to_wire()


@app.put("/api/coupon")
async def update_coupon(coupon: CouponDto, claims: dict = Depends(require_role(ROLE_ADMIN))):
    """Update a coupon."""
    try:
        updated = await mock_coupon_api.update_coupon(coupon)
    except KeyError as e:
        return _error(e)
    return ResponseEnvelope.success(updated).to_wire()


@app.delete("/api/coupon/{coupon_id}")
async def delete_coupon(coupon_id: int, claims: dict = Depends(require_role(ROLE_ADMIN))):
    """Delete a coupon."""
    try:
        await mock_coupon_api.delete_coupon(coupon_id)
    except KeyError as e:
        return _error(e)
    return ResponseEnvelope.success().to_wire()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Mock Coupon API",
        "coupons_count": len(mock_coupon_api.coupons),
        "timestamp": datetime.now().isoformat(),
    }


# Utility functions for direct access (non-HTTP)
async def get_coupon_api() -> MockCouponAPI:
    """Get the mock coupon API instance."""
    return mock_coupon_api
