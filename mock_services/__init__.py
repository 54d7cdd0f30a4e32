"""
Mock Services module for the storefront.

This package provides in-memory Auth, Coupon, Product and ShoppingCart APIs
that speak the response envelope wire format, for tests, the demo and local
development of the storefront gateway client.
"""

from .auth_api import MockAuthAPI, get_auth_api
from .cart_api import MockCartAPI, get_cart_api
from .coupon_api import MockCouponAPI, get_coupon_api
from .product_api import MockProductAPI, get_product_api

__all__ = [
    "MockAuthAPI",
    "get_auth_api",
    "MockCartAPI",
    "get_cart_api",
    "MockCouponAPI",
    "get_coupon_api",
    "MockProductAPI",
    "get_product_api",
]
