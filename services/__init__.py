"""
Service modules for the storefront API gateway client.

This package contains the outbound gateway, the bearer token store and the
typed clients for the Auth, Coupon, Product and ShoppingCart APIs.
"""

from .auth_service import AuthService
from .base import ENVELOPE_KEYS, STATUS_MESSAGES, BaseService, create_http_client
from .cart_service import CartService
from .config import ServiceUrls
from .coupon_service import CouponService
from .product_service import ProductService
from .storefront import Storefront, create_storefront
from .token_provider import InMemoryTokenProvider, TokenProvider

__all__ = [
    # Gateway
    "BaseService",
    "ENVELOPE_KEYS",
    "STATUS_MESSAGES",
    "create_http_client",
    # Token store
    "InMemoryTokenProvider",
    "TokenProvider",
    # Configuration
    "ServiceUrls",
    # Domain services
    "AuthService",
    "CartService",
    "CouponService",
    "ProductService",
    # Wiring
    "Storefront",
    "create_storefront",
]
