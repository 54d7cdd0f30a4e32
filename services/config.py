"""
Downstream service locations for the storefront gateway.
"""

from typing import Any, Mapping

from pydantic import BaseModel, Field, field_validator

# Configuration keys used by the web front-end ("ServiceUrls:<key>")
_CONFIG_KEYS = {
    "AuthAPI": "auth_api",
    "CouponAPI": "coupon_api",
    "ProductAPI": "product_api",
    "ShoppingCartAPI": "cart_api",
}


class ServiceUrls(BaseModel):
    """Base URLs of the storefront APIs."""

    auth_api: str = Field(default="http://localhost:7002", description="Auth API base URL")
    coupon_api: str = Field(default="http://localhost:7001", description="Coupon API base URL")
    product_api: str = Field(default="http://localhost:7000", description="Product API base URL")
    cart_api: str = Field(default="http://localhost:7003", description="ShoppingCart API base URL")

    @field_validator("auth_api", "coupon_api", "product_api", "cart_api")
    @classmethod
    def _strip_slash(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("service URL must not be empty")
        return value

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> "ServiceUrls":
        """
        Build from a flat configuration mapping.

        Accepts both ``ServiceUrls:CouponAPI`` and bare ``CouponAPI`` keys, as
        well as the field names themselves. Missing keys keep their defaults.
        """
        values = {}
        for key, value in config.items():
            if value is None:
                continue
            name = key.split(":", 1)[1] if key.startswith("ServiceUrls:") else key
            field = _CONFIG_KEYS.get(name, name)
            if field in cls.model_fields:
                values[field] = value
        return cls(**values)
