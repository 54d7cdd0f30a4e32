"""
Models module for the storefront API gateway client.

This package contains the request descriptor, the response envelope and the
data transfer objects exchanged with the storefront APIs.
"""

from .dto import (
    CamelModel,
    CartDetailsDto,
    CartDto,
    CartHeaderDto,
    CouponDto,
    LoginRequestDto,
    LoginResponseDto,
    ProductDto,
    RegistrationRequestDto,
    UserDto,
)
from .envelope import (
    ApiType,
    ContentType,
    FilePart,
    FormValue,
    RequestDescriptor,
    ResponseEnvelope,
    TextField,
)

__all__ = [
    # Gateway contract
    "ApiType",
    "ContentType",
    "FilePart",
    "FormValue",
    "RequestDescriptor",
    "ResponseEnvelope",
    "TextField",
    # Domain DTOs
    "CamelModel",
    "CartDetailsDto",
    "CartDto",
    "CartHeaderDto",
    "CouponDto",
    "LoginRequestDto",
    "LoginResponseDto",
    "ProductDto",
    "RegistrationRequestDto",
    "UserDto",
]
