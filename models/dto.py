"""
Data transfer objects exchanged with the storefront APIs.

Field names are snake_case in Python and camelCase on the wire, matching the
JSON produced by the downstream services.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.envelope import FilePart, FormValue, TextField


class CamelModel(BaseModel):
    """Base for DTOs serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ProductDto(CamelModel):
    """Catalogue product."""

    product_id: int = 0
    name: str = ""
    price: float = 0.0
    description: Optional[str] = None
    category_name: Optional[str] = None
    image_url: Optional[str] = None
    image_local_path: Optional[str] = None
    count: int = Field(default=1, ge=0, description="Quantity selected on the product page")
    image: Optional[FilePart] = Field(default=None, exclude=True, description="Image upload, multipart only")

    def to_form_fields(self) -> Dict[str, FormValue]:
        """Multipart form fields for create/update calls, in wire order."""
        fields: Dict[str, FormValue] = {
            "productId": TextField(value=self.product_id),
            "name": TextField(value=self.name),
            "price": TextField(value=self.price),
            "description": TextField(value=self.description),
            "categoryName": TextField(value=self.category_name),
            "imageUrl": TextField(value=self.image_url),
            "imageLocalPath": TextField(value=self.image_local_path),
        }
        fields["image"] = self.image if self.image is not None else TextField(value=None)
        return fields


class CouponDto(CamelModel):
    """Discount coupon."""

    coupon_id: int = 0
    coupon_code: str = ""
    discount_amount: float = 0.0
    min_amount: int = 0


class CartHeaderDto(CamelModel):
    """Cart header: owner, coupon and computed totals."""

    cart_header_id: int = 0
    user_id: Optional[str] = None
    coupon_code: Optional[str] = None
    discount: float = 0.0
    cart_total: float = 0.0


class CartDetailsDto(CamelModel):
    """One product line of a cart."""

    cart_details_id: int = 0
    cart_header_id: int = 0
    cart_header: Optional[CartHeaderDto] = None
    product_id: int
    product: Optional[ProductDto] = None
    count: int = Field(default=1, ge=0)


class CartDto(CamelModel):
    """Cart header with its product lines."""

    cart_header: CartHeaderDto
    cart_details: Optional[List[CartDetailsDto]] = None


class UserDto(CamelModel):
    """Public view of a registered user."""

    id: str = ""
    email: str = ""
    name: str = ""
    phone_number: Optional[str] = None


class RegistrationRequestDto(CamelModel):
    email: str
    name: str = ""
    phone_number: Optional[str] = None
    password: str = ""
    role: Optional[str] = None


class LoginRequestDto(CamelModel):
    user_name: str
    password: str


class LoginResponseDto(CamelModel):
    user: Optional[UserDto] = None
    token: str = ""
