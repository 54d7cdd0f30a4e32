"""
Request descriptor and response envelope models for the storefront gateway.

A RequestDescriptor describes one outbound call to a downstream storefront
API (Auth, Coupon, Product, ShoppingCart). A ResponseEnvelope is the uniform
success/failure/result wrapper every call resolves to.
"""

from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ApiType(str, Enum):
    """HTTP method of a descriptor."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class ContentType(str, Enum):
    """Body encoding of a descriptor."""

    JSON = "json"
    MULTIPART_FORM_DATA = "multipart_form_data"


class TextField(BaseModel):
    """Plain text part of a multipart form."""

    value: Any = Field(default=None, description="Field value, sent as its string form")

    def as_text(self) -> str:
        """String form of the value; empty for None."""
        if self.value is None:
            return ""
        return str(self.value)


class FilePart(BaseModel):
    """Binary file part of a multipart form."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    filename: str = Field(min_length=1, description="File name sent in the part's Content-Disposition")
    stream: Any = Field(description="Raw bytes or a readable binary file object")
    content_type: Optional[str] = Field(default=None, description="Explicit part Content-Type")

    @field_validator("stream")
    @classmethod
    def _check_stream(cls, value: Any) -> Any:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        if callable(getattr(value, "read", None)):
            return value
        raise ValueError("stream must be bytes or a readable binary file object")


FormValue = Union[TextField, FilePart]

# Scalars accepted as shorthand for TextField in multipart payloads
_TEXT_SCALARS = (str, int, float, bool)


class RequestDescriptor(BaseModel):
    """Caller-supplied description of a single HTTP call."""

    url: str = Field(min_length=1, description="Absolute target URL")
    api_type: ApiType = Field(default=ApiType.GET, description="HTTP method")
    data: Any = Field(default=None, description="JSON payload or multipart form fields")
    content_type: ContentType = Field(default=ContentType.JSON, description="Body encoding")
    requires_auth: bool = Field(default=True, description="Attach the caller's bearer token")

    @model_validator(mode="after")
    def _normalize_form(self) -> "RequestDescriptor":
        if self.content_type != ContentType.MULTIPART_FORM_DATA:
            return self

        if self.data is None:
            self.data = {}
            return self

        if not isinstance(self.data, dict):
            raise ValueError("multipart payload must be a mapping of field name to TextField or FilePart")

        fields: Dict[str, FormValue] = {}
        for name, value in self.data.items():
            if isinstance(value, (TextField, FilePart)):
                fields[name] = value
            elif value is None or isinstance(value, _TEXT_SCALARS):
                fields[name] = TextField(value=value)
            else:
                raise ValueError(f"multipart field '{name}' must be flat, got {type(value).__name__}")
        self.data = fields
        return self

    @property
    def is_multipart(self) -> bool:
        return self.content_type == ContentType.MULTIPART_FORM_DATA


class ResponseEnvelope(BaseModel):
    """Uniform result of every gateway call.

    On the wire the envelope is ``{"isSuccess": bool, "message": str, "result": any}``.
    """

    model_config = ConfigDict(populate_by_name=True)

    is_success: bool = Field(default=True, alias="isSuccess", description="Whether the call succeeded")
    message: str = Field(default="", description="Human-readable explanation, empty on success")
    result: Optional[Any] = Field(default=None, description="Structured payload returned by the server")

    @field_validator("message", mode="before")
    @classmethod
    def _none_message(cls, value: Any) -> Any:
        return "" if value is None else value

    @classmethod
    def success(cls, result: Any = None, message: str = "") -> "ResponseEnvelope":
        """Build a successful envelope."""
        return cls(is_success=True, message=message, result=result)

    @classmethod
    def failure(cls, message: str) -> "ResponseEnvelope":
        """Build a failed envelope carrying only a message."""
        return cls(is_success=False, message=message)

    def to_wire(self) -> Dict[str, Any]:
        """Serialize using the wire field names."""
        return self.model_dump(mode="json", by_alias=True)
