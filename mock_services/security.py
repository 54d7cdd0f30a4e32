"""
JWT helpers shared by the mock storefront APIs.

The mock Auth API issues HS256 tokens; the Coupon, Product and ShoppingCart
APIs validate them through the `require_user` / `require_role` dependencies.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, Optional

import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

ROLE_ADMIN = "ADMIN"
ROLE_CUSTOMER = "CUSTOMER"


class JwtOptions(BaseModel):
    """Signing and validation settings for mock API tokens."""

    secret: str = Field(
        default="mock-storefront-signing-secret-change-me-in-real-deployments",
        min_length=32,
        description="HS256 signing key",
    )
    issuer: str = Field(default="storefront-auth-api")
    audience: str = Field(default="storefront-client")
    expires_minutes: int = Field(default=7 * 24 * 60, gt=0)


jwt_options = JwtOptions()

bearer_scheme = HTTPBearer(auto_error=False)


def issue_token(
    user_id: str,
    email: str,
    name: str,
    roles: Iterable[str],
    options: Optional[JwtOptions] = None,
) -> str:
    """Sign a token carrying the user's identity and roles."""
    options = options or jwt_options
    now = datetime.now(timezone.utc)
    payload = {
        "iss": options.issuer,
        "aud": options.audience,
        "sub": user_id,
        "email": email,
        "name": name,
        "role": sorted(roles),
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=options.expires_minutes)).timestamp()),
    }
    return jwt.encode(payload, options.secret, algorithm="HS256")


def decode_token(token: str, options: Optional[JwtOptions] = None) -> Dict[str, Any]:
    """Validate signature, issuer, audience and expiry; return the claims."""
    options = options or jwt_options
    return jwt.decode(
        token,
        options.secret,
        algorithms=["HS256"],
        audience=options.audience,
        issuer=options.issuer,
    )


async def require_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Dict[str, Any]:
    """FastAPI dependency: reject requests without a valid bearer token (401)."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    try:
        return decode_token(credentials.credentials)
    except jwt.PyJWTError as e:
        raise HTTPException(status_code=401, detail=f"Invalid token: {e}")


def require_role(role: str) -> Callable[..., Any]:
    """FastAPI dependency factory: require `role` on top of a valid token (403)."""

    async def dependency(claims: Dict[str, Any] = Depends(require_user)) -> Dict[str, Any]:
        if role not in claims.get("role", []):
            raise HTTPException(status_code=403, detail=f"Role '{role}' required")
        return claims

    return dependency
