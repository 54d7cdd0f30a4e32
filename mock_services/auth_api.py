"""
Mock Auth API service for the storefront.

This module provides in-memory user registration, login and role
assignment. Login issues a signed JWT carrying the user's roles; failures are
answered with 400 and an envelope describing the problem.
"""

import asyncio
import hashlib
import logging
import secrets
import uuid
from datetime import datetime
from typing import Dict, Optional, Set

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from mock_services.security import ROLE_ADMIN, ROLE_CUSTOMER, issue_token
from models.dto import LoginRequestDto, LoginResponseDto, RegistrationRequestDto, UserDto
from models.envelope import ResponseEnvelope


class StoredUser(BaseModel):
    """User record kept by the mock Auth API."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    email: str
    name: str = ""
    phone_number: Optional[str] = None
    password_salt: str
    password_hash: str
    roles: Set[str] = Field(default_factory=set)

    def to_dto(self) -> UserDto:
        return UserDto(id=self.id, email=self.email, name=self.name, phone_number=self.phone_number)


def _hash_password(password: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), 100_000).hex()


class MockAuthAPI:
    """Mock auth API implementation."""

    def __init__(self):
        """Initialize mock data."""
        self.logger = logging.getLogger("mock_auth_api")
        self.users: Dict[str, StoredUser] = {}
        self._initialize_mock_data()

    def _initialize_mock_data(self):
        """Create the sample administrator."""
        salt = secrets.token_hex(8)
        admin = self._create_user(
            RegistrationRequestDto(email="admin@example.com", name="Store Admin"),
            salt,
            _hash_password("Admin123*", salt),
        )
        admin.roles.add(ROLE_ADMIN)

    def reset(self):
        """Restore the sample users."""
        self.users.clear()
        self._initialize_mock_data()

    def _create_user(self, registration: RegistrationRequestDto, salt: str, password_hash: str) -> StoredUser:
        user = StoredUser(
            email=registration.email,
            name=registration.name,
            phone_number=registration.phone_number,
            password_salt=salt,
            password_hash=password_hash,
        )
        self.users[user.email.lower()] = user
        return user

    def find_user(self, email: str) -> Optional[StoredUser]:
        return self.users.get(email.lower())

    async def register(self, registration: RegistrationRequestDto) -> UserDto:
        if not registration.email or not registration.password:
            raise ValueError("Email and password are required")
        if self.find_user(registration.email):
            raise ValueError(f"User '{registration.email}' is already taken")

        # Hashing runs off the event loop; the name may have been taken meanwhile
        salt = secrets.token_hex(8)
        password_hash = await asyncio.to_thread(_hash_password, registration.password, salt)
        if self.find_user(registration.email):
            raise ValueError(f"User '{registration.email}' is already taken")

        user = self._create_user(registration, salt, password_hash)
        self.logger.info(f"Registered user {user.email}")
        return user.to_dto()

    async def login(self, login_request: LoginRequestDto) -> Optional[LoginResponseDto]:
        """Return user and token, or None when the credentials do not match."""
        user = self.find_user(login_request.user_name)
        if user is None:
            return None
        password_hash = await asyncio.to_thread(_hash_password, login_request.password, user.password_salt)
        if not secrets.compare_digest(user.password_hash, password_hash):
            return None

        token = issue_token(user.id, user.email, user.name, user.roles)
        self.logger.info(f"Issued token for {user.email}")
        return LoginResponseDto(user=user.to_dto(), token=token)

    async def assign_role(self, email: str, role: str) -> bool:
        user = self.find_user(email)
        if user is None:
            return False
        user.roles.add(role.upper())
        self.logger.info(f"Assigned role {role.upper()} to {email}")
        return True


# Global instance
mock_auth_api = MockAuthAPI()

# FastAPI app for HTTP endpoints
app = FastAPI(title="Mock Auth API", version="1.0.0")


def _bad_request(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content=ResponseEnvelope.failure(message).to_wire())


@app.post("/api/auth/register")
async def register(registration: RegistrationRequestDto):
    """Register a user, optionally with a role."""
    try:
        user = await mock_auth_api.register(registration)
    except ValueError as e:
        return _bad_request(str(e))

    await mock_auth_api.assign_role(registration.email, registration.role or ROLE_CUSTOMER)
    return ResponseEnvelope.success(user).to_wire()


@app.post("/api/auth/login")
async def login(login_request: LoginRequestDto):
    """Sign in and receive a bearer token."""
    login_response = await mock_auth_api.login(login_request)
    if login_response is None:
        return _bad_request("Username or password is incorrect")
    return ResponseEnvelope.success(login_response).to_wire()


@app.post("/api/auth/AssignRole")
async def assign_role(registration: RegistrationRequestDto):
    """Grant a role to an existing user."""
    assigned = await mock_auth_api.assign_role(registration.email, registration.role or ROLE_CUSTOMER)
    if not assigned:
        return _bad_request("Error encountered")
    return ResponseEnvelope.success(True).to_wire()


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Mock Auth API",
        "users_count": len(mock_auth_api.users),
        "timestamp": datetime.now().isoformat(),
    }


# Utility functions for direct access (non-HTTP)
async def get_auth_api() -> MockAuthAPI:
    """Get the mock auth API instance."""
    return mock_auth_api
