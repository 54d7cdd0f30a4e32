"""
Auth API client: registration, login and role assignment.

None of these calls attach a bearer token.
"""

import logging
from typing import Optional

from models.dto import LoginRequestDto, RegistrationRequestDto
from models.envelope import ApiType, RequestDescriptor, ResponseEnvelope
from services.base import BaseService
from services.config import ServiceUrls


class AuthService:
    """Typed client for the Auth API."""

    def __init__(self, base_service: BaseService, service_urls: Optional[ServiceUrls] = None) -> None:
        self.base_service = base_service
        self.service_urls = service_urls or ServiceUrls()
        self.logger = logging.getLogger("services.auth")
        self.logger.setLevel(logging.INFO)

    def _url(self, path: str) -> str:
        return f"{self.service_urls.auth_api}/api/auth/{path}"

    async def register(self, registration: RegistrationRequestDto) -> ResponseEnvelope:
        self.logger.info(f"Registering user {registration.email}")
        return await self.base_service.send(
            RequestDescriptor(
                api_type=ApiType.POST,
                url=self._url("register"),
                data=registration,
                requires_auth=False,
            )
        )

    async def login(self, login_request: LoginRequestDto) -> ResponseEnvelope:
        self.logger.info(f"Signing in {login_request.user_name}")
        return await self.base_service.send(
            RequestDescriptor(
                api_type=ApiType.POST,
                url=self._url("login"),
                data=login_request,
                requires_auth=False,
            )
        )

    async def assign_role(self, registration: RegistrationRequestDto) -> ResponseEnvelope:
        """Grant `registration.role` to the user registered under `registration.email`."""
        return await self.base_service.send(
            RequestDescriptor(
                api_type=ApiType.POST,
                url=self._url("AssignRole"),
                data=registration,
                requires_auth=False,
            )
        )
