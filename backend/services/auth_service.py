"""Gateway token check guarding the identity headers."""

from __future__ import annotations

import secrets
from typing import Optional

from backend.utils.config import Settings, get_settings


class AuthenticationError(Exception):
    """Base authentication failure."""


class GatewayTokenNotConfiguredError(AuthenticationError):
    """Raised when GATEWAY_TOKEN is missing."""


class InvalidGatewayTokenError(AuthenticationError):
    """Raised when provided token is invalid."""


class AuthService:
    """Validates the bearer token the upstream gateway attaches.

    The gateway authenticates users and forwards their identity in headers;
    this service only checks that a request really passed through it.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self._settings = settings or get_settings()

    @property
    def auth_enabled(self) -> bool:
        return bool(self._settings.gateway_token)

    def _expected_token(self) -> str:
        if not self._settings.gateway_token:
            raise GatewayTokenNotConfiguredError(
                "GATEWAY_TOKEN is not configured. Set GATEWAY_TOKEN in environment variables."
            )
        return self._settings.gateway_token

    def validate_bearer_token(self, bearer_token: str) -> None:
        if not self.auth_enabled:
            return
        if not secrets.compare_digest(bearer_token, self._expected_token()):
            raise InvalidGatewayTokenError("Invalid bearer token")
