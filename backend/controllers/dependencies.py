"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends, Header, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from backend.domain.models import UserContext, UserRole
from backend.services.auth_service import (
    AuthService,
    GatewayTokenNotConfiguredError,
    InvalidGatewayTokenError,
)
from backend.services.booking_service import BookingService
from backend.services.cancellation_service import CancellationService
from backend.services.role_service import RoleService
from backend.services.seat_service import SeatRegistryService
from backend.utils.config import get_settings


bearer_scheme = HTTPBearer(auto_error=False)


def _service_from_state(request: Request, attribute: str, label: str):
    service = getattr(request.app.state, attribute, None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{label} is not initialized",
        )
    return service


def get_auth_service(request: Request) -> AuthService:
    service = getattr(request.app.state, "auth_service", None)
    if service is None:
        service = AuthService(settings=get_settings())
        request.app.state.auth_service = service
    return service


def get_seat_service(request: Request) -> SeatRegistryService:
    return _service_from_state(request, "seat_service", "Seat service")


def get_booking_service(request: Request) -> BookingService:
    return _service_from_state(request, "booking_service", "Booking service")


def get_cancellation_service(request: Request) -> CancellationService:
    return _service_from_state(request, "cancellation_service", "Cancellation service")


def get_role_service(request: Request) -> RoleService:
    return _service_from_state(request, "role_service", "Role service")


async def get_current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
    x_user_email: Optional[str] = Header(default=None),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserContext:
    """Resolve the caller identity forwarded by the gateway."""
    if auth_service.auth_enabled:
        if credentials is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authorization header with Bearer token is required",
            )
        try:
            auth_service.validate_bearer_token(credentials.credentials)
        except (GatewayTokenNotConfiguredError, InvalidGatewayTokenError) as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=str(exc),
            ) from exc
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="X-User-Id header is required",
        )
    return UserContext(
        user_id=x_user_id.strip(),
        user_name=x_user_name or None,
        user_email=x_user_email or None,
    )


def get_current_role(
    user: UserContext = Depends(get_current_user),
    role_service: RoleService = Depends(get_role_service),
) -> UserRole:
    role = role_service.resolve_role(user.user_id)
    if not role.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated",
        )
    return role


def require_admin(role: UserRole = Depends(get_current_role)) -> UserRole:
    if not role.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return role
