"""HTTP controller layer for user roles."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from backend.controllers.dependencies import get_current_role, get_role_service, require_admin
from backend.controllers.schemas import (
    MessageResponse,
    UpdateRoleRequest,
    UpdateStatusRequest,
    UserRoleResponse,
    patch_from,
)
from backend.domain.errors import ForbiddenError, InputValidationError, NotFoundError
from backend.domain.models import RolePatch, UserRole
from backend.services.role_service import RoleService


router = APIRouter(prefix="/api", tags=["users"])


def _to_http(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ForbiddenError):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("/user/role", response_model=UserRoleResponse)
def get_my_role(role: UserRole = Depends(get_current_role)) -> UserRoleResponse:
    return UserRoleResponse.model_validate(role)


@router.get("/users", response_model=list[UserRoleResponse])
def list_users(
    _: UserRole = Depends(require_admin),
    service: RoleService = Depends(get_role_service),
) -> list[UserRoleResponse]:
    return [UserRoleResponse.model_validate(item) for item in service.list_roles()]


@router.patch("/users/{user_id}/role", response_model=UserRoleResponse)
def update_user_role(
    user_id: str,
    payload: UpdateRoleRequest,
    acting: UserRole = Depends(require_admin),
    service: RoleService = Depends(get_role_service),
) -> UserRoleResponse:
    patch = patch_from(payload, RolePatch)
    if patch.is_empty():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="No fields to update",
        )
    try:
        updated = service.update_role(acting.user_id, user_id, patch)
    except (NotFoundError, ForbiddenError, InputValidationError) as exc:
        raise _to_http(exc) from exc
    return UserRoleResponse.model_validate(updated)


@router.patch("/users/{user_id}/status", response_model=UserRoleResponse)
def update_user_status(
    user_id: str,
    payload: UpdateStatusRequest,
    acting: UserRole = Depends(require_admin),
    service: RoleService = Depends(get_role_service),
) -> UserRoleResponse:
    try:
        updated = service.set_active(acting.user_id, user_id, payload.is_active)
    except (NotFoundError, ForbiddenError, InputValidationError) as exc:
        raise _to_http(exc) from exc
    return UserRoleResponse.model_validate(updated)


@router.delete("/users/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: str,
    acting: UserRole = Depends(require_admin),
    service: RoleService = Depends(get_role_service),
) -> MessageResponse:
    try:
        service.delete_role(acting.user_id, user_id)
    except (NotFoundError, ForbiddenError, InputValidationError) as exc:
        raise _to_http(exc) from exc
    return MessageResponse(message="User removed successfully")
