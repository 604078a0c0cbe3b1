"""User role management; users default to the employee role."""

from __future__ import annotations

from typing import Optional

from backend.domain.errors import ForbiddenError, InputValidationError, NotFoundError
from backend.domain.models import ROLE_ADMIN, ROLE_EMPLOYEE, ROLES, RolePatch, UserRole
from backend.repository.data_repository import DataRepository
from backend.utils.config import Settings, get_settings
from backend.utils.logger import get_logger


logger = get_logger(__name__)


class UserRoleNotFoundError(NotFoundError):
    def __init__(self, user_id: str) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")


class RoleService:
    def __init__(
        self,
        repository: Optional[DataRepository] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._repository = repository or DataRepository(self._settings)

    def resolve_role(self, user_id: str) -> UserRole:
        """Return the user's role, creating the employee default on first access."""
        return self._repository.ensure_user_role(user_id)

    def is_admin(self, user_id: str) -> bool:
        role = self._repository.find_user_role(user_id)
        return role is not None and role.is_admin

    def require_admin(self, user_id: str) -> UserRole:
        role = self.resolve_role(user_id)
        if not role.is_admin:
            raise ForbiddenError("Admin access required")
        return role

    def list_roles(self) -> list[UserRole]:
        return self._repository.list_user_roles()

    def update_role(self, acting_user_id: str, target_user_id: str, patch: RolePatch) -> UserRole:
        self.require_admin(acting_user_id)
        updates = patch.supplied()
        if "role" in updates and updates["role"] not in ROLES:
            raise InputValidationError(f"role must be one of {ROLES}")
        if "is_active" in updates and not isinstance(updates["is_active"], bool):
            raise InputValidationError("is_active must be true or false")
        if target_user_id == acting_user_id and updates.get("role") == ROLE_EMPLOYEE:
            raise InputValidationError("Cannot demote yourself")
        if target_user_id == acting_user_id and updates.get("is_active") is False:
            raise InputValidationError("Cannot deactivate yourself")

        self._repository.ensure_user_role(target_user_id)
        updated = self._repository.update_user_role(target_user_id, updates)
        if updated is None:
            raise UserRoleNotFoundError(target_user_id)
        logger.info(
            "User %s role updated by %s: %s",
            target_user_id,
            acting_user_id,
            updates,
        )
        return updated

    def set_active(self, acting_user_id: str, target_user_id: str, is_active: bool) -> UserRole:
        if target_user_id == acting_user_id:
            raise InputValidationError("Cannot deactivate yourself")
        return self.update_role(acting_user_id, target_user_id, RolePatch(is_active=is_active))

    def delete_role(self, acting_user_id: str, target_user_id: str) -> None:
        self.require_admin(acting_user_id)
        if target_user_id == acting_user_id:
            raise InputValidationError("Cannot delete yourself")
        if not self._repository.delete_user_role(target_user_id):
            raise UserRoleNotFoundError(target_user_id)
        logger.info("User %s removed by %s", target_user_id, acting_user_id)

    def bootstrap_admin(self, user_id: str) -> UserRole:
        """Promote a user without an acting admin; used for initial setup."""
        self._repository.ensure_user_role(user_id)
        updated = self._repository.update_user_role(user_id, {"role": ROLE_ADMIN})
        if updated is None:  # pragma: no cover - row ensured above
            raise UserRoleNotFoundError(user_id)
        logger.info("User %s bootstrapped as admin", user_id)
        return updated
