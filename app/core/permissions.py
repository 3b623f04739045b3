"""
Role Authorization

Hierarchical role checks shared by route dependencies and admin services.
"""

from typing import Iterable, Optional

from app.core.exceptions import InsufficientPermissions, Unauthenticated
from app.models.enums import UserRole


ROLE_RANK: dict[UserRole, int] = {
    UserRole.USER: 1,
    UserRole.ADMIN: 2,
    UserRole.SUPERADMIN: 3,
}

# Roles each actor may create, update or delete
MANAGEABLE_ROLES: dict[UserRole, frozenset[UserRole]] = {
    UserRole.USER: frozenset(),
    UserRole.ADMIN: frozenset({UserRole.USER}),
    UserRole.SUPERADMIN: frozenset({UserRole.USER, UserRole.ADMIN}),
}


def role_rank(role: UserRole) -> int:
    """Ordinal of a role in the hierarchy."""
    return ROLE_RANK[UserRole(role)]


def has_required_role(required_roles: Iterable[UserRole], actual_role: UserRole) -> bool:
    """
    Check a role against a requirement set.

    A higher-ranked role satisfies any lower-ranked requirement, so the
    lowest required rank is the threshold. An empty set admits everyone.
    """
    required = [UserRole(role) for role in required_roles]
    if not required:
        return True
    return role_rank(actual_role) >= min(role_rank(role) for role in required)


def authorize(
    required_roles: Iterable[UserRole],
    actual_role: Optional[UserRole],
) -> None:
    """
    Allow or deny an operation.

    Args:
        required_roles: Roles declared for the operation; empty means open.
        actual_role: Role of the caller, or None when unauthenticated.

    Raises:
        Unauthenticated: Roles are required and there is no caller.
        InsufficientPermissions: Caller ranks below every required role.
    """
    required = list(required_roles)
    if not required:
        return
    if actual_role is None:
        raise Unauthenticated("User not authenticated")
    if not has_required_role(required, actual_role):
        raise InsufficientPermissions()


def can_manage(actor_role: UserRole, target_role: UserRole) -> bool:
    """True when actor_role may create, update or delete a target_role identity."""
    return UserRole(target_role) in MANAGEABLE_ROLES[UserRole(actor_role)]
