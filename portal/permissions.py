"""
Custom permission classes for role based access control.

Each class checks the account role through :func:`portal.roles.has_role`,
so an admin passes every role requirement and other roles must match
exactly.
"""
from rest_framework.permissions import BasePermission

from .roles import Role, has_role


def _role_of(request):
    user = getattr(request, "user", None)
    if not (user and user.is_authenticated):
        return None
    return user.portal_role


class HasRole(BasePermission):
    """Base class; subclasses set ``required_role``."""
    required_role: Role

    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        role = _role_of(request)
        return bool(role and has_role(role, self.required_role))


class IsAdminRole(HasRole):
    """Allow access only to portal administrators."""
    required_role = Role.ADMIN


def require_role(role: Role) -> type[HasRole]:
    """Build a permission class for ``role``, e.g. ``require_role(Role.DOCTOR)``."""
    return type(f"Is{role.label}Role", (HasRole,), {"required_role": role})
