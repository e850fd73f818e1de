"""
Role permissions - request-level RBAC for workforce endpoints.

Engines enforce their own authorization tables; these classes only keep
anonymous and inactive callers away from the views.
"""

from rest_framework.permissions import SAFE_METHODS, BasePermission


class IsActiveAccount(BasePermission):
    """Authenticated caller whose account is ACTIVE."""

    message = 'An active account is required.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_active)


class HasRole(IsActiveAccount):
    """Active caller holding one of ``allowed_roles``."""

    allowed_roles = ()

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        if request.user.is_superuser:
            return True
        return request.user.role in self.allowed_roles


def role_required(*roles):
    """
    Build a permission class for the given roles.

    Usage:
        permission_classes = [role_required(User.ROLE_DIRECTOR, User.ROLE_MANAGER)]
    """
    return type(
        'RoleRequired',
        (HasRole,),
        {
            'allowed_roles': tuple(roles),
            'message': f"Required role: {' or '.join(roles)}",
        },
    )


class IsDirectorOrManager(HasRole):
    allowed_roles = ('director', 'manager')
    message = 'Only directors and managers can perform this action.'


class IsDirectorOrManagerOrReadOnly(IsActiveAccount):
    """Read for any active account, write for directors and managers."""

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False
        if request.method in SAFE_METHODS:
            return True
        return request.user.is_superuser or request.user.role in IsDirectorOrManager.allowed_roles
