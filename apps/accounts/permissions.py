from rest_framework import permissions


class IsClubAdmin(permissions.BasePermission):
    """
    Permission: User must have the admin role.
    """

    message = 'Only club administrators can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_admin)


class IsParent(permissions.BasePermission):
    """
    Permission: User must have the parent role.
    """

    message = 'Only parents can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and not user.is_admin)
