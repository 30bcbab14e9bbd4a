from rest_framework import permissions


class IsStoreAdmin(permissions.BasePermission):
    """
    Permission: User must have the admin or superadmin role.
    """

    message = 'Only store administrators can perform this action.'

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_store_admin)


class IsStoreAdminOrReadOnly(IsStoreAdmin):
    """
    Permission: Any operator may read, only administrators may write.
    """

    def has_permission(self, request, view):
        if request.method in permissions.SAFE_METHODS:
            return bool(request.user and request.user.is_authenticated)
        return super().has_permission(request, view)
