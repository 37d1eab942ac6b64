"""
Authz permissions for user administration endpoints.
"""
from rest_framework import permissions


class IsClinicAdmin(permissions.BasePermission):
    """
    Permission class that only allows clinic administrators.

    The admin must belong to a clinic: every admin query is scoped by it.
    """
    message = 'Access denied. This resource is available to clinic administrators only.'

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False

        return bool(getattr(request.user, 'is_admin', False) and request.user.clinic_id)
