"""
Role-based permission classes for the Rental Marketplace.

Unauthenticated requests are answered with 401 by the REST framework;
authenticated users with the wrong role receive 403 with ``message``.
Ownership of individual properties is checked in ``core.services``.
"""

from rest_framework import permissions


class HasRole(permissions.BasePermission):
    """
    Base class allowing authenticated users whose ``role`` is ``required_role``.

    Usage:
        class MyView(APIView):
            permission_classes = [IsTenant]
    """

    required_role = None
    message = 'You do not have permission to perform this action.'

    def has_permission(self, request, view):
        """
        Check if user is authenticated and has the required role.

        Returns:
            bool: True if the role matches, False otherwise
        """
        if not request.user or not request.user.is_authenticated:
            return False

        return getattr(request.user, 'role', None) == self.required_role


class IsTenant(HasRole):
    """Allow only tenants (saving listings, applying, filing maintenance)."""

    required_role = 'tenant'
    message = 'Only tenants can perform this action.'


class IsLandlord(HasRole):
    """Allow only landlords (listing properties, deciding applications)."""

    required_role = 'landlord'
    message = 'Only landlords can perform this action.'


class IsAdminRole(HasRole):
    """Allow only marketplace administrators (platform-wide dashboards)."""

    required_role = 'admin'
    message = 'Only administrators can perform this action.'

    def has_permission(self, request, view):
        if super().has_permission(request, view):
            return True
        return bool(request.user and request.user.is_authenticated and request.user.is_superuser)
