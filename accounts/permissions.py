from rest_framework.permissions import BasePermission


class IsStudyAdmin(BasePermission):
    """Staff accounts and users whose role is ``admin``."""

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        return bool(user.is_staff or getattr(user, "role", "") == "admin")
