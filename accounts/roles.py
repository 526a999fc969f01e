"""Role checks used by views, templates and the admin site.

Superusers count as admins even without a ``UserRole`` row.
"""
from .models import UserRole


def get_role(user) -> str | None:
    if not user or not user.is_authenticated:
        return None
    if user.is_superuser:
        return UserRole.ADMIN
    try:
        return user.role.role
    except UserRole.DoesNotExist:
        return None


def has_role(user, role: str) -> bool:
    return get_role(user) == role


def is_admin(user) -> bool:
    return has_role(user, UserRole.ADMIN)


def is_admin_or_staff(user) -> bool:
    return get_role(user) in UserRole.STAFF_ROLES


def set_role(user, role: str) -> UserRole:
    user_role, _ = UserRole.objects.update_or_create(user=user, defaults={"role": role})
    return user_role
