from .roles import get_role, is_admin, is_admin_or_staff


def roles(request):
    user = getattr(request, "user", None)
    return {
        "user_role": get_role(user),
        "is_admin": is_admin(user),
        "is_admin_or_staff": is_admin_or_staff(user),
    }
