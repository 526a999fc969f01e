from django.conf import settings
from django.shortcuts import redirect
from django.urls import reverse

from homepage.settings_store import get_setting


def maintenance_enabled() -> bool:
    if getattr(settings, "MAINTENANCE_MODE", False):
        return True
    return get_setting("maintenance_mode", "").strip().lower() in ("1", "true", "yes", "on")


class MaintenanceModeMiddleware:
    """Redirect visitors to the maintenance page when enabled.

    Enabled by ``settings.MAINTENANCE_MODE`` or the ``maintenance_mode`` site
    setting. Staff, the admin site, the back office, sign-in and static/media
    files stay reachable so the switch can be turned off again.
    """

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if maintenance_enabled():
            user = getattr(request, "user", None)
            if user is not None and user.is_authenticated and user.is_staff:
                return self.get_response(request)
            maintenance_url = reverse("maintenance")
            excluded_paths = [
                maintenance_url,
                "/admin/",
                "/backoffice/",
                reverse("accounts:signin"),
            ]
            static_prefix = getattr(settings, "STATIC_URL", "/static/")
            media_prefix = getattr(settings, "MEDIA_URL", "/media/")
            if (
                not request.path.startswith(tuple(excluded_paths))
                and not request.path.startswith(static_prefix)
                and not request.path.startswith(media_prefix)
            ):
                return redirect(maintenance_url)
        return self.get_response(request)
