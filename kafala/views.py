import logging
import mimetypes

from django.conf import settings
from django.core import signing
from django.http import FileResponse, Http404
from django.shortcuts import render
from django.views.decorators.cache import never_cache

from .files import private_storage, resolve_signed_name

logger = logging.getLogger(__name__)


def maintenance_view(request):
    return render(request, "maintenance.html", status=503)


def error_404_view(request, exception):
    return render(request, "404.html", status=404)


def csrf_failure(request, reason="", template_name="csrf_failure.html"):
    """Custom CSRF failure handler to show a helpful message.

    Forms and sessions require cookies. If cookies are disabled, sign-in and
    request submission cannot proceed.
    """
    context = {
        "reason": reason,
    }
    return render(request, template_name, context, status=403)


@never_cache
def private_file(request, token: str):
    """Serve a file from private storage when the signed token is still valid.

    Cash receipts are handed to sponsors through long-lived links, other
    private files (transfer and deposit receipts) only to signed-in users
    through short-lived ones.
    """
    max_age = max(settings.CASH_RECEIPT_URL_MAX_AGE, settings.PRIVATE_FILE_URL_MAX_AGE)
    try:
        name = resolve_signed_name(token, max_age=max_age)
    except signing.BadSignature:
        raise Http404("Link expired or invalid")

    if not name.startswith("cash-receipts/"):
        if not request.user.is_authenticated:
            raise Http404("Link expired or invalid")
        try:
            resolve_signed_name(token, max_age=settings.PRIVATE_FILE_URL_MAX_AGE)
        except signing.BadSignature:
            raise Http404("Link expired or invalid")

    if not private_storage.exists(name):
        logger.warning("Signed link points at missing private file %s", name)
        raise Http404("File not found")

    content_type, _ = mimetypes.guess_type(name)
    return FileResponse(
        private_storage.open(name, "rb"),
        content_type=content_type or "application/octet-stream",
        filename=name.rsplit("/", 1)[-1],
    )
