from django.shortcuts import render

from orphans.models import Orphan
from backoffice.stats import orphan_stats

from .settings_store import get_setting


def home_view(request):
    latest_orphans = Orphan.objects.public().filter(status=Orphan.STATUS_AVAILABLE)[:6]
    context = {
        "stats": orphan_stats(),
        "latest_orphans": latest_orphans,
        "hero_title": get_setting("hero_title", "Sponsor an orphan"),
        "hero_subtitle": get_setting("hero_subtitle", ""),
    }
    return render(request, "home.html", context)


def about_view(request):
    context = {
        "about_text": get_setting("about_text", ""),
        "contact_email": get_setting("contact_email", ""),
        "contact_phone": get_setting("contact_phone", ""),
    }
    return render(request, "about.html", context)
