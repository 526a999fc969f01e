from django.core.cache import cache
from django.db import DatabaseError

CACHE_TIMEOUT = 60 * 10
_MISSING = "__missing__"


def _cache_key(key: str) -> str:
    return f"site-setting:{key}"


def get_setting(key: str, default: str = "") -> str:
    """Return a site setting value, cached for ten minutes."""
    from .models import SiteSetting

    cached = cache.get(_cache_key(key))
    if cached is None:
        try:
            cached = SiteSetting.objects.filter(key=key).values_list("value", flat=True).first()
        except DatabaseError:
            # Table missing before the first migrate
            return default
        if cached is None:
            cached = _MISSING
        cache.set(_cache_key(key), cached, CACHE_TIMEOUT)
    return default if cached == _MISSING else cached


def invalidate_setting(key: str) -> None:
    cache.delete(_cache_key(key))
