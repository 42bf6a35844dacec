from __future__ import annotations

from urllib.parse import urlencode

from django.conf import settings
from django.core.cache import cache
from django.http import QueryDict

BOOKINGS_CACHE_VERSION_KEY = "bookings:list:version"


def _get_version() -> int:
    version = cache.get(BOOKINGS_CACHE_VERSION_KEY)
    if version is None:
        cache.add(BOOKINGS_CACHE_VERSION_KEY, 1, timeout=None)
        return 1
    try:
        return int(version)
    except (TypeError, ValueError):
        return 1


def _normalize_query_params(params: QueryDict) -> str:
    items: list[tuple[str, str]] = []
    for key in sorted(params.keys()):
        for value in params.getlist(key):
            items.append((key, value))
    return urlencode(items)


def bookings_cache_key(user, params: QueryDict) -> str:
    """Key a list response by caller, role and normalized query string."""
    normalized = _normalize_query_params(params)
    return (
        f"bookings:list:v{_get_version()}:u{user.pk}:{user.account_type}:"
        f"{normalized or 'all'}"
    )


def invalidate_bookings_cache() -> None:
    """
    Drop every cached booking list.

    Lists are scoped by vendor, customer id and customer email, so a single
    booking change can affect many callers; bumping one global version is
    simpler than tracking them.
    """
    try:
        cache.incr(BOOKINGS_CACHE_VERSION_KEY)
    except ValueError:
        cache.set(BOOKINGS_CACHE_VERSION_KEY, _get_version() + 1, timeout=None)


def bookings_cache_timeout() -> int:
    return getattr(settings, "BOOKINGS_LIST_CACHE_TTL", 120)
