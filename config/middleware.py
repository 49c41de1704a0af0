"""
Route gate middleware.

Restricts traffic to an explicit allow-list of paths and prefixes.
Anything outside the list is redirected to the landing page.
"""

import logging

from django.conf import settings
from django.http import HttpResponseRedirect

logger = logging.getLogger(__name__)


def _matches_prefix(path, prefixes):
    return any(path == prefix or path.startswith(f'{prefix.rstrip("/")}/') for prefix in prefixes)


def is_path_allowed(path: str) -> bool:
    """Return True if the path passes the configured allow-list."""
    if path.startswith('/api'):
        return _matches_prefix(path, settings.ROUTE_GATE_ALLOWED_API_PREFIXES)

    if _matches_prefix(path, settings.ROUTE_GATE_ALLOWED_PREFIXES):
        return True

    allowed_paths = {p.rstrip('/') or '/' for p in settings.ROUTE_GATE_ALLOWED_PATHS}
    return (path.rstrip('/') or '/') in allowed_paths


class RouteGateMiddleware:
    """Redirect every request outside the allow-list to '/'."""

    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        if settings.ROUTE_GATE_ENABLED and not is_path_allowed(request.path):
            logger.debug("Route gate blocked %s", request.path)
            return HttpResponseRedirect('/')
        return self.get_response(request)
