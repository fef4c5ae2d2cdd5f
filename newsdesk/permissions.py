# /home/dork/editorialdesk/newsdesk/permissions.py
import logging

from django.conf import settings
from rest_framework.permissions import BasePermission

from gateway.signing import shared_key_matches
from .exceptions import DashboardKeyRequired

logger = logging.getLogger("newsdesk.auth")

DASHBOARD_KEY_HEADER = "X-Dashboard-Key"


class HasDashboardKey(BasePermission):
    """Single shared key for the editors' front end (no per-user accounts)."""

    def has_permission(self, request, view):
        presented = request.headers.get(DASHBOARD_KEY_HEADER, "")
        ok = shared_key_matches(presented, getattr(settings, "DASHBOARD_KEY", ""))
        if not ok:
            # lengths only, never the key
            logger.info("[newsdesk][auth] path=%s key_len=%s match=False", request.path, len(presented))
            raise DashboardKeyRequired()
        return True
