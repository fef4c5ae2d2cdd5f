"""
Newsdesk - views package

Every endpoint is a DRF APIView guarded by HasDashboardKey (settings). The
acting editor comes from X-Editor and falls back to EDITORIAL_DEFAULT_EDITOR.
"""

from __future__ import annotations

import logging

from django.conf import settings
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from newsdesk.serializers import EditorSerializer
from newsdesk.workflow import EditorialDesk

logger = logging.getLogger("newsdesk.views")

EDITOR_HEADER = "X-Editor"


def acting_editor(request) -> str:
    raw = (request.headers.get(EDITOR_HEADER) or "").strip().lower()
    editor = raw or str(getattr(settings, "EDITORIAL_DEFAULT_EDITOR", "dan")).lower()
    ser = EditorSerializer(data={"editor": editor})
    if not ser.is_valid():
        raise ValidationError({EDITOR_HEADER: ser.errors["editor"]})
    return ser.validated_data["editor"]


class DeskView(APIView):
    """Base view: builds the workflow service per request (no shared state)."""

    def get_desk(self) -> EditorialDesk:
        return EditorialDesk.from_settings()


class CountsView(DeskView):
    """GET /api/counts/ - queue sizes for the dashboard badges (polled)."""

    def get(self, request, *args, **kwargs):
        return Response(self.get_desk().counts(), status=status.HTTP_200_OK)
