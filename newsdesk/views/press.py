from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from . import DeskView, acting_editor

RELEASE_STATUSES = ("pending", "imported", "rejected")


class PressReleaseListView(DeskView):
    """GET /api/press-releases/?status=pending"""

    def get(self, request, *args, **kwargs):
        release_status = (request.query_params.get("status") or "pending").strip()
        if release_status not in RELEASE_STATUSES:
            raise ValidationError({"status": [f"Must be one of: {', '.join(RELEASE_STATUSES)}."]})
        releases = self.get_desk().list_press_releases(release_status)
        return Response({"count": len(releases), "press_releases": releases}, status=status.HTTP_200_OK)


class PressReleaseImportView(DeskView):
    """POST /api/press-releases/<id>/import/ - approved priority story + draft."""

    def post(self, request, release_id, *args, **kwargs):
        result = self.get_desk().import_press_release(release_id, acting_editor(request))
        return Response(result, status=status.HTTP_201_CREATED)


class PressReleaseRejectView(DeskView):
    def post(self, request, release_id, *args, **kwargs):
        release = self.get_desk().reject_press_release(release_id, acting_editor(request))
        return Response({"press_release": release}, status=status.HTTP_200_OK)
