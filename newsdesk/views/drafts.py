import logging

from rest_framework import status
from rest_framework.response import Response

from newsdesk.serializers import DraftSerializer
from . import DeskView, acting_editor

logger = logging.getLogger(__name__)


class DraftListView(DeskView):
    """
    GET  /api/drafts/   open drafts (draft + in_review), newest first
    POST /api/drafts/   create; status "in_review" pings the other editor
    """

    def get(self, request, *args, **kwargs):
        drafts = self.get_desk().list_drafts()
        return Response({"count": len(drafts), "drafts": drafts}, status=status.HTTP_200_OK)

    def post(self, request, *args, **kwargs):
        ser = DraftSerializer(data=request.data)
        ser.is_valid(raise_exception=True)
        draft = self.get_desk().create_draft(ser.validated_data, acting_editor(request))
        return Response({"draft": draft}, status=status.HTTP_201_CREATED)


class DraftDetailView(DeskView):
    """PATCH/DELETE /api/drafts/<id>/"""

    def patch(self, request, draft_id, *args, **kwargs):
        ser = DraftSerializer(data=request.data, partial=True)
        ser.is_valid(raise_exception=True)
        draft = self.get_desk().update_draft(draft_id, ser.validated_data, acting_editor(request))
        return Response({"draft": draft}, status=status.HTTP_200_OK)

    def delete(self, request, draft_id, *args, **kwargs):
        editor = acting_editor(request)
        self.get_desk().delete_draft(draft_id)
        logger.info("draft %s deleted by %s", draft_id, editor)
        return Response(status=status.HTTP_204_NO_CONTENT)


class DraftApproveView(DeskView):
    def post(self, request, draft_id, *args, **kwargs):
        draft = self.get_desk().approve_draft(draft_id, acting_editor(request))
        return Response({"draft": draft}, status=status.HTTP_200_OK)


class DraftPublishView(DeskView):
    """POST /api/drafts/<id>/publish/ - push to WordPress as a WP draft."""

    def post(self, request, draft_id, *args, **kwargs):
        result = self.get_desk().publish_draft(draft_id, acting_editor(request))
        return Response(result, status=status.HTTP_200_OK)
