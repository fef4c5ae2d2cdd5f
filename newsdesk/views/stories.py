from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from . import DeskView, acting_editor

STORY_STATUSES = ("pending", "approved", "rejected")


class StoryListView(DeskView):
    """GET /api/stories/?status=pending - newest first."""

    def get(self, request, *args, **kwargs):
        story_status = (request.query_params.get("status") or "pending").strip()
        if story_status not in STORY_STATUSES:
            raise ValidationError({"status": [f"Must be one of: {', '.join(STORY_STATUSES)}."]})
        stories = self.get_desk().list_stories(story_status)
        return Response({"status": story_status, "count": len(stories), "stories": stories},
                        status=status.HTTP_200_OK)


class StoryDecisionView(DeskView):
    """POST /api/stories/<id>/approve/ and /reject/"""

    decision = None  # "approved" | "rejected"

    def post(self, request, story_id, *args, **kwargs):
        story = self.get_desk().set_story_status(story_id, self.decision, acting_editor(request))
        return Response({"story": story}, status=status.HTTP_200_OK)
