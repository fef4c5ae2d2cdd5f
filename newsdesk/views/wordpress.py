from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from . import DeskView, acting_editor

WP_STATUSES = ("publish", "draft", "pending", "future", "private")


class WordPressSyncView(DeskView):
    """POST /api/wordpress/sync/?status=publish - mirror recent posts into wordpress_articles."""

    def post(self, request, *args, **kwargs):
        wp_status = (request.query_params.get("status") or "publish").strip()
        if wp_status not in WP_STATUSES:
            raise ValidationError({"status": [f"Must be one of: {', '.join(WP_STATUSES)}."]})
        result = self.get_desk().sync_wordpress(status=wp_status)
        return Response(result, status=status.HTTP_200_OK)


class BarryQueueView(DeskView):
    """GET /api/barry/ - mirrored articles not yet in Barry."""

    def get(self, request, *args, **kwargs):
        articles = self.get_desk().barry_queue()
        return Response({"count": len(articles), "articles": articles}, status=status.HTTP_200_OK)


class BarryImportView(DeskView):
    def post(self, request, article_id, *args, **kwargs):
        article = self.get_desk().mark_barry_imported(article_id, acting_editor(request))
        return Response({"article": article}, status=status.HTTP_200_OK)
