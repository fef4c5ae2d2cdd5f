from django.urls import path

from newsdesk.views import CountsView
from newsdesk.views.drafts import DraftApproveView, DraftDetailView, DraftListView, DraftPublishView
from newsdesk.views.notifications import AttentionView, ImageUploadView
from newsdesk.views.press import PressReleaseImportView, PressReleaseListView, PressReleaseRejectView
from newsdesk.views.stories import StoryDecisionView, StoryListView
from newsdesk.views.wordpress import BarryImportView, BarryQueueView, WordPressSyncView

app_name = "newsdesk"

urlpatterns = [
    path("counts/", CountsView.as_view(), name="counts"),

    path("stories/", StoryListView.as_view(), name="stories"),
    path("stories/<str:story_id>/approve/", StoryDecisionView.as_view(decision="approved"), name="story-approve"),
    path("stories/<str:story_id>/reject/", StoryDecisionView.as_view(decision="rejected"), name="story-reject"),

    path("drafts/", DraftListView.as_view(), name="drafts"),
    path("drafts/<str:draft_id>/", DraftDetailView.as_view(), name="draft-detail"),
    path("drafts/<str:draft_id>/approve/", DraftApproveView.as_view(), name="draft-approve"),
    path("drafts/<str:draft_id>/publish/", DraftPublishView.as_view(), name="draft-publish"),

    path("press-releases/", PressReleaseListView.as_view(), name="press-releases"),
    path("press-releases/<str:release_id>/import/", PressReleaseImportView.as_view(), name="press-release-import"),
    path("press-releases/<str:release_id>/reject/", PressReleaseRejectView.as_view(), name="press-release-reject"),

    path("wordpress/sync/", WordPressSyncView.as_view(), name="wordpress-sync"),
    path("barry/", BarryQueueView.as_view(), name="barry"),
    path("barry/<str:article_id>/import/", BarryImportView.as_view(), name="barry-import"),

    path("notifications/attention/", AttentionView.as_view(), name="attention"),
    path("uploads/image/", ImageUploadView.as_view(), name="upload-image"),
]
