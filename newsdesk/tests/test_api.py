import json
from io import StringIO
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.core.management import CommandError, call_command
from django.test import SimpleTestCase, override_settings
from rest_framework.exceptions import ValidationError
from rest_framework.test import APIRequestFactory

from newsdesk.exceptions import InvalidTransition, NotFound, UpstreamFailure
from newsdesk.views import acting_editor
from newsdesk.workflow import EditorialDesk

KEY = "dash-key"


@override_settings(DASHBOARD_KEY=KEY, EDITORIAL_DEFAULT_EDITOR="dan")
class NewsdeskAPITestCase(SimpleTestCase):
    def setUp(self):
        self.desk = mock.create_autospec(EditorialDesk, instance=True)
        patcher = mock.patch.object(EditorialDesk, "from_settings", return_value=self.desk)
        patcher.start()
        self.addCleanup(patcher.stop)

    def get(self, url, **extra):
        return self.client.get(url, HTTP_X_DASHBOARD_KEY=KEY, **extra)

    def post(self, url, payload=None, **extra):
        return self.client.post(url, data=json.dumps(payload or {}), content_type="application/json",
                                HTTP_X_DASHBOARD_KEY=KEY, **extra)

    def patch(self, url, payload, **extra):
        return self.client.patch(url, data=json.dumps(payload), content_type="application/json",
                                 HTTP_X_DASHBOARD_KEY=KEY, **extra)


class AuthAndErrorShapeTests(NewsdeskAPITestCase):
    def test_missing_key_is_401(self):
        resp = self.client.get("/api/counts/")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(resp.json()["error"], "Unauthorized")
        self.desk.counts.assert_not_called()

    def test_wrong_key_is_401(self):
        resp = self.client.get("/api/counts/", HTTP_X_DASHBOARD_KEY="nope")
        self.assertEqual(resp.status_code, 401)

    def test_counts(self):
        self.desk.counts.return_value = {"pending_stories": 4, "drafts": 1, "in_review": 0,
                                         "pending_press_releases": 2, "barry_queue": 3}
        resp = self.get("/api/counts/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["pending_stories"], 4)

    def test_not_found_is_404(self):
        self.desk.approve_draft.side_effect = NotFound("Draft d9 not found.")
        resp = self.post("/api/drafts/d9/approve/")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json(), {"error": "Not found", "message": "Draft d9 not found."})

    def test_invalid_transition_is_409(self):
        self.desk.set_story_status.side_effect = InvalidTransition("Story s1 is already rejected.")
        resp = self.post("/api/stories/s1/approve/")
        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"], "Invalid transition")

    def test_upstream_failure_is_502(self):
        self.desk.list_drafts.side_effect = UpstreamFailure("Could not list editorial_drafts: down")
        resp = self.get("/api/drafts/")
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(resp.json(), {"error": "Upstream failure",
                                       "message": "Could not list editorial_drafts: down"})

    def test_malformed_json_is_400(self):
        resp = self.client.post("/api/drafts/", data="{oops", content_type="application/json",
                                HTTP_X_DASHBOARD_KEY=KEY)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Invalid JSON")


class StoryTests(NewsdeskAPITestCase):
    def test_list_defaults_to_pending(self):
        self.desk.list_stories.return_value = [{"id": "s1"}]
        resp = self.get("/api/stories/")
        self.assertEqual(resp.json(), {"status": "pending", "count": 1, "stories": [{"id": "s1"}]})
        self.desk.list_stories.assert_called_once_with("pending")

    def test_invalid_status_filter_is_400(self):
        resp = self.get("/api/stories/", data={"status": "published"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"], "Invalid input")
        self.assertIn("status", resp.json()["details"])

    def test_reject_uses_editor_header(self):
        self.desk.set_story_status.return_value = {"id": "s1", "status": "rejected"}
        resp = self.post("/api/stories/s1/reject/", HTTP_X_EDITOR="Stephen")
        self.assertEqual(resp.status_code, 200)
        self.desk.set_story_status.assert_called_once_with("s1", "rejected", "stephen")

    def test_editor_falls_back_to_default(self):
        self.desk.set_story_status.return_value = {"id": "s1", "status": "approved"}
        self.post("/api/stories/s1/approve/")
        self.desk.set_story_status.assert_called_once_with("s1", "approved", "dan")

    def test_unknown_editor_is_400(self):
        resp = self.post("/api/stories/s1/approve/", HTTP_X_EDITOR="barry")
        self.assertEqual(resp.status_code, 400)
        self.assertIn("X-Editor", resp.json()["details"])
        self.desk.set_story_status.assert_not_called()


class ActingEditorTests(SimpleTestCase):
    factory = APIRequestFactory()

    def test_header_is_validated_by_editor_serializer(self):
        request = self.factory.post("/api/stories/s1/approve/", HTTP_X_EDITOR="barry")
        with self.assertRaises(ValidationError) as ctx:
            acting_editor(request)
        self.assertEqual(ctx.exception.detail["X-Editor"], ['"barry" is not a valid choice.'])

    @override_settings(EDITORIAL_DEFAULT_EDITOR="Stephen")
    def test_blank_header_uses_default_editor(self):
        request = self.factory.post("/api/stories/s1/approve/", HTTP_X_EDITOR="  ")
        self.assertEqual(acting_editor(request), "stephen")

    def test_header_is_case_insensitive(self):
        request = self.factory.post("/api/stories/s1/approve/", HTTP_X_EDITOR=" DAN ")
        self.assertEqual(acting_editor(request), "dan")


class DraftTests(NewsdeskAPITestCase):
    def test_create_requires_title(self):
        resp = self.post("/api/drafts/", {"content": "x"})
        self.assertEqual(resp.status_code, 400)
        self.assertIn("title", resp.json()["details"])
        self.desk.create_draft.assert_not_called()

    def test_create_rejects_bad_section(self):
        resp = self.post("/api/drafts/", {"title": "x", "section": "Pop"})
        self.assertEqual(resp.status_code, 400)

    def test_create(self):
        self.desk.create_draft.return_value = {"id": "d1", "title": "Foals", "status": "in_review"}

        resp = self.post("/api/drafts/", {"title": "  Foals  ", "status": "in_review",
                                          "artist_names": ["Foals"]}, HTTP_X_EDITOR="dan")

        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["draft"]["id"], "d1")
        data, editor = self.desk.create_draft.call_args.args
        self.assertEqual(data["title"], "Foals")
        self.assertEqual(data["status"], "in_review")
        self.assertEqual(data["artist_names"], ["Foals"])
        self.assertEqual(editor, "dan")

    def test_partial_update_sends_only_given_fields(self):
        self.desk.update_draft.return_value = {"id": "d1", "excerpt": "x"}
        resp = self.patch("/api/drafts/d1/", {"excerpt": "x"})
        self.assertEqual(resp.status_code, 200)
        draft_id, changes, editor = self.desk.update_draft.call_args.args
        self.assertEqual(draft_id, "d1")
        self.assertEqual(dict(changes), {"excerpt": "x"})

    def test_delete(self):
        resp = self.client.delete("/api/drafts/d1/", HTTP_X_DASHBOARD_KEY=KEY)
        self.assertEqual(resp.status_code, 204)
        self.desk.delete_draft.assert_called_once_with("d1")

    def test_publish(self):
        self.desk.publish_draft.return_value = {"draft": {"id": "d1", "status": "published"},
                                                "wordpress_post_id": 321}
        resp = self.post("/api/drafts/d1/publish/", HTTP_X_EDITOR="stephen")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["wordpress_post_id"], 321)
        self.desk.publish_draft.assert_called_once_with("d1", "stephen")


class PressReleaseTests(NewsdeskAPITestCase):
    def test_list(self):
        self.desk.list_press_releases.return_value = []
        resp = self.get("/api/press-releases/", data={"status": "imported"})
        self.assertEqual(resp.json(), {"count": 0, "press_releases": []})
        self.desk.list_press_releases.assert_called_once_with("imported")

    def test_import(self):
        self.desk.import_press_release.return_value = {"story": {"id": "s1"}, "draft": {"id": "d1"}}
        resp = self.post("/api/press-releases/pr1/import/")
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["draft"], {"id": "d1"})

    def test_reject(self):
        self.desk.reject_press_release.return_value = {"id": "pr1", "status": "rejected"}
        resp = self.post("/api/press-releases/pr1/reject/")
        self.assertEqual(resp.json()["press_release"]["status"], "rejected")


class WordPressAndBarryTests(NewsdeskAPITestCase):
    def test_sync(self):
        self.desk.sync_wordpress.return_value = {"fetched": 3, "added": 2, "existing": 1}
        resp = self.client.post("/api/wordpress/sync/?status=draft", HTTP_X_DASHBOARD_KEY=KEY)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["added"], 2)
        self.desk.sync_wordpress.assert_called_once_with(status="draft")

    def test_sync_rejects_unknown_status(self):
        resp = self.client.post("/api/wordpress/sync/?status=trash", HTTP_X_DASHBOARD_KEY=KEY)
        self.assertEqual(resp.status_code, 400)

    def test_barry_queue_and_import(self):
        self.desk.barry_queue.return_value = [{"id": "a1"}]
        self.assertEqual(self.get("/api/barry/").json(), {"count": 1, "articles": [{"id": "a1"}]})

        self.desk.mark_barry_imported.return_value = {"id": "a1", "barry_imported": True}
        resp = self.post("/api/barry/a1/import/")
        self.assertTrue(resp.json()["article"]["barry_imported"])


class NotificationAndUploadTests(NewsdeskAPITestCase):
    def test_attention(self):
        self.desk.request_attention.return_value = True
        resp = self.post("/api/notifications/attention/", {"message": "Need eyes on Foals"}, HTTP_X_EDITOR="stephen")
        self.assertEqual(resp.json(), {"sent": True})
        self.desk.request_attention.assert_called_once_with("stephen", "Need eyes on Foals")

    def test_attention_requires_message(self):
        resp = self.post("/api/notifications/attention/", {})
        self.assertEqual(resp.status_code, 400)

    def test_image_upload(self):
        self.desk.upload_image.return_value = {"url": "https://res.cloudinary.com/x", "optimized_url": "https://o"}
        upload = SimpleUploadedFile("cover.png", b"\x89PNG data", content_type="image/png")

        resp = self.client.post("/api/uploads/image/", {"file": upload}, HTTP_X_DASHBOARD_KEY=KEY)

        self.assertEqual(resp.status_code, 201)
        self.desk.upload_image.assert_called_once_with(b"\x89PNG data", "cover.png", "image/png")

    def test_non_image_upload_is_400(self):
        upload = SimpleUploadedFile("notes.txt", b"hello", content_type="text/plain")
        resp = self.client.post("/api/uploads/image/", {"file": upload}, HTTP_X_DASHBOARD_KEY=KEY)
        self.assertEqual(resp.status_code, 400)
        self.desk.upload_image.assert_not_called()


class SyncWordPressCommandTests(SimpleTestCase):
    def setUp(self):
        self.desk = mock.create_autospec(EditorialDesk, instance=True)
        patcher = mock.patch.object(EditorialDesk, "from_settings", return_value=self.desk)
        patcher.start()
        self.addCleanup(patcher.stop)

    def test_prints_counts(self):
        self.desk.sync_wordpress.return_value = {"fetched": 5, "added": 1, "existing": 4}
        out = StringIO()
        call_command("sync_wordpress", "--per-page", "5", stdout=out)
        self.desk.sync_wordpress.assert_called_once_with(status="publish", per_page=5)
        self.assertIn("fetched=5 added=1 existing=4", out.getvalue())

    def test_workflow_error_becomes_command_error(self):
        self.desk.sync_wordpress.side_effect = UpstreamFailure("Could not fetch WordPress posts: 401")
        with self.assertRaises(CommandError):
            call_command("sync_wordpress", stdout=StringIO())
