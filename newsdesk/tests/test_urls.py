import os
import subprocess
import sys
from pathlib import Path

from django.test import SimpleTestCase
from django.urls import resolve, reverse

from gateway.views import wordpress
from newsdesk.views import CountsView

ROOT = Path(__file__).resolve().parents[2]


class RootURLConfTests(SimpleTestCase):
    def test_api_counts_resolves(self):
        match = resolve("/api/counts/")
        self.assertEqual(match.view_name, "newsdesk:counts")
        self.assertIs(match.func.view_class, CountsView)
        self.assertEqual(reverse("newsdesk:counts"), "/api/counts/")

    def test_wp_post_function_resolves(self):
        match = resolve("/functions/wp-post/")
        self.assertEqual(match.view_name, "gateway:wp-post")
        self.assertEqual(match.func.__name__, wordpress.wp_post.__name__)

    def test_api_error_goes_through_editorial_handler(self):
        resp = self.client.get("/api/counts/")
        self.assertEqual(resp.status_code, 401)
        self.assertEqual(set(resp.json()), {"error", "message"})


def _fresh_interpreter(code):
    env = dict(os.environ, DJANGO_SETTINGS_MODULE="editorialdesk.settings")
    env.setdefault("DJANGO_SECRET_KEY", "urlconf-test-key")
    return subprocess.run([sys.executable, "-c", code], cwd=ROOT, env=env,
                          capture_output=True, text=True, timeout=60)


def test_drf_views_import_first_in_fresh_interpreter():
    # DRF reads DEFAULT_PERMISSION_CLASSES while importing rest_framework.views
    result = _fresh_interpreter(
        "import django; django.setup()\n"
        "import rest_framework.views\n"
        "from rest_framework.settings import api_settings\n"
        "print(api_settings.DEFAULT_PERMISSION_CLASSES[0].__name__)\n"
    )
    assert result.returncode == 0, result.stderr
    assert result.stdout.strip() == "HasDashboardKey"


def test_urlconf_loads_in_fresh_interpreter():
    result = _fresh_interpreter(
        "import django; django.setup()\n"
        "from django.urls import resolve\n"
        "print(resolve('/api/counts/').view_name, resolve('/functions/wp-post/').view_name)\n"
    )
    assert result.returncode == 0, result.stderr
    assert result.stdout.split() == ["newsdesk:counts", "gateway:wp-post"]
