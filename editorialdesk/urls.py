# /home/dork/editorialdesk/editorialdesk/urls.py
"""
CHANGE LOG
----------
2026-02-02
- ADD: /functions/* gateway surface (wp-post, wp-media, wp-query, wp-taxonomy,
       generate-article, generate-feed-article, sync-feedly, supabase proxy).
- ADD: /api/* newsdesk workflow endpoints (DRF).
"""

from django.urls import include, path

from gateway import views as gateway_views

urlpatterns = [
    # Readiness endpoints
    path("health/", gateway_views.health, name="health"),
    path("version/", gateway_views.version, name="version"),

    # Gateway functions
    path("functions/", include("gateway.urls", namespace="gateway")),

    # Editorial workflow API
    path("api/", include("newsdesk.urls", namespace="newsdesk")),
]
