# /home/dork/editorialdesk/gateway/urls.py
from django.urls import path

from .views import feedly, generate, supabase_proxy, wordpress

app_name = "gateway"

urlpatterns = [
    path("wp-post/", wordpress.wp_post, name="wp-post"),
    path("wp-media/", wordpress.wp_media, name="wp-media"),
    path("wp-query/", wordpress.wp_query, name="wp-query"),
    path("wp-taxonomy/", wordpress.wp_taxonomy, name="wp-taxonomy"),
    path("generate-article/", generate.generate_article, name="generate-article"),
    path("generate-feed-article/", generate.generate_feed_article, name="generate-feed-article"),
    path("sync-feedly/", feedly.sync_feedly, name="sync-feedly"),
    path("supabase/<path:path>", supabase_proxy.supabase_proxy, name="supabase"),
]
