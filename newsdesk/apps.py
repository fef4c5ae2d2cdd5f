# editorialdesk/newsdesk/apps.py
from django.apps import AppConfig


class NewsdeskConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "newsdesk"
    verbose_name = "Newsdesk Workflow"
