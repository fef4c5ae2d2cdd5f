# -*- coding: utf-8 -*-
"""
CHANGE LOG
- 2026-02-04: Initial creation of management command `sync_wordpress`.
  Mirrors recent WordPress posts into wordpress_articles (Barry queue), for cron.
"""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError, CommandParser

from newsdesk.exceptions import WorkflowError
from newsdesk.workflow import EditorialDesk


class Command(BaseCommand):
    help = "Mirror recent WordPress posts into wordpress_articles."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--status",
            default="publish",
            help="WordPress post status to mirror (default: publish).",
        )
        parser.add_argument(
            "--per-page",
            type=int,
            default=20,
            help="How many recent posts to check (default: 20).",
        )

    def handle(self, *args, **opts) -> None:
        desk = EditorialDesk.from_settings()
        try:
            result = desk.sync_wordpress(status=opts.get("status") or "publish",
                                         per_page=opts.get("per_page") or 20)
        except WorkflowError as exc:
            raise CommandError(str(exc.detail)) from exc

        self.stdout.write(self.style.SUCCESS(
            f"[sync_wordpress] fetched={result['fetched']} added={result['added']} existing={result['existing']}"
        ))
