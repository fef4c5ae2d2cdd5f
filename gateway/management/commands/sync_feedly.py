# -*- coding: utf-8 -*-
"""
CHANGE LOG
- 2026-02-02: Initial creation of management command `sync_feedly`.
  Same sync as POST /functions/sync-feedly/, for cron.
"""

from __future__ import annotations

import requests
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError, CommandParser

from gateway.services.feedly import FeedlyClient, FeedlyError, sync_feedly
from gateway.services.supabase import SupabaseClient, SupabaseError


class Command(BaseCommand):
    help = "Pull the Feedly stream and insert new pending stories into editorial_stories."

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--stream",
            default="",
            help="Feedly stream id (default: FEEDLY_STREAM_ID).",
        )
        parser.add_argument(
            "--count",
            type=int,
            default=100,
            help="Number of items to request (default: 100).",
        )

    def handle(self, *args, **opts) -> None:
        stream_id = str(opts.get("stream") or settings.FEEDLY_STREAM_ID or "")
        if not stream_id or not settings.FEEDLY_TOKEN:
            raise CommandError("FEEDLY_TOKEN and a stream id are required.")
        if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_KEY:
            raise CommandError("SUPABASE_URL and SUPABASE_SERVICE_KEY are required.")

        try:
            result = sync_feedly(
                FeedlyClient.from_settings(),
                SupabaseClient.from_settings(),
                stream_id=stream_id,
                count=opts.get("count") or 100,
            )
        except (FeedlyError, SupabaseError, requests.RequestException) as exc:
            raise CommandError(f"Sync failed: {exc}") from exc

        self.stdout.write(self.style.SUCCESS(f"[sync_feedly] {result.message}"))
        self.stdout.write(
            f"[sync_feedly] duplicates={result.duplicates} skipped={result.skipped} failed={result.failed}"
        )
