# gateway/services/telegram.py
"""Telegram Bot API notifications for the editors' group chat."""

from __future__ import annotations

import html
import logging
from typing import Optional

import requests
from django.conf import settings

from .http import new_session, request_with_retry

log = logging.getLogger(__name__)

TELEGRAM_API = "https://api.telegram.org"

PRIORITY_MARKERS = {
    "high": "\U0001F534",    # red circle
    "medium": "\U0001F7E1",  # yellow circle
    "low": "\U0001F7E2",     # green circle
}
WAVE = "\U0001F44B"


class TelegramError(Exception):
    def __init__(self, message: str, status: int = 0):
        super().__init__(message)
        self.status = status


class TelegramClient:
    def __init__(self, bot_token: str, chat_id: str, *, dashboard_url: str = "",
                 session: Optional[requests.Session] = None):
        self.bot_token = (bot_token or "").strip()
        self.chat_id = (chat_id or "").strip()
        self.dashboard_url = dashboard_url or ""
        self.session = session or new_session()

    @classmethod
    def from_settings(cls, session: Optional[requests.Session] = None) -> "TelegramClient":
        return cls(settings.TELEGRAM_BOT_TOKEN, settings.TELEGRAM_CHAT_ID,
                   dashboard_url=settings.DASHBOARD_URL, session=session)

    @property
    def configured(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    def send_message(self, text: str, parse_mode: str = "HTML") -> bool:
        """Send to the configured chat. Returns False (and sends nothing) when unconfigured."""
        if not self.configured:
            log.warning("[telegram] credentials not configured; message not sent")
            return False
        url = f"{TELEGRAM_API}/bot{self.bot_token}/sendMessage"
        resp = request_with_retry(self.session, "POST", url, json={
            "chat_id": self.chat_id,
            "text": text,
            "parse_mode": parse_mode or "HTML",
        })
        if resp.status_code >= 300:
            raise TelegramError(f"Failed to send Telegram message: HTTP {resp.status_code}",
                                status=resp.status_code)
        return True

    def send_notification(self, title: str, message: str, priority: str = "medium") -> bool:
        marker = PRIORITY_MARKERS.get(priority, PRIORITY_MARKERS["medium"])
        text = f"{marker} <b>{html.escape(title, quote=False)}</b>\n\n{html.escape(message, quote=False)}"
        return self.send_message(text)

    def request_attention(self, requester: str, reason: str) -> bool:
        text = (
            f"{WAVE} <b>Attention Requested</b>\n\n"
            f"From: {html.escape(requester, quote=False)}\n"
            f"Reason: {html.escape(reason, quote=False)}"
        )
        if self.dashboard_url:
            text += f'\n\n<a href="{html.escape(self.dashboard_url, quote=True)}">Open Dashboard</a>'
        return self.send_message(text)
