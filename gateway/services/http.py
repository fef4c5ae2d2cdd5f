# gateway/services/http.py
"""
Outbound HTTP with retry/backoff.

Every client in gateway.services sends through request_with_retry():
- retryable statuses: 429, 500, 502, 503, 504
- at most 4 attempts in total
- delay between attempts: 0.5s * 2**attempt + random(0..0.25s)
- the last response is returned as-is once attempts run out
Transport errors (requests.RequestException) are not retried; they propagate.
"""

from __future__ import annotations

import logging
import random
import re
import time
from typing import Callable, Optional

import requests
from django.conf import settings

log = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({429, 500, 502, 503, 504})
MAX_ATTEMPTS = 4
BASE_DELAY_SECONDS = 0.5
MAX_JITTER_SECONDS = 0.25

USER_AGENT = "editorialdesk-gateway/1.0"

_BOT_TOKEN_RE = re.compile(r"/bot[^/]+")


def _loggable(url: str) -> str:
    # Telegram carries its token in the path.
    return _BOT_TOKEN_RE.sub("/bot***", url)


def default_timeout() -> float:
    return float(getattr(settings, "EDITORIAL_HTTP_TIMEOUT", 20))


def new_session(headers: Optional[dict] = None) -> requests.Session:
    session = requests.Session()
    session.headers["User-Agent"] = USER_AGENT
    if headers:
        session.headers.update(headers)
    return session


def backoff_delay(attempt: int, rand: Callable[[], float] = random.random) -> float:
    """Seconds to wait after the given (0-based) failed attempt."""
    return BASE_DELAY_SECONDS * (2 ** attempt) + rand() * MAX_JITTER_SECONDS


def request_with_retry(
    session: requests.Session,
    method: str,
    url: str,
    *,
    attempts: int = MAX_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
    **kwargs,
) -> requests.Response:
    kwargs.setdefault("timeout", default_timeout())
    method = method.upper()
    resp: Optional[requests.Response] = None

    for attempt in range(attempts):
        resp = session.request(method, url, **kwargs)
        if resp.status_code not in RETRYABLE_STATUSES:
            return resp
        if attempt == attempts - 1:
            break
        delay = backoff_delay(attempt)
        log.warning(
            "[http][retry] %s %s -> %s; attempt %s/%s, sleeping %.2fs",
            method, _loggable(url), resp.status_code, attempt + 1, attempts, delay,
        )
        sleep(delay)

    log.error("[http][retry] %s %s gave up after %s attempts (last=%s)",
              method, _loggable(url), attempts, resp.status_code if resp is not None else "-")
    return resp
