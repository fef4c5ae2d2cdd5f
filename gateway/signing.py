"""
Gateway request signing.

Callers sign ``<timestamp>.<raw body>`` with HMAC-SHA256 using the shared
GATEWAY_SECRET and send it as two headers:

    X-Timestamp: <unix seconds>
    X-Signature: <lowercase hex digest>

Verification rejects missing secrets, missing headers, timestamps outside a
90 second window (replay protection) and any signature that does not match.
Comparison is constant-time; secrets are never logged.

CHANGE LOG
----------
2026-02-11 • Timestamps must be plain digits (float() also took "1_760_000_000", " +12").
2026-02-04 • Compare decoded digest bytes (length checked first) instead of hex text.
2026-02-02 • Add shared_key_matches() for the dashboard key (constant-time).
2026-01-28 • Initial port of the gateway HMAC helper.
"""

from __future__ import annotations

import hashlib
import hmac
import re
import time
from dataclasses import dataclass
from typing import Dict, Optional, Union

MAX_SKEW_SECONDS = 90

# unix seconds in ASCII digits, optionally fractional
_TIMESTAMP_RE = re.compile(r"[0-9]{1,12}(?:\.[0-9]{1,9})?")

TIMESTAMP_HEADER = "X-Timestamp"
SIGNATURE_HEADER = "X-Signature"

Body = Union[str, bytes]


@dataclass(frozen=True)
class Verification:
    ok: bool
    why: str = ""

    def __bool__(self) -> bool:
        return self.ok


def _as_bytes(val: Body) -> bytes:
    if isinstance(val, bytes):
        return val
    return str(val).encode("utf-8")


def compute_signature(secret: str, timestamp: Union[str, int], body: Body) -> str:
    """Hex HMAC-SHA256 of ``timestamp + "." + body``."""
    message = _as_bytes(f"{timestamp}.") + _as_bytes(body)
    return hmac.new(_as_bytes(secret), message, hashlib.sha256).hexdigest()


def sign_request(secret: str, body: Body, now: Optional[float] = None) -> Dict[str, str]:
    """Return the headers a client sends alongside ``body``."""
    ts = str(int(time.time() if now is None else now))
    return {
        TIMESTAMP_HEADER: ts,
        SIGNATURE_HEADER: compute_signature(secret, ts, body),
    }


def _digests_equal(expected_hex: str, provided_hex: str) -> bool:
    try:
        expected = bytes.fromhex(expected_hex)
        provided = bytes.fromhex(provided_hex)
    except ValueError:
        return False
    if len(expected) != len(provided):
        return False
    return hmac.compare_digest(expected, provided)


def verify_signature(
    secret: Optional[str],
    timestamp: Optional[str],
    body: Body,
    signature: Optional[str],
    *,
    now: Optional[float] = None,
    max_skew: int = MAX_SKEW_SECONDS,
) -> Verification:
    if not secret:
        return Verification(False, "missing secret")
    ts_raw = (timestamp or "").strip()
    sig = (signature or "").strip()
    if not ts_raw or not sig:
        return Verification(False, "missing headers")

    if not _TIMESTAMP_RE.fullmatch(ts_raw):
        return Verification(False, "bad timestamp")
    ts_num = float(ts_raw)
    current = time.time() if now is None else now
    if abs(int(current) - ts_num) > max_skew:
        return Verification(False, "bad timestamp")

    # Sign the timestamp exactly as sent; the client signed that text.
    expected = compute_signature(secret, ts_raw, body)
    if not _digests_equal(expected, sig):
        return Verification(False, "bad signature")
    return Verification(True)


def shared_key_matches(presented: Optional[str], expected: Optional[str]) -> bool:
    """Constant-time check of a presented shared key; empty keys never match."""
    presented = (presented or "").strip()
    expected = (expected or "").strip()
    if not presented or not expected:
        return False
    return hmac.compare_digest(presented.encode("utf-8"), expected.encode("utf-8"))
