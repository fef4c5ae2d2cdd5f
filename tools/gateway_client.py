#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Editorial Desk - gateway function client (signed requests)

Signs the exact JSON body it sends (X-Timestamp + X-Signature) with
GATEWAY_SECRET and prints the gateway's answer.

CHANGE LOG
----------
2026-02-04  (v2) media: read a local file and send it base64-encoded.
2026-01-29  (v1) Initial client: post + query.

USAGE
-----
# Create a WordPress draft
python tools/gateway_client.py post \
  --base https://desk.example.com/functions \
  --title "Wet Leg announce new album" --content "<p>Body</p>"

# Update post 123
python tools/gateway_client.py post --base ... --id 123 --title "New title"

# Upload media and set it as post 123's featured image
python tools/gateway_client.py media --base ... --file cover.jpg --post-id 123 --featured

# List the sections taxonomy
python tools/gateway_client.py query --base ... --action list_terms --taxonomy sections
"""

from __future__ import annotations

import argparse
import base64
import json
import mimetypes
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import requests

from gateway.signing import sign_request


def _print_header(title: str) -> None:
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)


def _pretty(obj: Any) -> str:
    try:
        return json.dumps(obj, indent=2, ensure_ascii=False, sort_keys=True)
    except (TypeError, ValueError):
        return str(obj)


def _build_url(base: str, path: str) -> str:
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def signed_body(secret: str, payload: Dict[str, Any], now: Optional[float] = None) -> Tuple[str, Dict[str, str]]:
    """(body text, headers) - the signature covers exactly the text that is sent."""
    body = json.dumps(payload, separators=(",", ":"))
    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    headers.update(sign_request(secret, body, now=now))
    return body, headers


def _post_signed(url: str, secret: str, payload: Dict[str, Any], timeout: float) -> Tuple[int, Any]:
    body, headers = signed_body(secret, payload)
    try:
        resp = requests.post(url, data=body.encode("utf-8"), headers=headers, timeout=timeout)
    except requests.RequestException as e:
        return 0, {"error": "network_error", "detail": str(e)}
    try:
        return resp.status_code, resp.json()
    except ValueError:
        raw = resp.text
        snippet = (raw[:300] + "…") if len(raw) > 300 else raw
        return resp.status_code, {"error": "non_json_response", "raw_snippet": snippet}


def post_payload(args: argparse.Namespace) -> Dict[str, Any]:
    data: Dict[str, Any] = {"status": args.status}
    for field in ("title", "content", "excerpt", "slug"):
        value = getattr(args, field, None)
        if value:
            data[field] = value
    payload: Dict[str, Any] = {"data": data}
    if args.id:
        payload["id"] = args.id
    return payload


def media_payload(args: argparse.Namespace) -> Dict[str, Any]:
    path = Path(args.file)
    mime_type = args.mime or mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    payload: Dict[str, Any] = {
        "file": base64.b64encode(path.read_bytes()).decode("ascii"),
        "filename": path.name,
        "mimeType": mime_type,
    }
    if args.post_id:
        payload["postId"] = args.post_id
        payload["featured"] = bool(args.featured)
    return payload


def query_payload(args: argparse.Namespace) -> Dict[str, Any]:
    payload: Dict[str, Any] = {"action": args.action}
    if args.taxonomy:
        payload["taxonomy"] = args.taxonomy
    if args.search:
        payload["search"] = args.search
    if args.id:
        payload["id"] = args.id
    return payload


def _run(args: argparse.Namespace, path: str, payload: Dict[str, Any]) -> int:
    url = _build_url(args.base, path)
    _print_header(f"[gateway] {path} → {url}")
    print(f"[secret] len={len(args.secret)} (value hidden)")
    status, body = _post_signed(url, args.secret, payload, timeout=args.timeout)
    _print_header(f"[gateway] {path} ← status={status}")
    print(_pretty(body))
    return 0 if 200 <= status < 300 else 1


def run_post(args: argparse.Namespace) -> int:
    return _run(args, "wp-post/", post_payload(args))


def run_media(args: argparse.Namespace) -> int:
    return _run(args, "wp-media/", media_payload(args))


def run_query(args: argparse.Namespace) -> int:
    return _run(args, "wp-query/", query_payload(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Editorial Desk gateway client (signed wp-post / wp-media / wp-query).")
    sub = parser.add_subparsers(dest="cmd", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--base", required=True, help="Functions base URL, e.g. https://desk.example.com/functions")
    common.add_argument("--secret", default=os.getenv("GATEWAY_SECRET", ""), help="HMAC secret or set GATEWAY_SECRET env var")
    common.add_argument("--timeout", type=float, default=60.0)

    p = sub.add_parser("post", parents=[common], help="Create or update a post via /wp-post/")
    p.add_argument("--id", type=int, default=0, help="Existing post id (update)")
    p.add_argument("--title")
    p.add_argument("--content")
    p.add_argument("--excerpt")
    p.add_argument("--slug")
    p.add_argument("--status", default="draft", choices=["draft", "publish", "pending"])
    p.set_defaults(func=run_post)

    m = sub.add_parser("media", parents=[common], help="Upload a file via /wp-media/")
    m.add_argument("--file", required=True)
    m.add_argument("--mime", default="")
    m.add_argument("--post-id", type=int, default=0)
    m.add_argument("--featured", action="store_true")
    m.set_defaults(func=run_media)

    q = sub.add_parser("query", parents=[common], help="Read taxonomy/media via /wp-query/")
    q.add_argument("--action", required=True, choices=["list_terms", "get_terms", "search_media", "get_media"])
    q.add_argument("--taxonomy", default="")
    q.add_argument("--search", default="")
    q.add_argument("--id", type=int, default=0)
    q.set_defaults(func=run_query)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.secret:
        print("ERROR: No secret provided. Use --secret or set GATEWAY_SECRET env var.", file=sys.stderr)
        return 2

    try:
        return args.func(args)  # type: ignore[attr-defined]
    except KeyboardInterrupt:
        print("\nAborted by user.", file=sys.stderr)
        return 130
    except OSError as e:
        print(f"File error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
