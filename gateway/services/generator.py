# gateway/services/generator.py
"""
Template article generators.

No model calls: press releases and feed items are reshaped into house-style
HTML fragments with regular expressions. Any text copied into the HTML is
escaped.

CHANGE LOG
----------
2026-02-06 • to_wordpress_html(): render plain/Markdown draft content with `markdown`.
2026-02-03 • press_release_draft(): draft row for imported press releases.
2026-01-30 • press_release_article() + feed_article().
"""

from __future__ import annotations

import html
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

import markdown

SLUG_MAX = 60

_ANNOUNCE_SPLIT_RE = re.compile(r"\s+(?:announce|release|drop|share)", re.I)
_MONTH_RE = re.compile(r"\b(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)\b", re.I)
_DAY_RE = re.compile(r"\d{1,2}")
_RELEASE_RE = re.compile(
    r"(?:out|released?|available)\s+(?:now|on|this)?\s*([A-Z][a-z]+ \d{1,2}(?:st|nd|rd|th)?)", re.I
)
_QUOTE_TRIM_RE = re.compile(r'^[^"]*"|"[^"]*$')
_HYPE_RE = re.compile(r"\b(hotly-?tipped|much-?anticipated|fast-?rising|award-?winning)\b", re.I)
_FEED_ANNOUNCE_RE = re.compile(
    r"^[^a-zA-Z]*([A-Z][a-zA-Z\s&]+?)\s+(announce|release|drop|share|debut|unveil|return)(?:s|es|ed)?\s*(.+)",
    re.I,
)
_HTML_HINT_RE = re.compile(r"<\s*(p|h[1-6]|ul|ol|li|blockquote|div|figure|br|strong|em|a)\b", re.I)


def _esc(text: Any) -> str:
    return html.escape(str(text or ""), quote=False)


def clean_title(text: str) -> str:
    """Collapse whitespace and drop one trailing period."""
    title = re.sub(r"\s+", " ", text or "").strip()
    return re.sub(r"\.$", "", title)


def slugify(text: str, max_length: int = SLUG_MAX) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (text or "").lower()).strip("-")
    return slug[:max_length]


def _first_artist(artist_names: Optional[Iterable[Any]]) -> str:
    for name in artist_names or []:
        name = str(name or "").strip()
        if name:
            return name
    return ""


def _artist_from_subject(subject: str) -> str:
    return _ANNOUNCE_SPLIT_RE.split(subject or "", maxsplit=1)[0].strip()


# ---------------------------------------------------------------------------
# Press releases
# ---------------------------------------------------------------------------

def _announcement(body: str) -> str:
    first_para = body.split("\n\n")[0] or body
    return re.sub(r"^[^a-zA-Z]*", "", first_para).strip()


def _context(body: str) -> Optional[str]:
    paragraphs = body.split("\n\n")
    if len(paragraphs) > 1:
        context = paragraphs[1].strip()
        if len(context) > 50 and '"' not in context:
            return context
    return None


def _release_info(body: str) -> Optional[str]:
    match = _RELEASE_RE.search(body)
    if match:
        return f"The release is out {match.group(1)}."
    return None


def _press_release_content(artist: str, body: str) -> str:
    lines = [ln for ln in body.split("\n") if ln.strip()]
    quotes = [ln for ln in lines if '"' in ln and len(ln) > 20]
    tour_lines = [ln for ln in lines if _MONTH_RE.search(ln) and _DAY_RE.search(ln)]

    parts: List[str] = [f"<p><strong>{_esc(artist)}</strong> {_esc(_announcement(body))}</p>\n\n"]

    context = _context(body)
    if context:
        parts.append(f"<p>{_esc(context)}</p>\n\n")

    if quotes:
        quote = _QUOTE_TRIM_RE.sub("", quotes[0]).strip()
        parts.append(f"<blockquote>\n<p>'{_esc(quote)}'</p>\n</blockquote>\n\n")

    if tour_lines:
        parts.append("<p><strong>Live dates</strong></p>\n")
        parts.append("<p>" + "<br/>".join(_esc(ln) for ln in tour_lines[:5]) + "</p>\n\n")

    release = _release_info(body)
    if release:
        parts.append(f"<p>{_esc(release)}</p>")

    return "".join(parts)


def press_release_article(
    subject: str,
    body: str,
    artist_names: Optional[Iterable[Any]] = None,
    sender: str = "",
) -> Dict[str, str]:
    """Reshape a press release into {title, slug, excerpt, content, artist}."""
    if not isinstance(subject, str) or not subject.strip():
        raise ValueError("subject is required")
    if not isinstance(body, str) or not body.strip():
        raise ValueError("body is required")

    artist = _first_artist(artist_names) or _artist_from_subject(subject) or "Artist"
    title = clean_title(subject)

    first_sentence = re.split(r"[.!?]", body)[0].strip()
    if len(first_sentence) > 100:
        excerpt = first_sentence[:150] + "..."
    else:
        excerpt = first_sentence + "."

    return {
        "title": title,
        "slug": slugify(title),
        "excerpt": excerpt,
        "content": _press_release_content(artist, body),
        "artist": artist,
    }


# ---------------------------------------------------------------------------
# Feed items
# ---------------------------------------------------------------------------

def _feed_announcement(title: str) -> str:
    match = _FEED_ANNOUNCE_RE.match(title)
    if match:
        return f"{match.group(2)}s {match.group(3) or 'new music'}"
    return "has announced new music"


def feed_article(
    title: str,
    summary: Optional[str] = None,
    source: str = "",
    url: str = "",
    artist_names: Optional[Iterable[Any]] = None,
) -> Dict[str, str]:
    """Reshape a feed item into {title, slug, excerpt, content}."""
    if not isinstance(title, str) or not title.strip():
        raise ValueError("title is required")
    summary = summary if isinstance(summary, str) and summary.strip() else None
    source = str(source or "")
    url = str(url or "")

    cleaned = clean_title(title)
    if summary:
        excerpt = summary[:150] + ("..." if len(summary) > 150 else "")
    else:
        excerpt = f"{cleaned} - latest news from {source}."

    parts: List[str] = []
    if summary:
        clean_summary = re.sub(r"\s+", " ", _HYPE_RE.sub("", summary)).strip()
        parts.append(f"<p>{_esc(clean_summary)}</p>\n\n")
    else:
        parts.append(f"<p>{_esc(cleaned)}.</p>\n\n")

    artist = _first_artist(artist_names) or _artist_from_subject(cleaned)
    if artist:
        parts.append(f"<p><strong>{_esc(artist)}</strong> {_esc(_feed_announcement(cleaned))}.</p>\n\n")

    parts.append(
        f'<p>Via <a href="{html.escape(url, quote=True)}" target="_blank" rel="noopener">'
        f"{_esc(source)}</a>.</p>"
    )

    return {
        "title": cleaned,
        "slug": slugify(cleaned),
        "excerpt": excerpt,
        "content": "".join(parts),
    }


# ---------------------------------------------------------------------------
# Draft helpers (newsdesk)
# ---------------------------------------------------------------------------

def text_to_paragraphs(text: str) -> str:
    """Blank-line separated text -> escaped <p> blocks."""
    paras = [p.strip() for p in (text or "").split("\n\n") if p.strip()]
    return "".join(f"<p>{_esc(p)}</p>" for p in paras)


def press_release_draft(release: Mapping[str, Any]) -> Dict[str, Any]:
    """Draft fields for an imported press release (story_id/created_by added by the caller)."""
    subject = str(release.get("subject") or "").strip()
    body = str(release.get("body_text") or "")
    attachments = release.get("attachments") or []
    featured = None
    if attachments and isinstance(attachments[0], Mapping):
        featured = attachments[0].get("cloudinary_url") or None
    return {
        "title": subject,
        "slug": slugify(subject),
        "excerpt": body[:300],
        "content": text_to_paragraphs(body),
        "featured_image": featured,
        "artist_names": release.get("artist_names") or None,
        "status": "draft",
    }


def looks_like_html(text: str) -> bool:
    return bool(_HTML_HINT_RE.search(text or ""))


def to_wordpress_html(content: str) -> str:
    """HTML passes through; plain text and Markdown (**bold**, line breaks) are rendered."""
    content = content or ""
    if looks_like_html(content):
        return content
    return markdown.markdown(content, extensions=["nl2br"])
