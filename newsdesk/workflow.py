# /home/dork/editorialdesk/newsdesk/workflow.py
"""
Editorial workflow service.

Server-side versions of the writes the dashboard used to make directly
against the datastore: story triage, the draft lifecycle, press release
import, the WordPress mirror and Barry import tracking. Status rules are
checked here (the datastore has no triggers for them):

    stories          pending -> approved | rejected
    drafts           draft <-> in_review -> approved -> published
    press releases   pending -> imported | rejected

Publishing is WordPress first, datastore second. If the second write fails
the WordPress post stays; the error is logged with the post id and reported
as an UpstreamFailure.

CHANGE LOG
----------
2026-02-11 • import_press_release(): reuse the story/draft left by a partial earlier import.
2026-02-09 • publish_draft(): artist names -> WP tag ids via resolve_tag_ids().
2026-02-06 • Telegram failures are logged, never fail the editorial action.
2026-02-03 • import_press_release(): story url made unique per release.
2026-02-02 • Initial service (stories, drafts, press releases, mirror, Barry).
"""

from __future__ import annotations

import html
import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional

import requests
from django.conf import settings
from django.utils import timezone

from gateway.services.cloudinary import CloudinaryClient, CloudinaryError, optimized_url
from gateway.services.generator import press_release_draft, slugify, to_wordpress_html
from gateway.services.supabase import SupabaseClient, SupabaseError, eq, in_
from gateway.services.telegram import TelegramClient, TelegramError
from gateway.services.wordpress import WordPressClient, WordPressError
from .exceptions import InvalidTransition, NotFound, UpstreamFailure

logger = logging.getLogger("newsdesk.workflow")

STORIES = "editorial_stories"
DRAFTS = "editorial_drafts"
PRESS_RELEASES = "editorial_press_releases"
WP_ARTICLES = "wordpress_articles"

EDITORS = ("dan", "stephen")

OPEN_DRAFT_STATUSES = ("draft", "in_review")
DRAFT_EDITABLE_FIELDS = (
    "title", "slug", "excerpt", "content", "featured_image", "section", "artist_names", "status",
)

# WordPress `sections` taxonomy term ids
SECTION_TERM_IDS = {"Upset": 6, "Hype": 7, "Festivals": 8}

OPTIMIZED_WIDTH = 1200

_TAG_RE = re.compile(r"<[^>]*>")


def now_iso() -> str:
    return timezone.now().isoformat()


def strip_tags(text: str) -> str:
    return html.unescape(_TAG_RE.sub("", text or "")).strip()


def other_editor(editor: str) -> str:
    return "stephen" if editor == "dan" else "dan"


def section_term_ids(section: Optional[str]) -> List[int]:
    term = SECTION_TERM_IDS.get(section or "")
    return [term] if term else []


class EditorialDesk:
    def __init__(
        self,
        supabase: SupabaseClient,
        wordpress: Optional[WordPressClient] = None,
        telegram: Optional[TelegramClient] = None,
        cloudinary: Optional[CloudinaryClient] = None,
    ):
        self.db = supabase
        self.wp = wordpress
        self.telegram = telegram
        self.cloudinary = cloudinary

    @classmethod
    def from_settings(cls) -> "EditorialDesk":
        return cls(
            SupabaseClient.from_settings(),
            WordPressClient.from_settings(),
            TelegramClient.from_settings(),
            CloudinaryClient.from_settings(),
        )

    # ----- plumbing ---------------------------------------------------------

    def _get(self, table: str, row_id: Any, what: str) -> Dict[str, Any]:
        try:
            row = self.db.select_one(table, id=row_id)
        except SupabaseError as exc:
            raise UpstreamFailure(f"Could not load {what}: {exc}") from exc
        if row is None:
            raise NotFound(f"{what.capitalize()} {row_id} not found.")
        return row

    def _select(self, table: str, **kwargs) -> List[Dict[str, Any]]:
        try:
            return self.db.select(table, **kwargs)
        except SupabaseError as exc:
            raise UpstreamFailure(f"Could not list {table}: {exc}") from exc

    def _insert(self, table: str, row: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            rows = self.db.insert(table, row)
        except SupabaseError as exc:
            raise UpstreamFailure(f"Could not insert into {table}: {exc}") from exc
        return rows[0] if rows else dict(row)

    def _update(self, table: str, row_id: Any, values: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            rows = self.db.update(table, values, {"id": eq(row_id)})
        except SupabaseError as exc:
            raise UpstreamFailure(f"Could not update {table} {row_id}: {exc}") from exc
        return rows[0] if rows else dict(values, id=row_id)

    def _notify(self, title: str, message: str, priority: str) -> bool:
        if self.telegram is None:
            return False
        try:
            return self.telegram.send_notification(title, message, priority)
        except (TelegramError, requests.RequestException) as exc:
            logger.warning("[newsdesk] notification %r not delivered: %s", title, exc)
            return False

    # ----- counters ---------------------------------------------------------

    def counts(self) -> Dict[str, int]:
        try:
            return {
                "pending_stories": self.db.count(STORIES, {"status": eq("pending")}),
                "drafts": self.db.count(DRAFTS, {"status": eq("draft")}),
                "in_review": self.db.count(DRAFTS, {"status": eq("in_review")}),
                "pending_press_releases": self.db.count(PRESS_RELEASES, {"status": eq("pending")}),
                "barry_queue": self.db.count(WP_ARTICLES, {"barry_imported": eq(False)}),
            }
        except SupabaseError as exc:
            raise UpstreamFailure(f"Could not count queues: {exc}") from exc

    # ----- stories ----------------------------------------------------------

    def list_stories(self, status: str = "pending", limit: int = 100) -> List[Dict[str, Any]]:
        return self._select(STORIES, filters={"status": eq(status)},
                            order="published_at.desc", limit=limit)

    def set_story_status(self, story_id: Any, status: str, editor: str) -> Dict[str, Any]:
        if status not in ("approved", "rejected"):
            raise InvalidTransition(f"Stories can only be approved or rejected, not {status!r}.")
        story = self._get(STORIES, story_id, "story")
        if story.get("status") != "pending":
            raise InvalidTransition(f"Story {story_id} is already {story.get('status')}.")
        updated = self._update(STORIES, story_id, {"status": status, "updated_at": now_iso()})
        logger.info("[newsdesk] story %s -> %s by %s", story_id, status, editor)
        return updated

    # ----- drafts -----------------------------------------------------------

    def list_drafts(self, statuses: Iterable[str] = OPEN_DRAFT_STATUSES) -> List[Dict[str, Any]]:
        return self._select(DRAFTS, filters={"status": in_(statuses)}, order="created_at.desc")

    def _review_notice(self, title: str, editor: str) -> None:
        reviewer = other_editor(editor).capitalize()
        self._notify("Draft Ready for Review", f'"{title}" is ready for {reviewer}\'s review', "medium")

    def create_draft(self, data: Mapping[str, Any], editor: str) -> Dict[str, Any]:
        status = data.get("status") or "draft"
        if status not in OPEN_DRAFT_STATUSES:
            raise InvalidTransition(f"New drafts start as draft or in_review, not {status!r}.")
        row = {k: data[k] for k in DRAFT_EDITABLE_FIELDS if k in data}
        row["status"] = status
        row["slug"] = row.get("slug") or slugify(row.get("title", ""))
        row["created_by"] = editor
        if data.get("story_id"):
            row["story_id"] = data["story_id"]
        draft = self._insert(DRAFTS, row)
        logger.info("[newsdesk] draft %s created by %s status=%s", draft.get("id"), editor, status)
        if status == "in_review":
            self._review_notice(row.get("title", ""), editor)
        return draft

    def update_draft(self, draft_id: Any, changes: Mapping[str, Any], editor: str) -> Dict[str, Any]:
        draft = self._get(DRAFTS, draft_id, "draft")
        if draft.get("status") not in OPEN_DRAFT_STATUSES:
            raise InvalidTransition(f"Draft {draft_id} is {draft.get('status')} and can no longer be edited.")
        values = {k: changes[k] for k in DRAFT_EDITABLE_FIELDS if k in changes}
        new_status = values.get("status")
        if new_status is not None and new_status not in OPEN_DRAFT_STATUSES:
            raise InvalidTransition("Use approve/publish to move a draft past review.")
        if "title" in values and not (values.get("slug") or draft.get("slug")):
            values["slug"] = slugify(values["title"])
        values["updated_at"] = now_iso()
        updated = self._update(DRAFTS, draft_id, values)
        if new_status == "in_review" and draft.get("status") != "in_review":
            self._review_notice(values.get("title") or draft.get("title", ""), editor)
        return updated

    def delete_draft(self, draft_id: Any) -> None:
        self._get(DRAFTS, draft_id, "draft")
        try:
            self.db.delete(DRAFTS, {"id": eq(draft_id)})
        except SupabaseError as exc:
            raise UpstreamFailure(f"Could not delete draft {draft_id}: {exc}") from exc
        logger.info("[newsdesk] draft %s deleted", draft_id)

    def approve_draft(self, draft_id: Any, editor: str) -> Dict[str, Any]:
        draft = self._get(DRAFTS, draft_id, "draft")
        if draft.get("status") not in OPEN_DRAFT_STATUSES:
            raise InvalidTransition(f"Draft {draft_id} is already {draft.get('status')}.")
        logger.info("[newsdesk] draft %s approved by %s", draft_id, editor)
        return self._update(DRAFTS, draft_id, {"status": "approved", "updated_at": now_iso()})

    def build_wordpress_post(self, draft: Mapping[str, Any], tag_ids: List[int]) -> Dict[str, Any]:
        return {
            "title": draft.get("title") or "",
            "content": to_wordpress_html(draft.get("content") or ""),
            "excerpt": draft.get("excerpt") or "",
            "slug": draft.get("slug") or slugify(draft.get("title") or ""),
            "status": "draft",
            "author": int(getattr(settings, "WP_AUTHOR_ID", 8)),
            "tags": tag_ids,
            "sections": section_term_ids(draft.get("section")),
        }

    def publish_draft(self, draft_id: Any, editor: str) -> Dict[str, Any]:
        if self.wp is None:
            raise UpstreamFailure("WordPress is not configured.")
        draft = self._get(DRAFTS, draft_id, "draft")
        if draft.get("wordpress_post_id") or draft.get("status") == "published":
            raise InvalidTransition(
                f"Draft {draft_id} is already on WordPress (post {draft.get('wordpress_post_id')})."
            )

        try:
            tag_ids = self.wp.resolve_tag_ids(draft.get("artist_names") or [])
            wp_post = self.wp.create_post(self.build_wordpress_post(draft, tag_ids))
        except (WordPressError, requests.RequestException) as exc:
            raise UpstreamFailure(f"WordPress publish failed: {exc}") from exc

        wp_post_id = wp_post.get("id")
        try:
            updated = self.db.update(DRAFTS, {
                "status": "published",
                "wordpress_post_id": wp_post_id,
                "wordpress_status": "draft",
                "updated_at": now_iso(),
            }, {"id": eq(draft_id)})
        except SupabaseError as exc:
            logger.error("[newsdesk] draft %s: WordPress post %s created but datastore update failed: %s",
                         draft_id, wp_post_id, exc)
            raise UpstreamFailure(
                f"WordPress post {wp_post_id} was created but the draft could not be updated: {exc}"
            ) from exc

        logger.info("[newsdesk] draft %s published as WP post %s by %s", draft_id, wp_post_id, editor)
        self._notify("Draft Published to WordPress",
                     f'"{draft.get("title", "")}" has been pushed to WordPress as a draft', "high")
        return {"draft": updated[0] if updated else None, "wordpress_post_id": wp_post_id}

    # ----- press releases ---------------------------------------------------

    def list_press_releases(self, status: str = "pending") -> List[Dict[str, Any]]:
        return self._select(PRESS_RELEASES, filters={"status": eq(status)}, order="created_at.desc")

    def _find(self, table: str, what: str, **equals: Any) -> Optional[Dict[str, Any]]:
        try:
            return self.db.select_one(table, **equals)
        except SupabaseError as exc:
            raise UpstreamFailure(f"Could not look up {what}: {exc}") from exc

    def import_press_release(self, release_id: Any, editor: str) -> Dict[str, Any]:
        """
        Approved priority story + draft from a pending release, then mark it imported.

        Safe to call again after a partial failure: the story (unique url) and
        its draft are looked up before anything is inserted.
        """
        release = self._get(PRESS_RELEASES, release_id, "press release")
        if release.get("status") != "pending":
            raise InvalidTransition(f"Press release {release_id} is already {release.get('status')}.")

        story_url = f"#press-release-{release_id}"
        story = self._find(STORIES, "story", url=story_url)
        if story is None:
            body = release.get("body_text") or ""
            story = self._insert(STORIES, {
                "title": release.get("subject") or "",
                "url": story_url,
                "source": release.get("sender_name") or release.get("sender_email") or "",
                "summary": body[:500],
                "status": "approved",
                "priority": True,
                "artist_names": release.get("artist_names") or None,
                "created_by": editor,
            })
        else:
            logger.info("[newsdesk] press release %s: reusing story %s from an earlier attempt",
                        release_id, story.get("id"))

        draft = self._find(DRAFTS, "draft", story_id=story.get("id"))
        if draft is None:
            draft_row = press_release_draft(release)
            draft_row["story_id"] = story.get("id")
            draft_row["created_by"] = editor
            draft = self._insert(DRAFTS, draft_row)

        self._update(PRESS_RELEASES, release_id, {"status": "imported", "imported_to_story_id": story.get("id")})

        attachments = release.get("attachments") or []
        self._notify(
            "Press Release Approved & Draft Created",
            f'"{release.get("subject", "")}" from {release.get("sender_name") or release.get("sender_email") or "unknown"}\n'
            f"Draft created with {len(attachments)} images",
            "high",
        )
        logger.info("[newsdesk] press release %s imported -> story %s draft %s",
                    release_id, story.get("id"), draft.get("id"))
        return {"story": story, "draft": draft}

    def reject_press_release(self, release_id: Any, editor: str) -> Dict[str, Any]:
        release = self._get(PRESS_RELEASES, release_id, "press release")
        if release.get("status") != "pending":
            raise InvalidTransition(f"Press release {release_id} is already {release.get('status')}.")
        logger.info("[newsdesk] press release %s rejected by %s", release_id, editor)
        return self._update(PRESS_RELEASES, release_id, {"status": "rejected"})

    # ----- WordPress mirror + Barry -----------------------------------------

    def mirror_row(self, post: Mapping[str, Any]) -> Dict[str, Any]:
        media = ((post.get("_embedded") or {}).get("wp:featuredmedia") or [{}])[0] or {}
        url = post.get("link") or f"{self.wp.base}/{post.get('slug', '')}"
        return {
            "wp_post_id": post.get("id"),
            "title": strip_tags((post.get("title") or {}).get("rendered", "")),
            "url": url,
            "excerpt": strip_tags((post.get("excerpt") or {}).get("rendered", "")),
            "featured_image": media.get("source_url"),
            "published_at": post.get("date"),
            "barry_imported": False,
        }

    def sync_wordpress(self, status: str = "publish", per_page: int = 20) -> Dict[str, int]:
        if self.wp is None:
            raise UpstreamFailure("WordPress is not configured.")
        try:
            posts = self.wp.get_posts(status=status, per_page=per_page)
        except (WordPressError, requests.RequestException) as exc:
            raise UpstreamFailure(f"Could not fetch WordPress posts: {exc}") from exc

        added = 0
        for post in posts:
            try:
                existing = self.db.select_one(WP_ARTICLES, wp_post_id=post.get("id"))
            except SupabaseError as exc:
                raise UpstreamFailure(f"Could not check mirror for post {post.get('id')}: {exc}") from exc
            if existing is not None:
                continue
            self._insert(WP_ARTICLES, self.mirror_row(post))
            added += 1

        logger.info("[newsdesk] wordpress mirror: fetched=%s added=%s", len(posts), added)
        return {"fetched": len(posts), "added": added, "existing": len(posts) - added}

    def barry_queue(self) -> List[Dict[str, Any]]:
        return self._select(WP_ARTICLES, filters={"barry_imported": eq(False)}, order="published_at.desc")

    def mark_barry_imported(self, article_id: Any, editor: str) -> Dict[str, Any]:
        article = self._get(WP_ARTICLES, article_id, "article")
        if article.get("barry_imported"):
            raise InvalidTransition(f"Article {article_id} is already in Barry.")
        updated = self._update(WP_ARTICLES, article_id, {"barry_imported": True, "barry_imported_at": now_iso()})
        logger.info("[newsdesk] article %s imported to Barry by %s", article_id, editor)
        self._notify("Imported to Barry", f'"{article.get("title", "")}" is now in Barry', "low")
        return updated

    # ----- side channels ----------------------------------------------------

    def request_attention(self, editor: str, message: str) -> bool:
        if self.telegram is None:
            return False
        try:
            return self.telegram.request_attention(editor.capitalize(), message)
        except (TelegramError, requests.RequestException) as exc:
            raise UpstreamFailure(f"Telegram request failed: {exc}") from exc

    def upload_image(self, content: bytes, filename: str, mime_type: str) -> Dict[str, str]:
        if self.cloudinary is None:
            raise UpstreamFailure("Cloudinary is not configured.")
        try:
            url = self.cloudinary.upload_image(content, filename, mime_type)
        except (CloudinaryError, requests.RequestException) as exc:
            raise UpstreamFailure(f"Image upload failed: {exc}") from exc
        return {"url": url, "optimized_url": optimized_url(url, width=OPTIMIZED_WIDTH)}
