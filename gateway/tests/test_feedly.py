from unittest import mock

import pytest

from gateway.services.feedly import (
    FeedlyClient,
    FeedlyError,
    SUMMARY_MAX,
    detect_priority_artists,
    detect_section,
    extract_artist_names,
    story_from_item,
    sync_feedly,
)
from gateway.services.supabase import SupabaseClient, SupabaseError
from gateway.tests.fakes import fake_session, make_response


def _item(n, **extra):
    item = {
        "id": f"entry-{n}",
        "title": f"Story {n}",
        "alternate": [{"href": f"https://news.example/{n}"}],
        "origin": {"title": "NME"},
    }
    item.update(extra)
    return item


@pytest.mark.parametrize("title,summary,source,expected", [
    ("Reading Festival lineup revealed", "", "NME", ("Festivals", True)),
    ("New punk single", None, "Kerrang", ("Upset", False)),
    ("Debut EP from emerging artist", "", "DIY", ("Hype", False)),
    ("Interview with a producer", "", "Blog", ("None", False)),
    # festival wins over rock keywords
    ("Metal weekend in Leeds", "", "Kerrang", ("Festivals", True)),
])
def test_detect_section(title, summary, source, expected):
    assert detect_section(title, summary, source) == expected


def test_detect_priority_artists():
    assert detect_priority_artists("Wolf Alice share new video", "with Sam Fender") == ["Wolf Alice", "Sam Fender"]
    assert detect_priority_artists("Unknown band plays gig", None) == []


def test_extract_artist_names():
    assert extract_artist_names("Wolf Alice announce new album", None) == ["Wolf Alice"]
    assert extract_artist_names("Bob Vylan and Amyl share collab", "") == ["Bob Vylan and Amyl", "Bob Vylan"]
    assert extract_artist_names("nothing capitalised here", "") == []


def test_story_from_item_maps_fields():
    item = _item(
        1,
        title="Wolf Alice announce festival headline set",
        summary={"content": "s" * (SUMMARY_MAX + 50)},
        visual={"url": "https://img.example/1.jpg"},
        published=1_700_000_000_000,
    )
    row = story_from_item(item)
    assert row["url"] == "https://news.example/1"
    assert row["source"] == "NME"
    assert len(row["summary"]) == SUMMARY_MAX
    assert row["image_url"] == "https://img.example/1.jpg"
    assert row["published_at"] == "2023-11-14T22:13:20.000Z"
    assert row["status"] == "pending"
    assert row["created_by"] == "dan"
    assert row["priority"] is True
    assert row["section"] == "Festivals"
    assert row["is_festival"] is True
    assert row["artist_names"] == ["Wolf Alice"]


def test_story_from_item_defaults():
    row = story_from_item({"alternate": [{"href": "https://x.example/a"}], "visual": {"url": "https://x/blank.gif"}})
    assert row["title"] == "Untitled"
    assert row["source"] == "Unknown"
    assert row["summary"] is None
    assert row["image_url"] is None
    assert row["artist_names"] is None
    assert row["priority"] is False
    assert row["published_at"].endswith("Z")


def test_story_from_item_without_url_is_skipped():
    assert story_from_item({"title": "No link"}) is None
    assert story_from_item({"title": "Empty", "alternate": []}) is None


def test_fetch_stream_calls_feedly_with_oauth():
    session = fake_session(make_response(200, {"items": [_item(1)]}))
    client = FeedlyClient("tok", session=session)

    items = client.fetch_stream("user/1/category/global.all", count=50)

    assert items == [_item(1)]
    method, url = session.request.call_args.args
    assert (method, url) == ("GET", "https://cloud.feedly.com/v3/streams/contents")
    assert session.request.call_args.kwargs["params"] == {
        "streamId": "user/1/category/global.all", "count": 50, "ranked": "newest",
    }
    assert FeedlyClient("tok").session.headers["Authorization"] == "OAuth tok"


def test_fetch_stream_error_raises():
    client = FeedlyClient("tok", session=fake_session(make_response(401, {"errorMessage": "token expired"})))
    with pytest.raises(FeedlyError) as exc:
        client.fetch_stream("s")
    assert exc.value.status == 401


def test_sync_counts_added_duplicates_failed_and_skipped():
    feedly = mock.create_autospec(FeedlyClient, instance=True)
    feedly.fetch_stream.return_value = [_item(1), _item(2), _item(3), {"title": "no url"}]
    supabase = mock.create_autospec(SupabaseClient, instance=True)
    supabase.insert.side_effect = [
        [{"id": 1}],
        SupabaseError("duplicate key value violates unique constraint", status=409, code="23505"),
        SupabaseError("permission denied", status=401, code="42501"),
    ]

    result = sync_feedly(feedly, supabase, stream_id="s", count=10)

    feedly.fetch_stream.assert_called_once_with("s", count=10)
    assert supabase.insert.call_count == 3
    assert supabase.insert.call_args_list[0].args[0] == "editorial_stories"
    assert (result.fetched, result.added, result.duplicates, result.failed, result.skipped) == (4, 1, 1, 1, 1)
    assert result.message == "Synced 4 items, added 1 new stories"
    assert result.as_dict()["message"] == result.message


def test_sync_propagates_feedly_errors():
    feedly = mock.create_autospec(FeedlyClient, instance=True)
    feedly.fetch_stream.side_effect = FeedlyError("Feedly API error: 500", status=500)
    supabase = mock.create_autospec(SupabaseClient, instance=True)
    with pytest.raises(FeedlyError):
        sync_feedly(feedly, supabase, stream_id="s")
    supabase.insert.assert_not_called()
