# backend/tests/test_media_classifier.py

from unittest.mock import MagicMock

import pytest

from app.media.classifier import (
    AttachmentKind,
    MediaClassifier,
    MediaFetchError,
    MissingCredentialsError,
    classify_attachment,
    format_short_date,
    map_page_to_post,
)
from app.media.schemas import FetchErrorCode, MediaType
from app.notion.client import NotionAPIError, NotionAuthError, NotionConnectionError
from app.notion.config import NotionConfig
from app.notion.schemas import NotionPage
from notion_factory import external, make_page, uploaded


def _map(raw):
    return map_page_to_post(NotionPage.model_validate(raw))


@pytest.mark.parametrize(
    "filename, expected",
    [
        ("clip.mp4", AttachmentKind.VIDEO),
        ("CLIP.MOV", AttachmentKind.VIDEO),
        ("teaser.webm", AttachmentKind.VIDEO),
        ("old.avi", AttachmentKind.VIDEO),
        ("photo.png", AttachmentKind.IMAGE),
        ("photo.JPG", AttachmentKind.IMAGE),
        ("photo.jpeg", AttachmentKind.IMAGE),
        ("anim.gif", AttachmentKind.IMAGE),
        ("pic.webp", AttachmentKind.IMAGE),
        ("brief.pdf", None),
        ("mp4", None),
        ("", None),
        (None, None),
    ],
)
def test_classify_attachment(filename, expected):
    assert classify_attachment(filename) == expected


def test_format_short_date():
    assert format_short_date("2024-03-03") == "Mar 3"
    assert format_short_date("2023-12-25T10:00:00.000Z") == "Dec 25"
    assert format_short_date("2024-01-31T23:30:00.000+09:00") == "Jan 31"


def test_video_takes_priority_over_images():
    raw = make_page(
        files=[
            uploaded("a.png"),
            uploaded("first.mp4", "https://files.example.com/first.mp4"),
            uploaded("second.mov"),
            uploaded("b.jpg"),
        ]
    )

    post = _map(raw)

    assert post.type == MediaType.VIDEO
    assert post.video_url == "https://files.example.com/first.mp4"
    assert post.images is None


def test_multiple_images_become_carousel_in_attachment_order():
    raw = make_page(
        files=[
            uploaded("3.png", "https://x/3.png"),
            uploaded("notes.txt"),
            uploaded("1.jpg", "https://x/1.jpg"),
            uploaded("2.webp", "https://x/2.webp"),
        ]
    )

    post = _map(raw)

    assert post.type == MediaType.CAROUSEL
    assert post.images == ["https://x/3.png", "https://x/1.jpg", "https://x/2.webp"]
    assert post.video_url is None


def test_carousel_drops_unresolvable_urls():
    raw = make_page(
        files=[
            uploaded("1.png", "https://x/1.png"),
            {"name": "2.png", "type": "file", "file": {"url": None}},
            uploaded("3.png", "https://x/3.png"),
        ]
    )

    post = _map(raw)

    assert post.type == MediaType.CAROUSEL
    assert post.images == ["https://x/1.png", "https://x/3.png"]


def test_single_image():
    post = _map(make_page(files=[uploaded("only.gif", "https://x/only.gif")]))

    assert post.type == MediaType.IMAGE
    assert post.images == ["https://x/only.gif"]


def test_external_link_files_are_resolved():
    post = _map(make_page(files=[external("hosted.jpg", "https://cdn/hosted.jpg")]))

    assert post.type == MediaType.IMAGE
    assert post.images == ["https://cdn/hosted.jpg"]


def test_no_classifiable_attachments():
    post = _map(make_page(files=[uploaded("doc.pdf")]))

    assert post.type == MediaType.IMAGE
    assert post.images is None
    assert post.video_url is None
    assert not post.has_media


def test_missing_visuals_property():
    post = _map(make_page())

    assert post.type == MediaType.IMAGE
    assert post.images is None
    assert post.video_url is None


def test_missing_title_is_untitled():
    assert _map(make_page()).title == "Untitled"
    assert _map(make_page(title="")).title == "Untitled"


def test_title_uses_first_segment():
    raw = make_page(title="Launch day")
    raw["properties"]["Subject"]["title"].append({"plain_text": " (part 2)"})

    assert _map(raw).title == "Launch day"


def test_date_prefers_publish_date_then_created_time():
    with_publish = make_page(publish_date="2024-03-03", created_time="2024-01-05T00:00:00.000Z")
    without_publish = make_page(created_time="2024-01-05T00:00:00.000Z")

    assert _map(with_publish).date == "Mar 3"
    assert _map(without_publish).date == "Jan 5"


def test_unknown_properties_are_kept_as_extra():
    from app.notion.schemas import MediaPageProperties

    raw = make_page(title="t", extra={"Status": {"type": "select", "select": {"name": "Draft"}}})
    props = MediaPageProperties.from_page(NotionPage.model_validate(raw))

    assert props.subject == "t"
    assert "Status" in props.extra
    assert "Subject" not in props.extra


def test_serialized_post_uses_camel_case_and_omits_unset_media():
    video = _map(make_page("v", files=[uploaded("a.mp4", "https://x/a.mp4")]))
    empty = _map(make_page("e"))

    video_json = video.model_dump(by_alias=True, exclude_none=True, mode="json")
    empty_json = empty.model_dump(by_alias=True, exclude_none=True, mode="json")

    assert video_json["videoUrl"] == "https://x/a.mp4"
    assert video_json["type"] == "video"
    assert "images" not in empty_json
    assert "videoUrl" not in empty_json


def _classifier(client, **config_kwargs) -> MediaClassifier:
    return MediaClassifier(NotionConfig(**config_kwargs), client=client)


def test_fetch_posts_maps_every_record_with_descending_sort():
    client = MagicMock()
    client.query_database.return_value = [
        make_page("p1", files=[uploaded("a.png")]),
        make_page("p2", files=[uploaded("a.mp4")]),
    ]

    result = _classifier(client).fetch_posts("db-1", "token-1")

    assert result.ok
    assert [p.id for p in result.posts] == ["p1", "p2"]
    client.query_database.assert_called_once_with(
        "db-1",
        "token-1",
        sorts=[{"property": "Publish date", "direction": "descending"}],
    )


def test_fetch_posts_call_site_values_override_config():
    client = MagicMock()
    client.query_database.return_value = []

    classifier = _classifier(client, api_key="env-token", database_id="env-db")

    classifier.fetch_posts("url-db", "url-token")
    assert client.query_database.call_args.args == ("url-db", "url-token")

    classifier.fetch_posts()
    assert client.query_database.call_args.args == ("env-db", "env-token")


def test_fetch_posts_missing_credentials():
    classifier = _classifier(MagicMock())

    with pytest.raises(MissingCredentialsError):
        classifier.fetch_posts(database_id="db-only")


def test_fetch_posts_empty_database_is_success():
    client = MagicMock()
    client.query_database.return_value = []

    result = _classifier(client).fetch_posts("db", "token")

    assert result.ok
    assert result.posts == []


@pytest.mark.parametrize(
    "error, code",
    [
        (NotionAuthError("unauthorized"), FetchErrorCode.UPSTREAM_AUTH),
        (NotionConnectionError("timeout"), FetchErrorCode.UPSTREAM_UNREACHABLE),
        (NotionAPIError("boom", status_code=500), FetchErrorCode.UPSTREAM_ERROR),
    ],
)
def test_fetch_posts_upstream_failure_is_reported(error, code):
    client = MagicMock()
    client.query_database.side_effect = error

    result = _classifier(client).fetch_posts("db", "token")

    assert not result.ok
    assert result.error.code == code
    assert result.posts == []


def test_get_media_posts_raises_on_failure():
    client = MagicMock()
    client.query_database.side_effect = NotionAPIError("boom", status_code=500)

    with pytest.raises(MediaFetchError) as exc_info:
        _classifier(client).get_media_posts("db", "token")

    assert exc_info.value.error.code == FetchErrorCode.UPSTREAM_ERROR


def test_token_is_never_logged(caplog):
    client = MagicMock()
    client.query_database.return_value = [make_page("p1", title="hello")]

    with caplog.at_level("DEBUG", logger="app.media.classifier"):
        _classifier(client).fetch_posts("db", "super-secret-token")

    assert "super-secret-token" not in caplog.text


@pytest.mark.parametrize(
    "publish_date, created_time, expected",
    [
        ("garbage", "2024-01-05T00:00:00.000Z", "Jan 5"),
        ("garbage", "also-bad", ""),
        ("2024-07-04", "also-bad", "Jul 4"),
    ],
)
def test_display_date_fallbacks(publish_date, created_time, expected):
    raw = make_page(publish_date=publish_date, created_time=created_time)

    assert _map(raw).date == expected
