# backend/app/media/classifier.py

"""
Notion レコードを MediaPost に変換するサービス層。

責務:
- 添付ファイルを拡張子で video / image に分類する
- 1 ページ分のプロパティから MediaPost を組み立てる
- Notion への問い合わせ結果を MediaFetchResult として返す
  （「0 件」と「取得失敗」を区別する）
"""

import logging
import re
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from app.notion.client import (
    NotionAuthError,
    NotionClient,
    NotionClientError,
    NotionConnectionError,
)
from app.notion.config import NotionConfig, NotionPropertyNames
from app.notion.schemas import MediaPageProperties, NotionFile, NotionPage

from .schemas import (
    FetchError,
    FetchErrorCode,
    MediaFetchResult,
    MediaPost,
    MediaType,
)

logger = logging.getLogger(__name__)

UNTITLED = "Untitled"

# 以前のリビジョンで MediaPost.url として返していたプレースホルダ画像。
# 現在のモデルには含めないが、旧クライアント向けに定数だけ残している。
FALLBACK_DISPLAY_URL = (
    "https://images.pexels.com/photos/1040880/pexels-photo-1040880.jpeg"
    "?auto=compress&cs=tinysrgb&w=800"
)

_VIDEO_PATTERN = re.compile(r"\.(mp4|mov|webm|avi)$", re.IGNORECASE)
_IMAGE_PATTERN = re.compile(r"\.(png|jpe?g|gif|webp)$", re.IGNORECASE)

_MONTH_ABBR = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)


class AttachmentKind(str, Enum):
    VIDEO = "video"
    IMAGE = "image"


class MediaError(RuntimeError):
    """メディア取得処理全般の例外。"""


class MissingCredentialsError(MediaError):
    """データベース ID またはトークンが解決できなかった場合の例外。"""


class MediaFetchError(MediaError):
    """Notion からの取得に失敗した場合の例外。"""

    def __init__(self, error: FetchError) -> None:
        super().__init__(error.message)
        self.error = error


def classify_attachment(filename: Optional[str]) -> Optional[AttachmentKind]:
    """
    ファイル名の拡張子から添付ファイルの種別を判定する。
    動画・画像のどちらにも該当しない場合は None。
    """
    if not filename:
        return None
    if _VIDEO_PATTERN.search(filename):
        return AttachmentKind.VIDEO
    if _IMAGE_PATTERN.search(filename):
        return AttachmentKind.IMAGE
    return None


def _parse_iso(value: str) -> date:
    """ISO 8601 の date / datetime 文字列をパースする。"""
    if "T" not in value:
        return date.fromisoformat(value)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def format_short_date(value: str) -> str:
    """
    ISO 8601 文字列を 'Mar 3' 形式に変換する。

    タイムゾーン付きの値はその値自身のオフセットのまま日付を取る。
    """
    parsed = _parse_iso(value)
    return f"{_MONTH_ABBR[parsed.month - 1]} {parsed.day}"


def _display_date(publish_date: Optional[str], created_time: Optional[str]) -> str:
    """Publish date → created_time の順でパースできた方を使う。"""
    for candidate in (publish_date, created_time):
        if not candidate:
            continue
        try:
            return format_short_date(candidate)
        except ValueError:
            logger.warning("Unparsable date value in Notion record: %r", candidate)
    return ""


def _resolved_urls(files: List[NotionFile]) -> List[str]:
    return [url for url in (f.resolved_url for f in files) if url]


def map_page_to_post(
    page: NotionPage,
    property_names: Optional[NotionPropertyNames] = None,
) -> MediaPost:
    """
    Notion のページ 1 件を MediaPost に変換する。

    判定順（先に一致したものを採用）:
      1. 動画ファイルが 1 つ以上 → video（先頭の動画のみ使用）
      2. 画像ファイルが 2 つ以上 → carousel（添付順、URL 解決できないものは除外）
      3. 画像ファイルがちょうど 1 つ → image
      4. それ以外 → image（URL なし。表示側でプレースホルダを使う）
    """
    props = MediaPageProperties.from_page(page, property_names)

    video_files: List[NotionFile] = []
    image_files: List[NotionFile] = []
    for attachment in props.visuals:
        kind = classify_attachment(attachment.name)
        if kind == AttachmentKind.VIDEO:
            video_files.append(attachment)
        elif kind == AttachmentKind.IMAGE:
            image_files.append(attachment)

    media_type = MediaType.IMAGE
    images: Optional[List[str]] = None
    video_url: Optional[str] = None

    if video_files:
        media_type = MediaType.VIDEO
        video_url = video_files[0].resolved_url
    elif len(image_files) > 1:
        media_type = MediaType.CAROUSEL
        images = _resolved_urls(image_files) or None
    elif len(image_files) == 1:
        images = _resolved_urls(image_files) or None

    return MediaPost(
        id=page.id,
        type=media_type,
        date=_display_date(props.publish_date, page.created_time),
        title=props.subject or UNTITLED,
        images=images,
        video_url=video_url,
    )


class MediaClassifier:
    """
    Notion のメディア投稿データベースを取得し、MediaPost のリストに変換するサービス。

    - 設定（デフォルトの DB ID / トークン）はコンストラクタで明示的に受け取る
    - 呼び出し時に渡された値が設定より常に優先される
    - NotionClient はテストでモックを注入できる
    """

    def __init__(
        self,
        config: NotionConfig,
        client: Optional[NotionClient] = None,
    ) -> None:
        self.config = config
        self.client = client or NotionClient(config)

    def resolve_credentials(
        self,
        database_id: Optional[str] = None,
        token: Optional[str] = None,
    ) -> Tuple[str, str]:
        """
        呼び出し側の値 → 設定のデフォルト値の順で DB ID とトークンを決定する。
        """
        resolved_db = database_id or self.config.database_id
        resolved_token = token or self.config.api_key
        if not resolved_db or not resolved_token:
            raise MissingCredentialsError("Missing database ID or token")
        return resolved_db, resolved_token

    def _sorts(self) -> List[Dict[str, str]]:
        return [
            {
                "property": self.config.property_names.publish_date,
                "direction": "descending",
            }
        ]

    def fetch_posts(
        self,
        database_id: Optional[str] = None,
        token: Optional[str] = None,
    ) -> MediaFetchResult:
        """
        データベースの全レコードを Publish date 降順で取得し、MediaPost に変換する。

        Notion 側の失敗は例外にせず MediaFetchResult.error として返す。
        レコード変換中の予期しない例外はそのまま送出する。
        """
        resolved_db, resolved_token = self.resolve_credentials(database_id, token)

        try:
            raw_pages = self.client.query_database(
                resolved_db,
                resolved_token,
                sorts=self._sorts(),
            )
        except NotionAuthError as exc:
            logger.warning("Notion rejected the integration token: %s", exc)
            return MediaFetchResult(
                error=FetchError(
                    code=FetchErrorCode.UPSTREAM_AUTH,
                    message="Notion rejected the integration token.",
                )
            )
        except NotionConnectionError as exc:
            logger.error("Notion API is unreachable: %s", exc)
            return MediaFetchResult(
                error=FetchError(
                    code=FetchErrorCode.UPSTREAM_UNREACHABLE,
                    message="Notion API is unreachable.",
                )
            )
        except NotionClientError as exc:
            logger.error("Failed to query Notion database: %s", exc)
            return MediaFetchResult(
                error=FetchError(
                    code=FetchErrorCode.UPSTREAM_ERROR,
                    message="Failed to query Notion database.",
                )
            )

        posts = [self._map_raw_page(raw) for raw in raw_pages]
        if raw_pages:
            first_props: Dict[str, Any] = raw_pages[0].get("properties") or {}
            logger.debug("First record property names: %s", sorted(first_props))
        logger.info("Fetched %d media posts from Notion.", len(posts))

        return MediaFetchResult(posts=posts)

    def _map_raw_page(self, raw: Dict[str, Any]) -> MediaPost:
        page = NotionPage.model_validate(raw)
        return map_page_to_post(page, self.config.property_names)

    def get_media_posts(
        self,
        database_id: Optional[str] = None,
        token: Optional[str] = None,
    ) -> List[MediaPost]:
        """
        fetch_posts の簡易版。失敗時は MediaFetchError を送出する。
        """
        result = self.fetch_posts(database_id, token)
        if result.error is not None:
            raise MediaFetchError(result.error)
        return result.posts
