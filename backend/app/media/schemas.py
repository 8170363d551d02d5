# backend/app/media/schemas.py

"""
/api/media 用の Pydantic スキーマ定義。

- MediaPost: グリッド / ライトボックスが表示する 1 投稿
- MediaFetchResult: 取得結果（成功 or 失敗理由）を明示的に表す
- MediaErrorResponse: エラー時のレスポンスボディ
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class MediaType(str, Enum):
    """投稿の表示種別。"""

    IMAGE = "image"
    VIDEO = "video"
    CAROUSEL = "carousel"


class MediaPost(BaseModel):
    """
    Notion の 1 レコードを表示用に正規化したモデル。

    type は添付ファイルから導出される値で、独立に保持するものではない。
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Notion ページ ID")
    type: MediaType = Field(..., description="image / video / carousel")
    date: str = Field(..., description="表示用の短い日付（例: 'Mar 3'）")
    title: str = Field("Untitled", description="Subject プロパティのテキスト")
    images: Optional[List[str]] = Field(
        None,
        description="画像 URL の配列（image / carousel のときのみ）",
    )
    video_url: Optional[str] = Field(
        None,
        alias="videoUrl",
        description="動画 URL（video のときのみ）",
    )

    @property
    def has_media(self) -> bool:
        """表示可能な URL を 1 つ以上持っているか。"""
        if self.type == MediaType.VIDEO:
            return bool(self.video_url)
        return bool(self.images)


class FetchErrorCode(str, Enum):
    """上流（Notion）取得失敗の理由コード。"""

    UPSTREAM_AUTH = "upstream_auth"
    UPSTREAM_ERROR = "upstream_error"
    UPSTREAM_UNREACHABLE = "upstream_unreachable"


class FetchError(BaseModel):
    """取得失敗の理由。message は利用者に見せてよい固定文言のみ。"""

    code: FetchErrorCode
    message: str


class MediaFetchResult(BaseModel):
    """
    MediaClassifier.fetch_posts の戻り値。

    「データが 0 件」と「取得に失敗した」を区別するため、
    失敗時は posts を空にせず error を設定する。
    """

    posts: List[MediaPost] = Field(default_factory=list)
    error: Optional[FetchError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class MediaErrorResponse(BaseModel):
    """エラー時のレスポンスボディ。形は常に {error: string}（+ 任意の code）。"""

    error: str
    code: Optional[str] = None
