# backend/app/widget/state.py

"""
表示ウィジェットの状態管理モジュール。

- NotionWidget: 取得状態（idle / loading / loaded / error）と選択中の投稿
- CarouselState: グリッド上のカルーセルごとの表示中インデックス
- LightboxState: ライトボックス内のインデックスと動画の再生状態
- GridLayout: 3 列グリッドのタイル（不足分はプレースホルダ）

描画は行わない。すべての遷移はユーザー操作か取得完了で起き、重ならない。
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, List, Optional, Protocol

from app.media.schemas import MediaPost, MediaType

logger = logging.getLogger(__name__)

MISSING_PARAMS_MESSAGE = "Missing database ID or token in the URL."
NO_POSTS_MESSAGE = "No posts found in Notion database."
CONNECTION_FAILED_MESSAGE = (
    "Failed to connect to Notion. Please check your API configuration."
)


class PostSource(Protocol):
    def fetch_posts(self, database_id: str, token: str) -> List[MediaPost]:
        ...


class WidgetStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


class AspectRatio(str, Enum):
    SQUARE = "1:1"
    PORTRAIT = "4:5"


def _wrap(index: int, count: int) -> int:
    if count <= 0:
        return 0
    return index % count


class CarouselState:
    """
    グリッド上のカルーセル投稿ごとに、表示中の画像インデックスを保持する。

    インデックスは前後どちらの方向にも画像枚数で循環する。
    """

    def __init__(self) -> None:
        self._indexes: Dict[str, int] = {}

    def current(self, post_id: str) -> int:
        return self._indexes.get(post_id, 0)

    def next(self, post_id: str, image_count: int) -> int:
        index = _wrap(self.current(post_id) + 1, image_count)
        self._indexes[post_id] = index
        return index

    def prev(self, post_id: str, image_count: int) -> int:
        index = _wrap(self.current(post_id) - 1, image_count)
        self._indexes[post_id] = index
        return index

    def reset(self) -> None:
        self._indexes.clear()


class LightboxState:
    """
    ライトボックスで開いている 1 投稿の表示状態。

    開くたびに新しいインスタンスを作るので、インデックスは常に 0 から始まる。
    """

    def __init__(self, post: MediaPost) -> None:
        self.post = post
        self.index = 0
        self.is_video_playing = False

    @property
    def images(self) -> List[str]:
        if self.post.type == MediaType.CAROUSEL and self.post.images:
            return list(self.post.images)
        if self.post.images:
            return [self.post.images[0]]
        return []

    @property
    def current_image(self) -> Optional[str]:
        images = self.images
        if not images:
            return None
        return images[self.index]

    @property
    def show_navigation(self) -> bool:
        return self.post.type == MediaType.CAROUSEL and len(self.images) > 1

    @property
    def counter_label(self) -> str:
        """'2 / 5 • Mar 3' 形式のカウンター表示。"""
        return f"{self.index + 1} / {len(self.images)} • {self.post.date}"

    def next_image(self) -> int:
        self.index = _wrap(self.index + 1, len(self.images))
        return self.index

    def previous_image(self) -> int:
        self.index = _wrap(self.index - 1, len(self.images))
        return self.index

    def toggle_video(self) -> bool:
        """動画投稿のみ再生 / 一時停止を切り替える。"""
        if self.post.type != MediaType.VIDEO or not self.post.video_url:
            return False
        self.is_video_playing = not self.is_video_playing
        return self.is_video_playing

    def close(self) -> None:
        # 閉じるときは動画を止める
        self.is_video_playing = False


class GridLayout:
    """
    3 列のメディアグリッド。投稿が min_tiles に満たない場合は空タイルで埋める。
    """

    def __init__(
        self,
        *,
        columns: int = 3,
        min_tiles: int = 12,
        aspect_ratio: AspectRatio = AspectRatio.PORTRAIT,
    ) -> None:
        self.columns = columns
        self.min_tiles = min_tiles
        self.aspect_ratio = aspect_ratio

    def placeholder_count(self, posts: List[MediaPost]) -> int:
        return max(0, self.min_tiles - len(posts))

    def tiles(self, posts: List[MediaPost]) -> List[Optional[MediaPost]]:
        """投稿タイルの後ろにプレースホルダ（None）を並べたリスト。"""
        placeholders: List[Optional[MediaPost]] = [None] * self.placeholder_count(posts)
        return list(posts) + placeholders


class NotionWidget:
    """
    /api/media を呼び出してメディアグリッドを表示するウィジェットの状態。

    - mount(): 初回表示時の取得
    - reload(): 再取得（loading 中は無効）
    - select_post() / close_lightbox(): ライトボックスの開閉
    """

    def __init__(
        self,
        source: PostSource,
        *,
        database_id: Optional[str] = None,
        token: Optional[str] = None,
        layout: Optional[GridLayout] = None,
    ) -> None:
        self._source = source
        self.database_id = database_id
        self.token = token
        self.layout = layout or GridLayout()

        self.status = WidgetStatus.IDLE
        self.error_message: Optional[str] = None
        self.carousel = CarouselState()
        self.lightbox: Optional[LightboxState] = None
        self._posts: List[MediaPost] = []

    @property
    def posts(self) -> List[MediaPost]:
        if self.status != WidgetStatus.LOADED:
            return []
        return list(self._posts)

    @property
    def is_loading(self) -> bool:
        return self.status == WidgetStatus.LOADING

    @property
    def reload_enabled(self) -> bool:
        return not self.is_loading

    @property
    def selected_post(self) -> Optional[MediaPost]:
        return self.lightbox.post if self.lightbox else None

    def mount(self) -> WidgetStatus:
        return self._load()

    def reload(self) -> bool:
        """
        再取得を行う。loading 中は何もせず False を返す。
        """
        if not self.reload_enabled:
            return False
        self._load()
        return True

    def _load(self) -> WidgetStatus:
        self.status = WidgetStatus.LOADING
        self.error_message = None

        if not self.database_id or not self.token:
            return self._fail(MISSING_PARAMS_MESSAGE)

        try:
            posts = self._source.fetch_posts(self.database_id, self.token)
        except Exception as exc:  # noqa: BLE001
            # 利用者には固定文言のみを見せ、詳細はログに残す
            logger.error("Error fetching posts: %s", exc)
            return self._fail(CONNECTION_FAILED_MESSAGE)

        if not posts:
            return self._fail(NO_POSTS_MESSAGE)

        self._posts = list(posts)
        self.carousel.reset()
        self.status = WidgetStatus.LOADED
        return self.status

    def _fail(self, message: str) -> WidgetStatus:
        self._posts = []
        self.lightbox = None
        self.error_message = message
        self.status = WidgetStatus.ERROR
        return self.status

    def tiles(self) -> List[Optional[MediaPost]]:
        return self.layout.tiles(self.posts)

    def next_carousel_image(self, post: MediaPost) -> int:
        return self.carousel.next(post.id, len(post.images or []))

    def previous_carousel_image(self, post: MediaPost) -> int:
        return self.carousel.prev(post.id, len(post.images or []))

    def select_post(self, post: MediaPost) -> bool:
        """
        投稿をライトボックスで開く。表示できるメディアがない投稿は開かない。
        """
        if not post.has_media:
            return False
        if self.lightbox is not None:
            self.lightbox.close()
        self.lightbox = LightboxState(post)
        return True

    def close_lightbox(self) -> None:
        if self.lightbox is not None:
            self.lightbox.close()
        self.lightbox = None
