from typing import Any, List

import httpx
from pydantic import ValidationError

from app.media.schemas import MediaPost

from .config import WidgetSettings, get_widget_settings


class WidgetFetchError(Exception):
    """ウィジェットから /api/media の呼び出しに失敗した場合の例外。"""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class MediaApiClient:
    """
    表示ウィジェットが使う /api/media への HTTP クライアント。
    """

    def __init__(self, settings: WidgetSettings | None = None) -> None:
        self._settings = settings or get_widget_settings()

    @property
    def base_url(self) -> str:
        return self._settings.api_base_url.rstrip("/")

    @property
    def timeout(self) -> int:
        return self._settings.timeout_seconds

    def fetch_posts(self, database_id: str, token: str) -> List[MediaPost]:
        """
        /api/media を呼び出し、MediaPost のリストを返す。

        :raises WidgetFetchError: 2xx 以外のレスポンス、接続エラー、想定外のボディの場合。
        """
        try:
            with httpx.Client(timeout=self.timeout) as client:
                response = client.get(
                    f"{self.base_url}/api/media",
                    params={"db": database_id, "token": token},
                    headers={"Cache-Control": "no-store"},
                )
        except httpx.RequestError as exc:
            raise WidgetFetchError(f"Failed to call media API: {exc}") from exc

        if response.status_code // 100 != 2:
            raise WidgetFetchError(
                "Failed to fetch posts",
                status_code=response.status_code,
            )

        try:
            data: Any = response.json()
        except ValueError as exc:
            raise WidgetFetchError("Media API returned a non-JSON body.") from exc

        if not isinstance(data, list):
            raise WidgetFetchError("Unexpected media API response: body is not a list.")

        try:
            return [MediaPost.model_validate(item) for item in data]
        except ValidationError as exc:
            raise WidgetFetchError("Media API returned a malformed post.") from exc
