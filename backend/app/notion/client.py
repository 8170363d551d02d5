# backend/app/notion/client.py

"""
Notion API との通信を担当するクライアントモジュール。
"""

from typing import Any, Dict, List, Optional

import httpx

from .config import NotionConfig, get_notion_config

# Notion の databases/query が 1 リクエストで返せる最大件数
MAX_PAGE_SIZE = 100


class NotionClientError(RuntimeError):
    """Notion クライアント全般の例外。"""


class NotionAuthError(NotionClientError):
    """認証・権限関連のエラー。"""


class NotionConnectionError(NotionClientError):
    """接続エラー・タイムアウト時の例外。"""


class NotionAPIError(NotionClientError):
    """その他 Notion API 呼び出し時のエラー。"""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotionClient:
    """
    Notion API の薄いラッパークライアント。

    トークンはリクエストごとに呼び出し側から渡す。
    （ウィジェットの利用者ごとに異なるインテグレーションを使えるようにするため）
    """

    def __init__(self, config: Optional[NotionConfig] = None) -> None:
        self.config = config or get_notion_config()

    def _build_headers(self, token: str) -> Dict[str, str]:
        """
        Notion API 呼び出しに必要なヘッダーを構築。
        """
        return {
            "Authorization": f"Bearer {token}",
            "Notion-Version": self.config.api_version,
            "Content-Type": "application/json",
        }

    def _raise_for_status(self, response: httpx.Response) -> None:
        """
        HTTP レスポンスコードに応じて適切な例外を投げる。
        """
        if response.status_code == 401:
            raise NotionAuthError("Unauthorized. Check the Notion integration token.")
        if response.status_code == 403:
            raise NotionAuthError("Forbidden. Check Notion integration permissions.")
        if response.status_code >= 400:
            raise NotionAPIError(
                f"Notion API error: {response.status_code} {response.text}",
                status_code=response.status_code,
            )

    def query_database(
        self,
        database_id: str,
        token: str,
        *,
        sorts: Optional[List[Dict[str, str]]] = None,
    ) -> List[Dict[str, Any]]:
        """
        データベースの全レコードを取得する。

        has_more / next_cursor をたどって全ページ分を結合し、
        Notion API の生のページオブジェクトのリストとして返す。
        上位レイヤー（media/classifier.py）で MediaPost に変換する。
        """
        url = f"{self.config.api_base_url}/databases/{database_id}/query"

        payload: Dict[str, Any] = {"page_size": MAX_PAGE_SIZE}
        if sorts:
            payload["sorts"] = sorts

        results: List[Dict[str, Any]] = []
        while True:
            try:
                response = httpx.post(
                    url,
                    headers=self._build_headers(token),
                    json=payload,
                    timeout=self.config.timeout_seconds,
                )
            except httpx.RequestError as exc:
                raise NotionConnectionError(f"Failed to call Notion API: {exc}") from exc

            self._raise_for_status(response)

            try:
                data = response.json()
            except ValueError as exc:
                raise NotionAPIError("Notion API returned a non-JSON body.") from exc

            if not isinstance(data, dict):
                raise NotionAPIError(
                    "Unexpected Notion API response format: body is not an object."
                )

            page_results = data.get("results", [])
            if not isinstance(page_results, list):
                raise NotionAPIError(
                    "Unexpected Notion API response format: 'results' is not a list."
                )
            results.extend(page_results)

            next_cursor = data.get("next_cursor")
            if not data.get("has_more") or not next_cursor:
                break
            payload["start_cursor"] = next_cursor

        return results
