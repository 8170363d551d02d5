# backend/app/media/router.py
"""
メディアウィジェット用の FastAPI ルーター定義。

- GET /api/media?db=<database_id>&token=<access_token>
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.notion.config import get_notion_config

from .classifier import MediaClassifier, MissingCredentialsError
from .schemas import MediaErrorResponse, MediaPost

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["media"])

NO_STORE_HEADERS = {"Cache-Control": "no-store"}

MISSING_CREDENTIALS_MESSAGE = "Missing database ID or token"
UPSTREAM_FAILURE_MESSAGE = "Failed to fetch media posts from Notion"
UNEXPECTED_FAILURE_MESSAGE = "Failed to fetch media posts"


# Dependency provider
# - テスト時に FastAPI dependency_overrides で差し替え可能にする
def get_media_classifier() -> MediaClassifier:
    return MediaClassifier(get_notion_config())


def _error_response(
    status_code: int,
    message: str,
    code: Optional[str] = None,
) -> JSONResponse:
    body = MediaErrorResponse(error=message, code=code)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=NO_STORE_HEADERS,
    )


@router.get(
    "/media",
    response_model=List[MediaPost],
    responses={
        400: {"model": MediaErrorResponse},
        500: {"model": MediaErrorResponse},
        502: {"model": MediaErrorResponse},
    },
    summary="Notion データベースのメディア投稿一覧",
    description=(
        "Notion データベースを Publish date 降順で取得し、"
        "image / video / carousel に分類した MediaPost の配列を返す。"
        "db / token を省略した場合は環境変数のデフォルト値を使う。"
    ),
)
def list_media_posts(
    db: Optional[str] = Query(None, description="Notion データベース ID"),
    token: Optional[str] = Query(None, description="Notion インテグレーショントークン"),
    classifier: MediaClassifier = Depends(get_media_classifier),
) -> JSONResponse:
    """
    メディア投稿一覧を返すエンドポイント。

    - 正常系: MediaPost の配列（0 件なら空配列）。キャッシュ禁止。
    - DB ID / トークン不足: 400
    - Notion 側の失敗: 502（空配列とは区別する）
    - 予期しない例外: 500（詳細はログ側で確認）
    """
    try:
        result = classifier.fetch_posts(database_id=db, token=token)
    except MissingCredentialsError:
        return _error_response(status.HTTP_400_BAD_REQUEST, MISSING_CREDENTIALS_MESSAGE)
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error while building media posts.")
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            UNEXPECTED_FAILURE_MESSAGE,
        )

    if result.error is not None:
        return _error_response(
            status.HTTP_502_BAD_GATEWAY,
            UPSTREAM_FAILURE_MESSAGE,
            code=result.error.code.value,
        )

    content = jsonable_encoder(result.posts, by_alias=True, exclude_none=True)
    return JSONResponse(content=content, headers=NO_STORE_HEADERS)
