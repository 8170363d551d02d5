# backend/app/main.py

"""
バックエンドアプリケーションのエントリーポイント。

主な責務:
- /api/media エンドポイントを公開する
- /health エンドポイントを公開する
"""

import logging

from fastapi import FastAPI

from app.media.router import router as media_router
from app.utils.config import get_env


def _configure_logging() -> None:
    """
    LOG_LEVEL 環境変数（デフォルト INFO）でルートロガーを設定する。
    """
    level_name = get_env("LOG_LEVEL", default="INFO", required=False)
    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app() -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    - メディア一覧エンドポイント (/api/media)
    - ヘルスチェックエンドポイント (/health)
    """
    _configure_logging()

    app = FastAPI(title="Notion Media Widget Backend")

    # ルーター登録
    app.include_router(media_router)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        モニタリングや動作確認用。
        """
        return {"status": "ok"}

    return app


# uvicorn 実行時のエントリーポイント
app = create_app()
