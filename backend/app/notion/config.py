# backend/app/notion/config.py

"""
Notion 連携に必要な設定値をまとめるモジュール。

データベース ID とインテグレーショントークンは「デフォルト値」であり、
呼び出し側（/api/media のクエリパラメータなど）から渡された値が常に優先される。
"""

from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from app.utils.config import get_env, get_env_int

DEFAULT_API_BASE_URL = "https://api.notion.com/v1"
DEFAULT_API_VERSION = "2022-06-28"
DEFAULT_TIMEOUT_SECONDS = 10


@dataclass(frozen=True)
class NotionPropertyNames:
    """メディア投稿データベースで参照するプロパティ名。"""

    title: str = "Subject"
    publish_date: str = "Publish date"
    files: str = "Visuals"


@dataclass(frozen=True)
class NotionConfig:
    """Notion API 用の設定値コンテナ。"""

    api_key: Optional[str] = None
    database_id: Optional[str] = None
    api_base_url: str = DEFAULT_API_BASE_URL
    api_version: str = DEFAULT_API_VERSION
    timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    property_names: NotionPropertyNames = field(default_factory=NotionPropertyNames)


@lru_cache()
def get_notion_config() -> NotionConfig:
    """
    環境変数から Notion 設定を読み込む。

    すべて任意:
      - NOTION_INTEGRATION_TOKEN (旧名 NOTION_INTEGERATION_TOKEN も受け付ける)
      - NOTION_DATABASE_ID
      - NOTION_API_BASE_URL   (デフォルト: https://api.notion.com/v1)
      - NOTION_API_VERSION    (デフォルト: 2022-06-28)
      - NOTION_TIMEOUT_SECONDS (デフォルト: 10)
      - NOTION_TITLE_PROPERTY / NOTION_DATE_PROPERTY / NOTION_FILES_PROPERTY
    """
    api_key = get_env("NOTION_INTEGRATION_TOKEN", required=False) or get_env(
        "NOTION_INTEGERATION_TOKEN", required=False
    )
    database_id = get_env("NOTION_DATABASE_ID", required=False)

    defaults = NotionPropertyNames()
    property_names = NotionPropertyNames(
        title=get_env("NOTION_TITLE_PROPERTY", default=defaults.title, required=False),
        publish_date=get_env(
            "NOTION_DATE_PROPERTY",
            default=defaults.publish_date,
            required=False,
        ),
        files=get_env("NOTION_FILES_PROPERTY", default=defaults.files, required=False),
    )

    return NotionConfig(
        api_key=api_key,
        database_id=database_id,
        api_base_url=get_env(
            "NOTION_API_BASE_URL",
            default=DEFAULT_API_BASE_URL,
            required=False,
        ),
        api_version=get_env(
            "NOTION_API_VERSION",
            default=DEFAULT_API_VERSION,
            required=False,
        ),
        timeout_seconds=get_env_int("NOTION_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        property_names=property_names,
    )
