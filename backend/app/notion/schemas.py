# backend/app/notion/schemas.py

"""
Notion のページオブジェクトを内部で扱うためのスキーマ定義。

Notion のプロパティは実質的に動的型付けの dict なので、
メディア投稿で使うプロパティだけを型付きフィールドとして取り出し、
それ以外は extra にそのまま残す。
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError

from .config import NotionPropertyNames


class NotionFileLink(BaseModel):
    """files プロパティ内の file / external オブジェクト。"""

    url: Optional[str] = None


class NotionFile(BaseModel):
    """
    files プロパティの 1 要素。

    アップロードされたファイルは file.url、外部リンクは external.url に URL が入る。
    """

    name: Optional[str] = None
    type: Optional[str] = Field(None, description="file / external")
    file: Optional[NotionFileLink] = None
    external: Optional[NotionFileLink] = None

    @property
    def resolved_url(self) -> Optional[str]:
        """アップロード URL → 外部リンク URL の順で解決する。"""
        for link in (self.file, self.external):
            if link is not None and link.url:
                return link.url
        return None


class NotionPage(BaseModel):
    """databases/query の results 1 件分。"""

    id: str
    created_time: Optional[str] = None
    properties: Dict[str, Any] = Field(default_factory=dict)


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _extract_title_text(prop: Dict[str, Any]) -> Optional[str]:
    """
    title プロパティの先頭セグメントからプレーンテキストを抽出する。
    """
    if prop.get("type", "title") != "title":
        return None

    segments = prop.get("title")
    if not isinstance(segments, list) or not segments:
        return None

    first = segments[0]
    if isinstance(first, dict):
        text = first.get("plain_text")
        if isinstance(text, str) and text:
            return text
    return None


def _extract_date_start(prop: Dict[str, Any]) -> Optional[str]:
    """
    date プロパティから start を抽出する。
    """
    date = prop.get("date")
    if not isinstance(date, dict):
        return None

    start = date.get("start")
    if isinstance(start, str) and start:
        return start
    return None


def _extract_files(prop: Dict[str, Any]) -> List[NotionFile]:
    """
    files プロパティから NotionFile のリストを抽出する。
    辞書でない要素や形式が崩れた要素は読み飛ばす。
    """
    files = prop.get("files")
    if not isinstance(files, list):
        return []

    parsed: List[NotionFile] = []
    for item in files:
        if not isinstance(item, dict):
            continue
        try:
            parsed.append(NotionFile.model_validate(item))
        except ValidationError:
            continue
    return parsed


class MediaPageProperties(BaseModel):
    """
    メディア投稿データベースの 1 ページ分のプロパティ。

    - subject: タイトル（title 型）
    - publish_date: 公開日（date 型の start）
    - visuals: 添付ファイル（files 型）
    - extra: 上記以外のプロパティ
    """

    subject: Optional[str] = None
    publish_date: Optional[str] = None
    visuals: List[NotionFile] = Field(default_factory=list)
    extra: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_page(
        cls,
        page: NotionPage,
        names: Optional[NotionPropertyNames] = None,
    ) -> "MediaPageProperties":
        names = names or NotionPropertyNames()
        properties = page.properties or {}

        known = {names.title, names.publish_date, names.files}
        extra = {key: value for key, value in properties.items() if key not in known}

        return cls(
            subject=_extract_title_text(_as_dict(properties.get(names.title))),
            publish_date=_extract_date_start(_as_dict(properties.get(names.publish_date))),
            visuals=_extract_files(_as_dict(properties.get(names.files))),
            extra=extra,
        )
