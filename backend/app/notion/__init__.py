# backend/app/notion/__init__.py

"""
Notion 連携用モジュール群。

主な責務:
- Notion API からメディア投稿データベースを読み取る
- ページオブジェクトのプロパティを型付きのモデルとして取り出す
"""
