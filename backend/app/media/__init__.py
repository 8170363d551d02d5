# backend/app/media/__init__.py

"""
メディアウィジェット用モジュール群。

主な責務:
- Notion のレコードを MediaPost（image / video / carousel）に正規化する
- /api/media エンドポイントを提供する
"""
