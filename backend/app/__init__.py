# backend/app/__init__.py
"""
Notion media widget backend application package.

This package contains:
- main: FastAPI application entrypoint
- notion: Notion API client and page models
- media: record classification and the /api/media endpoint
- widget: display widget state (load/reload, grid carousel, lightbox)
"""
