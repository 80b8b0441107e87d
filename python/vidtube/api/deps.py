"""FastAPI dependencies for route handlers.

Common dependencies like database sessions, the asset manager and page windows.
"""

from typing import Annotated

from fastapi import Query, Request

from vidtube.db.session import get_db
from vidtube.services.assets import MediaAssetManager
from vidtube.services.pagination import PageRequest
from vidtube.storage import StorageClientBase

__all__ = ["get_db", "get_storage_client", "get_asset_manager", "get_page_request"]


def get_storage_client(request: Request) -> StorageClientBase:
    """Get the process-wide storage client from app state.

    The client is built once in create_app() and never reassigned.
    """
    return request.app.state.storage_client


def get_asset_manager(request: Request) -> MediaAssetManager:
    return MediaAssetManager(get_storage_client(request))


def get_page_request(
    page: Annotated[str | None, Query(description="1-based page number")] = None,
    limit: Annotated[str | None, Query(description="Page size (capped at MAX_PAGE_SIZE)")] = None,
) -> PageRequest:
    return PageRequest.create(page, limit)
