"""Shared schema building blocks."""

from collections.abc import Callable
from typing import Any, Generic, TypeVar

from pydantic import BaseModel

from vidtube.services.pagination import PageResult

T = TypeVar("T")


class PageOut(BaseModel, Generic[T]):
    """One page of a listing."""

    items: list[T]
    total: int
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool

    @classmethod
    def from_page(cls, page: PageResult, convert: Callable[[Any], T]) -> "PageOut[T]":
        page = page.map(convert)
        return cls(
            items=page.items,
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
            has_next=page.has_next,
            has_prev=page.has_prev,
        )
