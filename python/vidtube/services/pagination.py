"""Paginated listing helpers.

Window math:
    skip     = (page - 1) * limit
    has_next = page * limit < total
    has_prev = page > 1

The record id is always appended to the ORDER BY, in the same direction as
the primary key of the sort, so rows with equal sort values page
deterministically. Ids are time-prefixed, so this also matches insertion
order for created_at ties.
"""

import math
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.orm import Session

from vidtube.config import get_settings
from vidtube.errors import ApiErrorCode, NotFoundError, ValidationError

T = TypeVar("T")
U = TypeVar("U")

SORT_ASC = "asc"
SORT_DESC = "desc"

# Largest OFFSET a database driver will bind (signed 64-bit).
MAX_OFFSET = 2**63 - 1


def _parse_positive_int(value: int | str | None, name: str, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(
            ApiErrorCode.E_INVALID_REQUEST, f"{name} must be an integer"
        ) from None
    return max(parsed, 1)


@dataclass(frozen=True)
class PageRequest:
    """A validated page/limit window."""

    page: int
    limit: int

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def create(
        cls,
        page: int | str | None = None,
        limit: int | str | None = None,
        *,
        max_limit: int | None = None,
        default_limit: int | None = None,
    ) -> "PageRequest":
        """Build a window from raw query values.

        Both values are clamped to at least 1 and limit is capped at max_limit.
        page is capped so the resulting offset stays bindable; such a page is
        simply past the end of any listing.

        Raises:
            ValidationError: If a value is present but not an integer.
        """
        if max_limit is None or default_limit is None:
            settings = get_settings()
            max_limit = max_limit or settings.max_page_size
            default_limit = default_limit or settings.default_page_size

        limit_value = min(_parse_positive_int(limit, "limit", default_limit), max_limit)
        page_value = min(_parse_positive_int(page, "page", 1), MAX_OFFSET // limit_value + 1)
        return cls(page=page_value, limit=limit_value)


@dataclass(frozen=True)
class SortSpec:
    column: Any
    descending: bool

    @property
    def clause(self) -> ColumnElement:
        return self.column.desc() if self.descending else self.column.asc()


def resolve_sort(
    sort_by: str | None,
    sort_type: str | None,
    allowed: Mapping[str, Any],
    *,
    default_field: str,
    default_type: str = SORT_DESC,
) -> SortSpec:
    """Resolve a client sort request against an allow-list of columns.

    Raises:
        ValidationError: If sort_by is not allowed or sort_type is not asc/desc.
    """
    field_name = sort_by or default_field
    if field_name not in allowed:
        raise ValidationError(
            ApiErrorCode.E_INVALID_SORT,
            f"Invalid sort field. Allowed: {', '.join(sorted(allowed))}",
        )

    direction = (sort_type or default_type).lower()
    if direction not in (SORT_ASC, SORT_DESC):
        raise ValidationError(ApiErrorCode.E_INVALID_SORT, "sortType must be 'asc' or 'desc'")

    return SortSpec(column=allowed[field_name], descending=direction == SORT_DESC)


@dataclass
class PageResult(Generic[T]):
    """One page of a listing plus the totals needed to navigate it."""

    items: list[T]
    total: int
    page: int
    limit: int
    has_next: bool = field(init=False)
    has_prev: bool = field(init=False)

    def __post_init__(self) -> None:
        self.has_next = self.page * self.limit < self.total
        self.has_prev = self.page > 1

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def map(self, fn: Callable[[T], U]) -> "PageResult[U]":
        return PageResult(
            items=[fn(item) for item in self.items],
            total=self.total,
            page=self.page,
            limit=self.limit,
        )


def count_rows(db: Session, stmt: Select) -> int:
    """Count the rows a statement matches, ignoring ordering and windows."""
    subquery = stmt.order_by(None).limit(None).offset(None).subquery()
    return db.execute(select(func.count()).select_from(subquery)).scalar_one()


def paginate(
    db: Session,
    stmt: Select,
    page_request: PageRequest,
    order_by: SortSpec | Sequence[SortSpec],
    tie_breaker: Any,
) -> PageResult:
    """Execute stmt for one page window.

    Statements selecting a single entity yield entity items; statements that
    select an entity with enrichment columns yield Row items.

    Args:
        db: Database session.
        stmt: Filtered select without ORDER BY/LIMIT/OFFSET.
        page_request: The window to fetch.
        order_by: Primary sort key(s).
        tie_breaker: Unique column appended as the final sort key.
    """
    sorts = [order_by] if isinstance(order_by, SortSpec) else list(order_by)
    tie = SortSpec(column=tie_breaker, descending=sorts[0].descending if sorts else False)

    total = count_rows(db, stmt)

    windowed = (
        stmt.order_by(*(s.clause for s in sorts), tie.clause)
        .offset(page_request.skip)
        .limit(page_request.limit)
    )
    result = db.execute(windowed)
    single_entity = len(stmt.column_descriptions) == 1
    items = list(result.scalars().all()) if single_entity else list(result.all())

    return PageResult(items=items, total=total, page=page_request.page, limit=page_request.limit)


def require_non_empty(page: PageResult[T], message: str) -> PageResult[T]:
    """Raise NotFoundError when the listing matched no records at all."""
    if page.total == 0:
        raise NotFoundError(ApiErrorCode.E_EMPTY_RESULT, message)
    return page
