"""
Filter, sort and paginate pipeline shared by every list view.

Every list view runs the same four stages on every render:

1. filter   - lifecycle (upcoming / past / all), case-insensitive search over
              the collection's text fields, category equality
2. sort     - exactly one active sort key
3. paginate - fixed page size, page clamped into range
4. window   - compact page-number tokens for the pagination controls

The stages are pure: the same collection, query and `now` always give the
same page.
"""
import enum
import math
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from config.environment import page_size as default_page_size

ELLIPSIS = "…"

PageToken = Union[int, str]


class SortKey(str, enum.Enum):
    DATE = "date"
    DATE_DESC = "date-desc"
    PRICE_LOW_HIGH = "price-low-high"
    PRICE_HIGH_LOW = "price-high-low"
    CAPACITY = "capacity"
    DURATION = "duration"
    NAME_ASC = "name-asc"
    NAME_DESC = "name-desc"


class StatusFilter(str, enum.Enum):
    ALL = "all"
    UPCOMING = "upcoming"
    PAST = "past"


@dataclass(frozen=True)
class CollectionFields:
    """Which attributes a collection uses for its name, date and search."""
    name: str = "title"
    date: str = "date_time"
    search: Tuple[str, ...] = ("title", "description", "category")
    default_sort: SortKey = SortKey.DATE


ACTIVITY_FIELDS = CollectionFields()
PRODUCT_FIELDS = CollectionFields(
    name="name",
    date="created_at",
    search=("name", "description", "category"),
    default_sort=SortKey.DATE_DESC,
)


@dataclass(frozen=True)
class ListQuery:
    """
    The user's current list inputs. Changing any filter or the sort key goes
    back to page 1; only `with_page` moves between pages.
    """
    search: str = ""
    category: str = "all"
    status: StatusFilter = StatusFilter.ALL
    sort: Optional[SortKey] = None
    page: int = 1
    page_size: int = default_page_size

    def with_search(self, search: str) -> "ListQuery":
        return replace(self, search=search, page=1)

    def with_category(self, category: str) -> "ListQuery":
        return replace(self, category=category or "all", page=1)

    def with_status(self, status) -> "ListQuery":
        return replace(self, status=StatusFilter(status), page=1)

    def with_sort(self, sort) -> "ListQuery":
        # a single field holds the sort, so a new key always replaces the old one
        return replace(self, sort=SortKey(sort) if sort else None, page=1)

    def with_page(self, page: int) -> "ListQuery":
        return replace(self, page=max(int(page), 1))


@dataclass
class PageResult:
    items: List[Any]
    total_items: int
    total_pages: int
    page: int
    window: List[PageToken] = field(default_factory=list)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages


def _text(item, name: str) -> str:
    value = getattr(item, name, None)
    return value.lower() if isinstance(value, str) else ""


def _date(item, fields: CollectionFields) -> Optional[datetime]:
    return getattr(item, fields.date, None)


def derive_categories(items: Iterable[Any]) -> List[str]:
    """Sorted distinct categories of the unfiltered collection, after "all"."""
    found = {item.category for item in items if getattr(item, "category", None)}
    return ["all", *sorted(found)]


def lifecycle_counts(items: Sequence[Any], now: Optional[datetime] = None, fields: CollectionFields = ACTIVITY_FIELDS) -> dict:
    now = now or datetime.now()
    dates = [_date(item, fields) for item in items]
    upcoming = sum(1 for d in dates if d is not None and d > now)
    past = sum(1 for d in dates if d is not None and d <= now)
    return {"upcoming": upcoming, "past": past, "total": len(items)}


def filter_items(items: Iterable[Any], query: ListQuery, fields: CollectionFields = ACTIVITY_FIELDS, now: Optional[datetime] = None) -> List[Any]:
    now = now or datetime.now()
    result = list(items)

    if query.status == StatusFilter.UPCOMING:
        result = [i for i in result if _date(i, fields) is not None and _date(i, fields) > now]
    elif query.status == StatusFilter.PAST:
        result = [i for i in result if _date(i, fields) is not None and _date(i, fields) <= now]

    term = query.search.strip().lower()
    if term:
        result = [i for i in result if any(term in _text(i, name) for name in fields.search)]

    if query.category and query.category != "all":
        wanted = query.category.lower()
        result = [i for i in result if _text(i, "category") == wanted]

    return result


def sort_items(items: Iterable[Any], sort: Optional[SortKey], fields: CollectionFields = ACTIVITY_FIELDS) -> List[Any]:
    sort = SortKey(sort) if sort else fields.default_sort
    items = list(items)

    def by_date(item):
        return _date(item, fields) or datetime.min

    if sort == SortKey.DATE:
        return sorted(items, key=by_date)
    if sort == SortKey.DATE_DESC:
        return sorted(items, key=by_date, reverse=True)
    if sort == SortKey.PRICE_LOW_HIGH:
        return sorted(items, key=lambda i: i.price)
    if sort == SortKey.PRICE_HIGH_LOW:
        return sorted(items, key=lambda i: i.price, reverse=True)
    if sort == SortKey.CAPACITY:
        return sorted(items, key=lambda i: getattr(i, "current_capacity", 0))
    if sort == SortKey.DURATION:
        return sorted(items, key=lambda i: getattr(i, "duration_minutes", 0))
    if sort == SortKey.NAME_ASC:
        return sorted(items, key=lambda i: _text(i, fields.name))
    return sorted(items, key=lambda i: _text(i, fields.name), reverse=True)


def page_window(total_pages: int, current_page: int) -> List[PageToken]:
    """
    Page tokens for compact pagination controls.

    >>> page_window(10, 5)
    [1, '…', 4, 5, 6, '…', 10]
    """
    if total_pages <= 5:
        return list(range(1, total_pages + 1))
    if current_page <= 3:
        return [1, 2, 3, 4, ELLIPSIS, total_pages]
    if current_page >= total_pages - 2:
        return [1, ELLIPSIS, *range(total_pages - 3, total_pages + 1)]
    return [1, ELLIPSIS, current_page - 1, current_page, current_page + 1, ELLIPSIS, total_pages]


def paginate(items: Sequence[Any], page: int, size: int) -> PageResult:
    total_pages = math.ceil(len(items) / size) if size > 0 else 0
    page = min(max(page, 1), max(total_pages, 1))
    start = (page - 1) * size
    return PageResult(
        items=list(items[start:start + size]),
        total_items=len(items),
        total_pages=total_pages,
        page=page,
        window=page_window(total_pages, page),
    )


def run_pipeline(items: Iterable[Any], query: ListQuery, fields: CollectionFields = ACTIVITY_FIELDS, now: Optional[datetime] = None) -> PageResult:
    filtered = filter_items(items, query, fields, now)
    ordered = sort_items(filtered, query.sort, fields)
    return paginate(ordered, query.page, query.page_size)
