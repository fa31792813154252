from datetime import datetime
from typing import Any, Iterable, Optional

from core.pipeline import ACTIVITY_FIELDS, CollectionFields, ListQuery, PageResult, run_pipeline


class ListInputs:
    """Search, category, status, sort and page inputs of a list page."""

    query: ListQuery

    def set_search(self, search: str):
        self.query = self.query.with_search(search)

    def set_category(self, category: str):
        self.query = self.query.with_category(category)

    def set_status(self, status):
        self.query = self.query.with_status(status)

    def set_sort(self, sort):
        self.query = self.query.with_sort(sort)

    def go_to_page(self, page: int):
        self.query = self.query.with_page(page)

    def run_query(self, items: Iterable[Any], fields: CollectionFields = ACTIVITY_FIELDS, now: Optional[datetime] = None) -> PageResult:
        page = run_pipeline(items, self.query, fields, now)
        # keep the stored page in range when the collection shrinks
        if page.page != self.query.page:
            self.query = self.query.with_page(page.page)
        return page
