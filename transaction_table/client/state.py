from dataclasses import dataclass, replace
from typing import Optional
from urllib.parse import parse_qs, urlencode, urlsplit

from transaction_table.schemas import (
    DEFAULT_LIMIT,
    DEFAULT_PAGE,
    DEFAULT_SORT_DIRECTION,
    DEFAULT_SORT_FIELD,
    positive_int_or_default,
)

# First click on a column that is not the active sort
DEFAULT_TOGGLE_DIRECTION = "asc"

ALL_TYPES = "all"


@dataclass(frozen=True)
class TableState:
    """
    Query state of the table. Every field round-trips through the URL query
    string so a view can be bookmarked or shared.
    """
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    q: str = ""
    type: str = ""
    sort_field: str = DEFAULT_SORT_FIELD
    sort_direction: str = DEFAULT_SORT_DIRECTION

    @classmethod
    def from_query_string(cls, query: str) -> "TableState":
        values = parse_qs(query.lstrip("?"), keep_blank_values=True)

        def first(name: str) -> Optional[str]:
            found = values.get(name)
            return found[0] if found else None

        direction = (first("sortDirection") or "").lower()
        return cls(
            page=positive_int_or_default(first("page"), DEFAULT_PAGE),
            limit=positive_int_or_default(first("limit"), DEFAULT_LIMIT),
            q=first("q") or "",
            type=first("type") or "",
            sort_field=first("sortField") or DEFAULT_SORT_FIELD,
            sort_direction=direction if direction in ("asc", "desc") else DEFAULT_SORT_DIRECTION,
        )

    @classmethod
    def from_url(cls, url: str) -> "TableState":
        return cls.from_query_string(urlsplit(url).query)

    def to_query_string(self) -> str:
        return urlencode([
            ("page", self.page),
            ("limit", self.limit),
            ("q", self.q),
            ("type", self.type),
            ("sortField", self.sort_field),
            ("sortDirection", self.sort_direction),
        ])

    def with_page(self, page: int) -> "TableState":
        return replace(self, page=max(1, page))

    # Every change below resets to the first page: the old page number
    # means nothing under a new filter, sort or page size.

    def with_limit(self, limit: int) -> "TableState":
        return replace(self, limit=max(1, limit), page=1)

    def with_search(self, q: str) -> "TableState":
        return replace(self, q=q, page=1)

    def with_type(self, txn_type: str) -> "TableState":
        return replace(self, type="" if txn_type == ALL_TYPES else txn_type, page=1)

    def toggle_sort(self, field: str) -> "TableState":
        if field == self.sort_field:
            direction = "asc" if self.sort_direction == "desc" else "desc"
            return replace(self, sort_direction=direction, page=1)
        return replace(self, sort_field=field, sort_direction=DEFAULT_TOGGLE_DIRECTION, page=1)
