import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx

from transaction_table.client.pagination import PageControls
from transaction_table.client.state import TableState

logger = logging.getLogger(__name__)

SEARCH_DEBOUNCE_SECONDS = 0.5


class ViewStatus(str, enum.Enum):
    LOADING = "loading"
    LOADED = "loaded"
    EMPTY = "empty"
    ERROR = "error"


@dataclass(frozen=True)
class TableView:
    status: ViewStatus
    items: List[Dict[str, Any]] = field(default_factory=list)
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def controls(self) -> Optional[PageControls]:
        if self.metadata is None:
            return None
        return PageControls.from_metadata(self.metadata)


METADATA_KEYS = ("total", "page", "limit", "totalPages", "hasNextPage", "hasPreviousPage")


def split_payload(payload: Any) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """
    Split a response body into (items, metadata). Raises ValueError when the
    body is not the {items, metadata} object the listing endpoint returns.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"Unexpected response body: {type(payload).__name__}")
    items = payload.get("items")
    metadata = payload.get("metadata")
    if not isinstance(items, list) or not isinstance(metadata, dict):
        raise ValueError("Response body lacks items or metadata")
    missing = [key for key in METADATA_KEYS if key not in metadata]
    if missing:
        raise ValueError(f"Response metadata lacks {', '.join(missing)}")
    return list(items), dict(metadata)


def view_from_payload(payload: Any) -> TableView:
    items, metadata = split_payload(payload)
    status = ViewStatus.LOADED if items else ViewStatus.EMPTY
    return TableView(status=status, items=items, metadata=metadata)


def _error_message(exc: Exception) -> str:
    if isinstance(exc, httpx.HTTPStatusError):
        try:
            body = exc.response.json()
        except ValueError:
            body = {}
        message = body.get("error") if isinstance(body, dict) else None
        return message or f"HTTP {exc.response.status_code}"
    return str(exc) or type(exc).__name__


class TableController:
    """
    Drives a paginated table against GET <base_url>?<query>.

    Every state change schedules a fetch and returns its task. A newer fetch
    cancels the one in flight, and a response is applied only if it belongs
    to the latest state, so stale pages never replace a newer view. Search
    input is debounced.
    """

    def __init__(
        self,
        base_url: str,
        client: httpx.AsyncClient,
        state: Optional[TableState] = None,
        debounce_seconds: float = SEARCH_DEBOUNCE_SECONDS,
        on_change: Optional[Callable[[TableView], None]] = None,
    ):
        self.base_url = base_url
        self.client = client
        self.state = state or TableState()
        self.debounce_seconds = debounce_seconds
        self.on_change = on_change
        self.view = TableView(status=ViewStatus.LOADING)

        self._generation = 0
        self._fetch_task: Optional[asyncio.Task] = None
        self._debounce_task: Optional[asyncio.Task] = None

    @classmethod
    def from_url(cls, url: str, client: httpx.AsyncClient, **kwargs) -> "TableController":
        base_url = url.split("?", 1)[0]
        return cls(base_url, client, state=TableState.from_url(url), **kwargs)

    @property
    def query_string(self) -> str:
        return self.state.to_query_string()

    @property
    def url(self) -> str:
        return f"{self.base_url}?{self.query_string}"

    def load(self) -> asyncio.Task:
        return self._start_fetch()

    def set_page(self, page: int) -> asyncio.Task:
        return self._apply(self.state.with_page(page))

    # Navigation follows the loaded metadata: first/previous need
    # hasPreviousPage, next/last need hasNextPage. A disabled control (or no
    # loaded page yet) returns None and fetches nothing.

    def first_page(self) -> Optional[asyncio.Task]:
        controls = self.view.controls
        if controls is None or not controls.has_previous_page:
            return None
        return self.set_page(controls.first)

    def previous_page(self) -> Optional[asyncio.Task]:
        controls = self.view.controls
        if controls is None or not controls.has_previous_page:
            return None
        return self.set_page(controls.previous)

    def next_page(self) -> Optional[asyncio.Task]:
        controls = self.view.controls
        if controls is None or not controls.has_next_page:
            return None
        return self.set_page(controls.next)

    def last_page(self) -> Optional[asyncio.Task]:
        controls = self.view.controls
        if controls is None or not controls.has_next_page:
            return None
        return self.set_page(controls.last)

    def set_limit(self, limit: int) -> asyncio.Task:
        return self._apply(self.state.with_limit(limit))

    def set_type(self, txn_type: str) -> asyncio.Task:
        return self._apply(self.state.with_type(txn_type))

    def toggle_sort(self, field_name: str) -> asyncio.Task:
        return self._apply(self.state.toggle_sort(field_name))

    def search(self, text: str) -> asyncio.Task:
        """
        Record a keystroke. The fetch happens only once input has been
        quiet for `debounce_seconds`.
        """
        if self._debounce_task is not None and not self._debounce_task.done():
            self._debounce_task.cancel()
        self._debounce_task = asyncio.create_task(self._debounced_search(text))
        return self._debounce_task

    async def _debounced_search(self, text: str) -> None:
        await asyncio.sleep(self.debounce_seconds)
        await self._apply(self.state.with_search(text))

    def _apply(self, state: TableState) -> asyncio.Task:
        self.state = state
        return self._start_fetch()

    def _start_fetch(self) -> asyncio.Task:
        self._generation += 1
        if self._fetch_task is not None and not self._fetch_task.done():
            logger.debug("Superseding in-flight fetch")
            self._fetch_task.cancel()

        self._set_view(TableView(status=ViewStatus.LOADING))
        self._fetch_task = asyncio.create_task(self._fetch(self._generation, self.url))
        return self._fetch_task

    async def _fetch(self, generation: int, url: str) -> None:
        try:
            response = await self.client.get(url)
            response.raise_for_status()
            view = view_from_payload(response.json())
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to load {url}: {e}")
            view = TableView(status=ViewStatus.ERROR, error=_error_message(e))

        if generation != self._generation:
            logger.debug(f"Dropping stale response for {url}")
            return
        self._set_view(view)

    def _set_view(self, view: TableView) -> None:
        self.view = view
        if self.on_change is not None:
            self.on_change(view)

    async def aclose(self) -> None:
        for task in (self._debounce_task, self._fetch_task):
            if task is not None and not task.done():
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
