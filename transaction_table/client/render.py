from typing import Any, List, Sequence

from transaction_table.client.columns import Column, cell_value, sort_indicator
from transaction_table.client.controller import TableView, ViewStatus
from transaction_table.client.state import TableState

LOADING_MESSAGE = "Loading data..."
EMPTY_MESSAGE = "No results."
ERROR_MESSAGE = "Failed to load data"


def format_cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def render_header(columns: Sequence[Column], state: TableState) -> List[str]:
    headers = []
    for column in columns:
        indicator = sort_indicator(column, state)
        headers.append(f"{column.header} {indicator}" if indicator else column.header)
    return headers


def render_footer(view: TableView) -> List[str]:
    controls = view.controls
    if controls is None:
        return []

    def control(label: str, enabled: bool) -> str:
        return f"[{label}]" if enabled else f"({label})"

    links = [f"<{page}>" if page == controls.page else str(page) for page in controls.pages]
    nav = [
        control("First", controls.has_previous_page),
        control("Previous", controls.has_previous_page),
        *links,
        control("Next", controls.has_next_page),
        control("Last", controls.has_next_page),
    ]
    summary = f"Page {controls.page} of {controls.total_pages} with {view.metadata['total']} results"
    return [summary, " ".join(nav)]


def render_table(view: TableView, columns: Sequence[Column], state: TableState) -> str:
    """
    Plain-text rendering of the current view: header with sort indicator,
    rows or a placeholder, and the pagination footer once data has loaded.
    """
    headers = render_header(columns, state)

    placeholder = None
    rows = []
    if view.status == ViewStatus.LOADING:
        placeholder = LOADING_MESSAGE
    elif view.status == ViewStatus.ERROR:
        placeholder = f"{ERROR_MESSAGE}: {view.error}" if view.error else ERROR_MESSAGE
    elif view.status == ViewStatus.EMPTY:
        placeholder = EMPTY_MESSAGE
    else:
        rows = [[format_cell(cell_value(row, c.accessor)) for c in columns] for row in view.items]

    widths = [len(h) for h in headers]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]

    lines = [" | ".join(h.ljust(w) for h, w in zip(headers, widths))]
    lines.append("-+-".join("-" * w for w in widths))
    for row in rows:
        lines.append(" | ".join(cell.ljust(w) for cell, w in zip(row, widths)))
    if placeholder is not None:
        lines.append(placeholder)

    if view.status in (ViewStatus.LOADED, ViewStatus.EMPTY):
        lines.append("")
        lines.extend(render_footer(view))
    return "\n".join(lines)
