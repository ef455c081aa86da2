"""Tests for column accessors, sort indicators and text rendering."""

from __future__ import annotations

from transaction_table.client.columns import TRANSACTION_COLUMNS, Column, cell_value, sort_indicator
from transaction_table.client.controller import TableView, ViewStatus, view_from_payload
from transaction_table.client.render import EMPTY_MESSAGE, LOADING_MESSAGE, render_table
from transaction_table.client.state import TableState

COLUMNS = (
    Column("ID", "id"),
    Column("Email", "user.email", sort_key="userEmail"),
)


def _metadata(total: int, page: int, total_pages: int) -> dict:
    return {
        "total": total,
        "page": page,
        "limit": 10,
        "totalPages": total_pages,
        "hasNextPage": page < total_pages,
        "hasPreviousPage": page > 1,
    }


def test_cell_value_follows_dotted_path() -> None:
    row = {"id": "txn_1", "user": {"email": "a@b.c"}}

    assert cell_value(row, "user.email") == "a@b.c"
    assert cell_value(row, "user.name") is None
    assert cell_value({"user": None}, "user.email") is None


def test_sort_indicator_only_on_active_sortable_column() -> None:
    state = TableState(sort_field="userEmail", sort_direction="asc")
    by_header = {column.header: sort_indicator(column, state) for column in TRANSACTION_COLUMNS}

    assert by_header["Email"] == "▲"
    assert by_header["Created At"] == ""
    assert by_header["ID"] == ""
    assert sort_indicator(Column("Email", "user.email", sort_key="userEmail"), TableState(sort_field="userEmail")) == "▼"


def test_loading_view_shows_only_loading_message() -> None:
    text = render_table(TableView(status=ViewStatus.LOADING), COLUMNS, TableState())

    assert LOADING_MESSAGE in text
    assert EMPTY_MESSAGE not in text
    assert "Page" not in text


def test_empty_view_shows_empty_message_not_loading() -> None:
    view = view_from_payload({"items": [], "metadata": _metadata(0, 1, 0)})
    text = render_table(view, COLUMNS, TableState())

    assert EMPTY_MESSAGE in text
    assert LOADING_MESSAGE not in text
    assert "Page 1 of 0 with 0 results" in text
    assert "(First) (Previous) (Next) (Last)" in text


def test_error_view_shows_message() -> None:
    view = TableView(status=ViewStatus.ERROR, error="Internal server error")

    assert "Failed to load data: Internal server error" in render_table(view, COLUMNS, TableState())


def test_loaded_view_renders_rows_and_window() -> None:
    view = view_from_payload({
        "items": [{"id": "txn_1", "user": {"email": "alice@example.com"}}],
        "metadata": _metadata(200, 10, 20),
    })
    text = render_table(view, COLUMNS, TableState(page=10, sort_field="userEmail", sort_direction="desc"))
    lines = text.splitlines()

    assert lines[0].startswith("ID")
    assert "Email ▼" in lines[0]
    assert "txn_1" in lines[2] and "alice@example.com" in lines[2]
    assert "Page 10 of 20 with 200 results" in text
    assert "[First] [Previous] 8 9 <10> 11 12 [Next] [Last]" in text
