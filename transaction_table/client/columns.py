from dataclasses import dataclass
from typing import Any, Mapping, Optional

from transaction_table.client.state import TableState

ASC_INDICATOR = "▲"
DESC_INDICATOR = "▼"


@dataclass(frozen=True)
class Column:
    """
    One table column. `accessor` is a dotted path into a row (user.email);
    columns with a `sort_key` can be clicked to sort by that field.
    """
    header: str
    accessor: str
    sort_key: Optional[str] = None

    @property
    def sortable(self) -> bool:
        return self.sort_key is not None


TRANSACTION_COLUMNS = (
    Column("ID", "id"),
    Column("Currency", "currency"),
    Column("Total Amount", "totalAmount", sort_key="totalAmount"),
    Column("Installments", "installments"),
    Column("Payment Method", "paymentMethod"),
    Column("Status", "status"),
    Column("Type", "type"),
    Column("Created At", "createdAt", sort_key="createdAt"),
    Column("Processed At", "processedAt", sort_key="processedAt"),
    Column("Confirmed At", "confirmedAt"),
    Column("Email", "user.email", sort_key="userEmail"),
)


def cell_value(row: Mapping[str, Any], accessor: str) -> Any:
    value: Any = row
    for key in accessor.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(key)
    return value


def sort_indicator(column: Column, state: TableState) -> str:
    # Only the active sort column shows a direction
    if not column.sortable or column.sort_key != state.sort_field:
        return ""
    return ASC_INDICATOR if state.sort_direction == "asc" else DESC_INDICATOR
