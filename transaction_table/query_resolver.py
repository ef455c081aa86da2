import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Mapping, Optional

from sqlalchemy import select, func, or_
from sqlalchemy.orm import sessionmaker, contains_eager, load_only
from sqlalchemy.sql.elements import ColumnElement

from transaction_table.models import Transaction, TransactionType, User
from transaction_table.schemas import (
    DEFAULT_SORT_FIELD,
    ListParams,
    PageMetadata,
    TransactionItem,
    TransactionPage,
)

logger = logging.getLogger(__name__)

# --- SORTING ---
# Wire name -> column. userEmail is synthetic: it orders by the related user.
SORT_COLUMNS = {
    "createdAt": Transaction.created_at,
    "processedAt": Transaction.processed_at,
    "confirmedAt": Transaction.confirmed_at,
    "totalAmount": Transaction.total_amount,
    "netAmount": Transaction.net_amount,
    "installments": Transaction.installments,
    "status": Transaction.status,
    "type": Transaction.type,
    "paymentMethod": Transaction.payment_method,
    "currency": Transaction.currency,
    "userEmail": User.email,
}

# --- PROJECTION ---
ITEM_COLUMNS = (
    Transaction.id,
    Transaction.user_id,
    Transaction.currency,
    Transaction.net_amount,
    Transaction.total_amount,
    Transaction.installments,
    Transaction.payment_method,
    Transaction.status,
    Transaction.type,
    Transaction.created_at,
    Transaction.processed_at,
    Transaction.confirmed_at,
    Transaction.failed_at,
    Transaction.refunded_at,
    Transaction.cancelled_at,
)


class InvalidQueryParameter(ValueError):
    """Raised for query values that cannot be coerced to a sensible default."""


def parse_transaction_type(raw: Optional[str]) -> Optional[TransactionType]:
    if raw is None or not raw.strip():
        return None
    try:
        return TransactionType(raw.strip().upper())
    except ValueError:
        raise InvalidQueryParameter(f"Invalid transaction type: {raw}") from None


def resolve_params(raw: Mapping[str, Optional[str]], max_limit: int = 100) -> ListParams:
    """
    Turn raw query-string values into ListParams.

    page/limit that are not positive integers fall back to their defaults,
    limit is clamped to max_limit, unknown sort fields fall back to createdAt
    and unknown directions to desc. Only an unknown type is rejected.
    """
    txn_type = parse_transaction_type(raw.get("type"))

    sort_field = (raw.get("sortField") or "").strip()
    if sort_field not in SORT_COLUMNS:
        sort_field = DEFAULT_SORT_FIELD

    params = ListParams(
        page=raw.get("page"),
        limit=raw.get("limit"),
        q=raw.get("q"),
        type=txn_type,
        sort_field=sort_field,
        sort_direction=raw.get("sortDirection"),
    )
    if params.limit > max_limit:
        params = params.model_copy(update={"limit": max_limit})
    return params


def build_filter(q: str, txn_type: Optional[TransactionType]) -> List[ColumnElement]:
    """
    Conditions to AND together. Search matches id or hash exactly, or the
    owner's email or name as a case-insensitive substring.
    """
    conditions = []
    if q:
        conditions.append(
            or_(
                Transaction.id == q,
                Transaction.hash == q,
                User.email.icontains(q, autoescape=True),
                User.name.icontains(q, autoescape=True),
            )
        )
    if txn_type is not None:
        conditions.append(Transaction.type == txn_type)
    return conditions


def resolve_order_by(sort_field: str, sort_direction: str) -> List[ColumnElement]:
    column = SORT_COLUMNS.get(sort_field, SORT_COLUMNS[DEFAULT_SORT_FIELD])
    # id as tie-breaker keeps page boundaries stable
    if sort_direction == "asc":
        return [column.asc(), Transaction.id.asc()]
    return [column.desc(), Transaction.id.desc()]


def build_metadata(total: int, page: int, limit: int) -> PageMetadata:
    total_pages = (total + limit - 1) // limit
    return PageMetadata(
        total=total,
        page=page,
        limit=limit,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )


class TransactionQueryResolver:
    """
    Runs the paired fetch + count for one listing request.

    Each query gets its own session from the injected factory, both run on
    the shared thread pool, and the page is built only when both succeed.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        max_limit: int = 100,
        executor: Optional[ThreadPoolExecutor] = None,
        max_workers: int = 4,
    ):
        self._session_factory = session_factory
        self.max_limit = max_limit
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(2, max_workers), thread_name_prefix="txn-query"
        )

    def resolve(self, raw: Mapping[str, Optional[str]]) -> ListParams:
        return resolve_params(raw, self.max_limit)

    def list_transactions(self, params: ListParams) -> TransactionPage:
        conditions = build_filter(params.q, params.type)

        items_future = self._executor.submit(self._fetch_items, params, conditions)
        total_future = self._executor.submit(self._count, conditions)

        try:
            items = items_future.result()
            total = total_future.result()
        except Exception:
            items_future.cancel()
            total_future.cancel()
            raise

        return TransactionPage(
            items=items,
            metadata=build_metadata(total, params.page, params.limit),
        )

    def _fetch_items(self, params: ListParams, conditions: List[ColumnElement]) -> List[TransactionItem]:
        stmt = (
            select(Transaction)
            .join(Transaction.user)
            .options(
                load_only(*ITEM_COLUMNS),
                contains_eager(Transaction.user).load_only(User.email),
            )
            .where(*conditions)
            .order_by(*resolve_order_by(params.sort_field, params.sort_direction))
            .offset(params.skip)
            .limit(params.limit)
        )
        with self._session_factory() as session:
            rows = session.scalars(stmt).all()
            return [TransactionItem.model_validate(row) for row in rows]

    def _count(self, conditions: List[ColumnElement]) -> int:
        stmt = (
            select(func.count(Transaction.id))
            .select_from(Transaction)
            .join(Transaction.user)
            .where(*conditions)
        )
        with self._session_factory() as session:
            return session.scalar(stmt) or 0

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=True)
