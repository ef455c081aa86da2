"""Shared fixtures: a file-backed SQLite datastore and row builders."""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from transaction_table.config import Settings
from transaction_table.database import Base, create_db_engine, make_session_factory
from transaction_table.main import create_app
from transaction_table.models import (
    PaymentMethod,
    Transaction,
    TransactionStatus,
    TransactionType,
    User,
)

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


def build_user(user_id: str, name: str, email: str) -> User:
    return User(id=user_id, name=name, email=email)


def build_transaction(
    index: int,
    user: User,
    txn_type: TransactionType = TransactionType.CREDIT,
    status: TransactionStatus = TransactionStatus.COMPLETED,
) -> Transaction:
    created = BASE_TIME + timedelta(hours=index)
    return Transaction(
        id=f"txn_{index:04d}",
        hash=f"hash{index:04d}",
        user=user,
        status=status,
        type=txn_type,
        payment_method=PaymentMethod.PIX,
        currency="BRL",
        net_amount=Decimal("100.00") + index,
        total_amount=Decimal("110.00") + index,
        fee=Decimal("10.00"),
        installments=1 + index % 12,
        created_at=created,
        processed_at=created,
        confirmed_at=created if status == TransactionStatus.COMPLETED else None,
        failed_at=created if status == TransactionStatus.FAILED else None,
        refunded_at=created if status == TransactionStatus.REFUNDED else None,
        cancelled_at=created if status == TransactionStatus.CANCELLED else None,
    )


@pytest.fixture()
def database_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'transactions.db'}"


@pytest.fixture()
def engine(database_url):
    engine = create_db_engine(database_url)
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return make_session_factory(engine)


USERS = [
    ("u1", "Alice Martins", "alice@example.com"),
    ("u2", "Bruno Costa", "bruno@Example.com"),
    ("u3", "Carla Dias", "carla@corp.test"),
]


@pytest.fixture()
def users(session_factory) -> list[str]:
    with session_factory() as session:
        session.add_all([build_user(*row) for row in USERS])
        session.commit()
    return [row[0] for row in USERS]


@pytest.fixture()
def seed(session_factory, users):
    """Insert transactions; `rows` is a list of (user_index, type) pairs."""

    def _seed(rows) -> None:
        with session_factory() as session:
            owners = [session.get(User, user_id) for user_id in users]
            for index, (user_index, txn_type) in enumerate(rows):
                session.add(build_transaction(index, owners[user_index], txn_type))
            session.commit()

    return _seed


@pytest.fixture()
def mixed_dataset(seed) -> None:
    """25 CREDIT rows spread over three users, plus 7 DEBIT and 3 PAYMENT."""
    rows = [(i % 3, TransactionType.CREDIT) for i in range(25)]
    rows += [(i % 2, TransactionType.DEBIT) for i in range(7)]
    rows += [(2, TransactionType.PAYMENT) for _ in range(3)]
    seed(rows)


@pytest.fixture()
def app(database_url, engine):
    settings = Settings(database_url=database_url, create_tables=True, query_workers=2)
    return create_app(settings, engine=engine)


@pytest.fixture()
def client(app):
    with TestClient(app) as test_client:
        yield test_client
