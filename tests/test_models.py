"""Tests for the status/lifecycle-timestamp agreement helper."""

from datetime import datetime

import pytest

from transaction_table.models import Transaction, TransactionStatus

WHEN = datetime(2024, 5, 1)


@pytest.mark.parametrize(
    "status, timestamps, expected",
    [
        (TransactionStatus.PENDING, {}, True),
        (TransactionStatus.COMPLETED, {"confirmed_at": WHEN}, True),
        (TransactionStatus.FAILED, {"failed_at": WHEN}, True),
        (TransactionStatus.COMPLETED, {}, False),
        (TransactionStatus.PENDING, {"refunded_at": WHEN}, False),
        (TransactionStatus.CANCELLED, {"cancelled_at": WHEN, "confirmed_at": WHEN}, False),
        (TransactionStatus.REFUNDED, {"confirmed_at": WHEN}, False),
    ],
)
def test_lifecycle_consistent(status, timestamps, expected) -> None:
    txn = Transaction(id="t", status=status, **timestamps)

    assert txn.lifecycle_consistent() is expected
