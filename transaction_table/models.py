import enum

from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from transaction_table.database import Base


class TransactionStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    CANCELLED = "CANCELLED"


class TransactionType(str, enum.Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"
    TRANSFER = "TRANSFER"
    PAYMENT = "PAYMENT"


class PaymentMethod(str, enum.Enum):
    CREDIT_CARD = "CREDIT_CARD"
    PIX = "PIX"
    BOLETO = "BOLETO"
    PAYPAL = "PAYPAL"
    OTHER = "OTHER"


# Status -> the lifecycle timestamp that must be set for it (PENDING has none)
STATUS_TIMESTAMPS = {
    TransactionStatus.COMPLETED: "confirmed_at",
    TransactionStatus.FAILED: "failed_at",
    TransactionStatus.REFUNDED: "refunded_at",
    TransactionStatus.CANCELLED: "cancelled_at",
}


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, index=True, nullable=False)

    transactions = relationship("Transaction", back_populates="user")

    def __repr__(self):
        return f"<User(id={self.id}, email={self.email})>"


class Transaction(Base):
    __tablename__ = "transactions"

    id = Column(String, primary_key=True)
    hash = Column(String, unique=True, index=True, nullable=False)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)

    status = Column(Enum(TransactionStatus, name="transaction_status"), nullable=False)
    type = Column(Enum(TransactionType, name="transaction_type"), index=True, nullable=False)
    payment_method = Column(Enum(PaymentMethod, name="payment_method"), nullable=False)

    currency = Column(String(3), default="BRL", nullable=False)
    net_amount = Column(Numeric(12, 2), nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    fee = Column(Numeric(12, 2), nullable=False, default=0)
    installments = Column(Integer, nullable=False, default=1)

    tracking_code = Column(String, nullable=True)
    external_id = Column(String, nullable=True)

    # Lifecycle timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now(), index=True, nullable=False)
    processed_at = Column(DateTime(timezone=True), nullable=False)
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    failed_at = Column(DateTime(timezone=True), nullable=True)
    refunded_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    user = relationship("User", back_populates="transactions")

    def lifecycle_consistent(self) -> bool:
        """
        True when at most one terminal timestamp is set and it matches status.
        The read path assumes this, it never checks it.
        """
        set_fields = {name for name in STATUS_TIMESTAMPS.values() if getattr(self, name) is not None}
        expected = STATUS_TIMESTAMPS.get(TransactionStatus(self.status))
        if expected is None:
            return not set_fields
        return set_fields == {expected}

    def __repr__(self):
        return f"<Transaction(id={self.id}, user={self.user_id}, total={self.total_amount}, type={self.type}, status={self.status})>"
