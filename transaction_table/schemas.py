from decimal import Decimal
from datetime import datetime
from typing import Annotated, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from transaction_table.models import PaymentMethod, TransactionStatus, TransactionType

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
DEFAULT_SORT_FIELD = "createdAt"
DEFAULT_SORT_DIRECTION = "desc"

# Keeps (page - 1) * limit inside a 64-bit OFFSET for any allowed limit
MAX_PAGE = 2**31 - 1

# Decimal in Python, plain number on the wire. Numeric(12, 2) has at most
# 12 significant digits, which round-trip through a float unchanged.
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


def positive_int_or_default(value, default: int) -> int:
    """
    Query strings arrive as text. Anything that is not a positive integer
    silently becomes the default.
    """
    if value is None:
        return default
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ListParams(BaseModel):
    """
    Resolved listing parameters. Built from raw query-string values; page,
    limit and sortDirection are coerced to defaults instead of rejected.
    """
    page: int = Field(default=DEFAULT_PAGE, ge=1, le=MAX_PAGE)
    limit: int = Field(default=DEFAULT_LIMIT, ge=1)
    q: str = ""
    type: Optional[TransactionType] = None
    sort_field: str = DEFAULT_SORT_FIELD
    sort_direction: Literal["asc", "desc"] = DEFAULT_SORT_DIRECTION

    @field_validator("page", mode="before")
    @classmethod
    def page_or_default(cls, v):
        return min(positive_int_or_default(v, DEFAULT_PAGE), MAX_PAGE)

    @field_validator("limit", mode="before")
    @classmethod
    def limit_or_default(cls, v):
        return positive_int_or_default(v, DEFAULT_LIMIT)

    @field_validator("q", mode="before")
    @classmethod
    def strip_search(cls, v):
        return (v or "").strip()

    @field_validator("sort_direction", mode="before")
    @classmethod
    def direction_or_default(cls, v):
        direction = (v or "").strip().lower()
        return direction if direction in ("asc", "desc") else DEFAULT_SORT_DIRECTION

    @property
    def skip(self) -> int:
        return (self.page - 1) * self.limit


class UserSummary(CamelModel):
    email: str


class TransactionItem(CamelModel):
    """
    Fixed projection of a transaction row as listed by the table.
    Amounts go out as JSON numbers; Numeric(12, 2) values survive the float.
    """
    id: str
    currency: str
    net_amount: Money
    total_amount: Money
    installments: int
    payment_method: PaymentMethod
    status: TransactionStatus
    type: TransactionType
    created_at: datetime
    processed_at: datetime
    confirmed_at: Optional[datetime] = None
    failed_at: Optional[datetime] = None
    refunded_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    user: UserSummary


class PageMetadata(CamelModel):
    total: int = Field(..., ge=0, description="Rows matching the filter, ignoring pagination")
    page: int = Field(..., ge=1, description="Current page (1-based)")
    limit: int = Field(..., ge=1, description="Page size")
    total_pages: int = Field(..., ge=0, description="ceil(total / limit)")
    has_next_page: bool
    has_previous_page: bool

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "total": 25,
                "page": 2,
                "limit": 10,
                "totalPages": 3,
                "hasNextPage": True,
                "hasPreviousPage": True,
            }
        }
    )


class TransactionPage(CamelModel):
    """
    Response schema for GET /api/transactions.
    """
    items: List[TransactionItem]
    metadata: PageMetadata


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Human readable error message")

    model_config = ConfigDict(
        json_schema_extra={"example": {"error": "Internal server error"}}
    )
