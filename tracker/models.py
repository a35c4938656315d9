from pydantic import BaseModel, ConfigDict, PlainSerializer, field_validator, model_validator
from pydantic.alias_generators import to_camel
from enum import Enum
from datetime import datetime
from decimal import Decimal
from typing import Annotated, ClassVar, Optional, Union

# Money stays Decimal in Python and is written to JSON as a plain number
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class OrderStatus(str, Enum):
    ORDERED = "Ordered"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    COMPLETED = "Completed"
    CANCELED = "Canceled"


class SaleStatus(str, Enum):
    PENDING = "Pending"
    SHIPPED = "Shipped"
    COMPLETED = "Completed"
    CANCELED = "Canceled"


SERIES_OPTIONS = ("Big Into Energy", "Exciting Macaron", "Have A Seat")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire and in the data files."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _distinct(tags: Optional[list[str]]) -> Optional[list[str]]:
    if tags is None:
        return None
    return list(dict.fromkeys(tags))


# ── Records ──────────────────────────────────────────────────────────────────

class Order(CamelModel):
    id: str
    order_number: str
    popmart_link: str = ""  # derived from order_number by the store
    product_name: str
    purchase_price: Money
    tracking_link: str = ""
    status: OrderStatus = OrderStatus.ORDERED
    created_at: Optional[datetime] = None
    series: list[str] = []

    @field_validator("series")
    @classmethod
    def distinct_series(cls, v):
        return _distinct(v)


class Sale(CamelModel):
    id: str
    customer_name: str
    product_name: str
    purchase_price: Optional[Money] = None  # cost basis
    selling_price: Money
    chat_link: str = ""
    notes: str = ""
    status: SaleStatus = SaleStatus.PENDING
    created_at: Optional[datetime] = None


Record = Union[Order, Sale]


# ── Request bodies ───────────────────────────────────────────────────────────

class OrderCreate(CamelModel):
    order_number: str
    product_name: str
    purchase_price: Money
    tracking_link: str = ""
    status: OrderStatus = OrderStatus.ORDERED
    created_at: Optional[datetime] = None
    series: list[str] = []

    @field_validator("series")
    @classmethod
    def distinct_series(cls, v):
        return _distinct(v)


class PartialUpdate(CamelModel):
    """Only the keys a client sends are applied. An explicit null clears a field
    and is accepted only for fields the record itself allows to be empty."""

    nullable: ClassVar[frozenset[str]] = frozenset()

    @model_validator(mode="after")
    def null_only_where_allowed(self):
        cleared = {name for name in self.model_fields_set if getattr(self, name) is None}
        refused = sorted(cleared - self.nullable)
        if refused:
            raise ValueError(f"Fields cannot be null: {refused}")
        return self


class OrderUpdate(PartialUpdate):
    nullable = frozenset({"created_at"})

    order_number: Optional[str] = None
    product_name: Optional[str] = None
    purchase_price: Optional[Money] = None
    tracking_link: Optional[str] = None
    status: Optional[OrderStatus] = None
    created_at: Optional[datetime] = None
    series: Optional[list[str]] = None

    @field_validator("series")
    @classmethod
    def distinct_series(cls, v):
        return _distinct(v)


class SaleCreate(CamelModel):
    customer_name: str
    product_name: str
    purchase_price: Optional[Money] = None
    selling_price: Money
    chat_link: str = ""
    notes: str = ""
    status: SaleStatus = SaleStatus.PENDING
    created_at: Optional[datetime] = None


class SaleUpdate(PartialUpdate):
    nullable = frozenset({"purchase_price", "created_at"})

    customer_name: Optional[str] = None
    product_name: Optional[str] = None
    purchase_price: Optional[Money] = None
    selling_price: Optional[Money] = None
    chat_link: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[SaleStatus] = None
    created_at: Optional[datetime] = None


class ViewQuery(CamelModel):
    search: str = ""
    status: Optional[str] = None  # None or "all" means every status


class SortRequest(CamelModel):
    field: str


class EditStart(CamelModel):
    id: str
    field: str


class EditValue(CamelModel):
    value: str


class SelectionToggle(CamelModel):
    id: str
    checked: bool


class SelectAll(CamelModel):
    checked: bool


# ── Response models ──────────────────────────────────────────────────────────

class SortInfo(CamelModel):
    field: Optional[str] = None
    descending: bool = False


class EditInfo(CamelModel):
    editing: bool
    table: Optional[str] = None
    record_id: Optional[str] = None
    field: Optional[str] = None
    pending: Optional[str] = None


class TableView(CamelModel):
    table: str
    view: str
    search: str
    status: Optional[str]
    sort: SortInfo
    rows: list[Record]
    count: int
    # status-conditional sum over the filtered rows
    total: Money
    total_display: str
    editable: bool
    editing: EditInfo
    selected_ids: list[str]
    selection: str  # "none" | "some" | "all"


class OrderStats(CamelModel):
    active: int
    outstanding: int
    completed: int
    canceled: int
    total_spent: Money


class SaleStats(CamelModel):
    active: int
    pending: int
    completed: int
    total_revenue: Money


class DashboardStats(CamelModel):
    orders: OrderStats
    sales: SaleStats
