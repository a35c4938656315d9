import locale
import numbers
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from functools import cmp_to_key
from typing import Callable, Iterable, Optional, Sequence

from pydantic import BaseModel

from tracker.models import (
    DashboardStats,
    Order,
    OrderStats,
    OrderStatus,
    Sale,
    SaleStats,
    SaleStatus,
)
from tracker.money import quantize

_ZERO = Decimal("0.00")

# Completed and Canceled records leave the active table for the history table
TERMINAL_STATUSES = frozenset({"Completed", "Canceled"})


@dataclass(frozen=True)
class TableSpec:
    """Everything that differs between the orders table and the sales table."""

    name: str
    model: type[BaseModel]
    statuses: type[Enum]
    search_fields: tuple[str, ...]
    money_field: str
    counts_toward_total: Callable[[BaseModel], bool]
    editable_fields: tuple[str, ...]
    numeric_fields: frozenset[str]

    def resolve_field(self, key: str) -> str:
        """Accept either the attribute name or its camelCase wire alias."""
        fields = self.model.model_fields
        if key in fields:
            return key
        for name, info in fields.items():
            if info.alias == key:
                return name
        raise ValueError(f"Unknown {self.name} field '{key}'")


ORDERS = TableSpec(
    name="orders",
    model=Order,
    statuses=OrderStatus,
    search_fields=("product_name", "order_number"),
    money_field="purchase_price",
    # money committed: everything except canceled orders
    counts_toward_total=lambda r: r.status != OrderStatus.CANCELED,
    editable_fields=("order_number", "product_name", "purchase_price", "tracking_link"),
    numeric_fields=frozenset({"purchase_price"}),
)

SALES = TableSpec(
    name="sales",
    model=Sale,
    statuses=SaleStatus,
    search_fields=("customer_name", "product_name"),
    money_field="selling_price",
    # money realized: completed sales only
    counts_toward_total=lambda r: r.status == SaleStatus.COMPLETED,
    editable_fields=("customer_name", "selling_price", "purchase_price", "notes"),
    numeric_fields=frozenset({"selling_price", "purchase_price"}),
)

TABLES = {spec.name: spec for spec in (ORDERS, SALES)}


def _status_value(record) -> str:
    status = record.status
    return status.value if isinstance(status, Enum) else str(status)


def is_history(record) -> bool:
    return _status_value(record) in TERMINAL_STATUSES


def split_views(records: Iterable) -> tuple[list, list]:
    """Return (active, history), each in store order."""
    active, history = [], []
    for r in records:
        (history if is_history(r) else active).append(r)
    return active, history


# ── View Filter ──────────────────────────────────────────────────────────────

def filter_records(
    records: Iterable,
    spec: TableSpec,
    query: str = "",
    status: Optional[str] = None,
) -> list:
    needle = (query or "").lower()
    wanted = None if status in (None, "", "all") else str(getattr(status, "value", status))

    def matches(record) -> bool:
        if wanted is not None and _status_value(record) != wanted:
            return False
        if not needle:
            return True
        return any(needle in str(getattr(record, f) or "").lower() for f in spec.search_fields)

    return [r for r in records if matches(r)]


# ── View Sorter ──────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SortState:
    field: Optional[str] = None
    descending: bool = False

    def toggle(self, field: str) -> "SortState":
        if field == self.field:
            return SortState(field, not self.descending)
        return SortState(field, False)


def _is_number(value) -> bool:
    return isinstance(value, numbers.Number) and not isinstance(value, bool)


def as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def compare_values(a, b) -> int:
    if _is_number(a) and _is_number(b):
        return (a > b) - (a < b)
    ta, tb = as_text(a), as_text(b)
    # case-folded order first, the original text only breaks ties
    fa, fb = ta.casefold(), tb.casefold()
    if fa != fb:
        return locale.strcoll(fa, fb)
    return locale.strcoll(ta, tb)


def sort_records(records: Sequence, sort: SortState) -> list:
    if sort.field is None:
        return list(records)

    def cmp(x, y) -> int:
        return compare_values(getattr(x, sort.field), getattr(y, sort.field))

    return sorted(records, key=cmp_to_key(cmp), reverse=sort.descending)


# ── Aggregator ───────────────────────────────────────────────────────────────

def aggregate_total(records: Iterable, spec: TableSpec) -> Decimal:
    total = sum(
        (getattr(r, spec.money_field) or _ZERO for r in records if spec.counts_toward_total(r)),
        _ZERO,
    )
    return quantize(total)


# ── Dashboard header ─────────────────────────────────────────────────────────

def dashboard_stats(orders: Sequence[Order], sales: Sequence[Sale]) -> DashboardStats:
    not_outstanding = {OrderStatus.DELIVERED, OrderStatus.COMPLETED, OrderStatus.CANCELED}
    active_orders, _ = split_views(orders)
    active_sales, _ = split_views(sales)

    return DashboardStats(
        orders=OrderStats(
            active=len(active_orders),
            outstanding=sum(1 for o in orders if o.status not in not_outstanding),
            completed=sum(1 for o in orders if o.status == OrderStatus.COMPLETED),
            canceled=sum(1 for o in orders if o.status == OrderStatus.CANCELED),
            total_spent=aggregate_total(orders, ORDERS),
        ),
        sales=SaleStats(
            active=len(active_sales),
            pending=sum(1 for s in sales if s.status == SaleStatus.PENDING),
            completed=sum(1 for s in sales if s.status == SaleStatus.COMPLETED),
            total_revenue=aggregate_total(sales, SALES),
        ),
    )
