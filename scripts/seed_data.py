"""
Deterministic sample-data generator.

Produces:
  - 24 orders   spread over 2025, every order status represented
  - 18 sales    resold to a handful of repeat customers
    - ~50 % completed
    - ~25 % pending / shipped
    - the rest canceled
  - prices in CAD, resale at a 20–120 % markup over cost
"""

import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from tracker.models import SERIES_OPTIONS, OrderStatus, SaleStatus
from tracker.store import OrderStore, SaleStore

SEED = 42
START = datetime(2025, 1, 1, tzinfo=timezone.utc)
END   = datetime(2025, 12, 31, 23, 59, 59, tzinfo=timezone.utc)

PRODUCTS = [
    ("Labubu The Monsters Big Into Energy Blind Box", "Big Into Energy"),
    ("Labubu Exciting Macaron Vinyl Face", "Exciting Macaron"),
    ("Labubu Have A Seat Vinyl Plush", "Have A Seat"),
    ("Labubu Fall In Wild Vinyl Plush Doll", None),
    ("Labubu Pronounce Wings Of Fortune", None),
]

CUSTOMERS = ["Alex Chen", "Priya Patel", "Jordan Lee", "Sam Tremblay", "Mina Park", "Chris Dubois"]


def _rand_dt(rng: random.Random, lo: datetime = START, hi: datetime = END) -> datetime:
    delta = hi - lo
    secs = rng.randint(0, int(delta.total_seconds()))
    return lo + timedelta(seconds=secs)


def seed(orders: OrderStore, sales: SaleStore) -> None:
    rng = random.Random(SEED)

    # ── orders ───────────────────────────────────────────────────────────────
    order_statuses = (
        [OrderStatus.ORDERED] * 5
        + [OrderStatus.SHIPPED] * 5
        + [OrderStatus.DELIVERED] * 4
        + [OrderStatus.COMPLETED] * 7
        + [OrderStatus.CANCELED] * 3
    )
    rng.shuffle(order_statuses)
    order_dates = sorted(_rand_dt(rng) for _ in order_statuses)

    # oldest first so the store (which prepends) ends up newest first
    costs: list[tuple[str, Decimal]] = []
    for i, (status, created_at) in enumerate(zip(order_statuses, order_dates), start=1):
        product, series = rng.choice(PRODUCTS)
        price = Decimal(str(round(rng.uniform(27.9, 89.9), 2)))
        tags = [series] if series else rng.sample(SERIES_OPTIONS, rng.randint(0, 1))
        number = f"O{created_at:%y%m%d}{i:04d}"
        tracking = "" if status == OrderStatus.ORDERED else f"https://www.canadapost-postescanada.ca/track-reperage/en#/search?searchFor={rng.randint(10**15, 10**16 - 1)}"
        orders.create({
            "order_number": number,
            "product_name": product,
            "purchase_price": price,
            "tracking_link": tracking,
            "status": status,
            "created_at": created_at,
            "series": tags,
        })
        costs.append((product, price))

    # ── sales ────────────────────────────────────────────────────────────────
    sale_statuses = (
        [SaleStatus.PENDING] * 3
        + [SaleStatus.SHIPPED] * 2
        + [SaleStatus.COMPLETED] * 9
        + [SaleStatus.CANCELED] * 4
    )
    rng.shuffle(sale_statuses)
    sale_dates = sorted(_rand_dt(rng) for _ in sale_statuses)

    for status, created_at in zip(sale_statuses, sale_dates):
        product, cost = rng.choice(costs)
        markup = Decimal(str(round(rng.uniform(1.2, 2.2), 2)))
        customer = rng.choice(CUSTOMERS)
        notes = rng.choice(["", "", "Meet-up downtown", "Ships with bubble wrap", "Wants the box too"])
        sales.create({
            "customer_name": customer,
            "product_name": product,
            "purchase_price": cost,
            "selling_price": (cost * markup).quantize(Decimal("0.01")),
            "chat_link": f"https://www.facebook.com/messages/t/{rng.randint(10**14, 10**15 - 1)}",
            "notes": notes,
            "status": status,
            "created_at": created_at,
        })


if __name__ == "__main__":
    from tracker import config

    seed(
        OrderStore(config.DATA_DIR / config.ORDERS_FILE),
        SaleStore(config.DATA_DIR / config.SALES_FILE),
    )
    print(f"Seeded sample orders and sales into {config.DATA_DIR}/")
