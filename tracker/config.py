import os
from pathlib import Path

DATA_DIR    = Path(os.getenv("TRACKER_DATA_DIR", "data"))
ORDERS_FILE = os.getenv("TRACKER_ORDERS_FILE", "orders.json")
SALES_FILE  = os.getenv("TRACKER_SALES_FILE", "sales.json")

LOG_LEVEL = os.getenv("TRACKER_LOG_LEVEL", "INFO").upper()

# {order_number} is substituted when an order is created or renumbered
STOREFRONT_ORDER_URL = os.getenv(
    "TRACKER_STOREFRONT_ORDER_URL",
    "https://www.popmart.com/ca/order/{order_number}",
)

SEED_ON_STARTUP = os.getenv("TRACKER_SEED_ON_STARTUP", "false").lower() in ("1", "true", "yes")
