import os
from dataclasses import dataclass
from decimal import Decimal

# Database Configuration
# Uses default credentials for local Docker Compose setup
DB_URL = os.getenv("DATABASE_URL", "postgres://user:password@db:5432/restopos_db")

# Application Metadata
PROJECT_NAME = "RestoPOS Order Engine"
VERSION = "1.0.0"
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", 8000))

# Delivery defaults applied when the POS does not send a fee or an estimate
DEFAULT_DELIVERY_FEE = Decimal(os.getenv("DEFAULT_DELIVERY_FEE", "1500"))
DEFAULT_DELIVERY_TIME = int(os.getenv("DEFAULT_DELIVERY_TIME", 30))  # Minutes

# Kitchen display feed
KDS_POLL_INTERVAL = float(os.getenv("KDS_POLL_INTERVAL", 2))  # Seconds between snapshot fetches
KDS_KEEPALIVE_INTERVAL = float(os.getenv("KDS_KEEPALIVE_INTERVAL", 30))
KDS_MAX_RETRIES = int(os.getenv("KDS_MAX_RETRIES", 5))  # Consecutive fetch failures before closing the stream

# Log a warning when closing an order leaves an ingredient at or below its minimum
LOW_STOCK_ALERTS = os.getenv("LOW_STOCK_ALERTS", "1") not in ("0", "false", "False")


@dataclass(frozen=True)
class OrderDefaults:
    """Values order creation falls back to when the request leaves them out."""
    delivery_fee: Decimal = DEFAULT_DELIVERY_FEE
    delivery_time: int = DEFAULT_DELIVERY_TIME


ORDER_DEFAULTS = OrderDefaults()
