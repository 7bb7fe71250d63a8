from .setup import setup_observability
from .metrics import (
    cafe_orders_created_total,
    cafe_order_creation_duration_seconds,
    cafe_stock_rejections_total,
    cafe_reference_collisions_total,
    cafe_order_status_changes_total,
)
