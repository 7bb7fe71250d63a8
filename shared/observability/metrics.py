from prometheus_client import Counter, Histogram

# Business Metrics
cafe_orders_created_total = Counter(
    "cafe_orders_created_total",
    "Order creation attempts",
    ["status"] # Labels: 'success', 'rejected', 'failed'
)

cafe_order_creation_duration_seconds = Histogram(
    "cafe_order_creation_duration_seconds",
    "Time spent reserving stock and persisting an order"
)

cafe_stock_rejections_total = Counter(
    "cafe_stock_rejections_total",
    "Cart lines rejected for insufficient stock"
)

cafe_reference_collisions_total = Counter(
    "cafe_reference_collisions_total",
    "Order reference candidates discarded because they were already taken",
    ["stage"] # Labels: 'lookup', 'insert'
)

cafe_order_status_changes_total = Counter(
    "cafe_order_status_changes_total",
    "Order status transitions",
    ["from_status", "to_status"]
)
