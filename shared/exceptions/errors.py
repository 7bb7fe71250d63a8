"""
Typed business errors raised by the service layer.

Each error carries the HTTP status and short label used by the exception
handlers to build the JSON error envelope, so services never import FastAPI
to report a failure.
"""
from typing import Any


class DomainError(Exception):
    status_code: int = 400
    error: str = "Bad Request"

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context


class UserNotFound(DomainError):
    status_code = 404
    error = "Not Found"

    def __init__(self, user_id: Any):
        super().__init__(f"User {user_id} not found", user_id=str(user_id))


class ProductNotFound(DomainError):
    status_code = 404
    error = "Not Found"

    def __init__(self, product_id: Any):
        super().__init__(f"Product {product_id} not found", product_id=str(product_id))
        self.product_id = product_id


class InsufficientStock(DomainError):
    status_code = 400
    error = "Insufficient Stock"

    def __init__(self, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for product '{product_name}'. "
            f"Available: {available}, Requested: {requested}",
            product_name=product_name,
            available=available,
            requested=requested,
        )
        self.product_name = product_name
        self.available = available
        self.requested = requested


class OrderNotFound(DomainError):
    status_code = 404
    error = "Not Found"

    def __init__(self, order_id: Any):
        super().__init__(f"Order {order_id} not found", order_id=str(order_id))


class AccessDenied(DomainError):
    status_code = 403
    error = "Forbidden"


class InvalidState(DomainError):
    status_code = 400
    error = "Invalid State"


class EmailAlreadyRegistered(DomainError):
    status_code = 409
    error = "Conflict"

    def __init__(self, email: str):
        super().__init__(f"Email {email} is already registered", email=email)


class ReferenceCollision(DomainError):
    """Two orders drew the same reference. Retried internally, never returned."""

    status_code = 500
    error = "Internal Server Error"

    def __init__(self, reference: str):
        super().__init__(f"Order reference {reference} already taken", reference=reference)
        self.reference = reference
