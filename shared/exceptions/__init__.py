from .errors import (
    DomainError,
    UserNotFound,
    ProductNotFound,
    InsufficientStock,
    OrderNotFound,
    AccessDenied,
    InvalidState,
    EmailAlreadyRegistered,
    ReferenceCollision,
)
from .handlers import ErrorResponse, FormErrorResponse, register_exception_handlers

__all__ = [
    "DomainError",
    "UserNotFound",
    "ProductNotFound",
    "InsufficientStock",
    "OrderNotFound",
    "AccessDenied",
    "InvalidState",
    "EmailAlreadyRegistered",
    "ReferenceCollision",
    "ErrorResponse",
    "FormErrorResponse",
    "register_exception_handlers",
]
