"""
Domain-level exceptions.

Services and repositories raise these for business rule violations; the
application-level handler in main.py turns them into JSON error responses
using each class's status_code.
"""
from fastapi import status


class TekashiError(Exception):
    """Base class for all domain errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TekashiError):
    """A business rule or invariant was violated."""

    status_code = status.HTTP_400_BAD_REQUEST


class ConflictError(ValidationError):
    """The record already exists (unique pair, duplicate name, ...)."""


class InsufficientStockError(ValidationError):
    """A line item asks for more units than the product has."""

    def __init__(self, product_id: int, requested: int, available: int, product_name: str = None):
        label = product_name or f"product {product_id}"
        super().__init__(
            f"Insufficient stock for {label}: requested {requested}, available {available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class NotFoundError(TekashiError):
    """A requested entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class PermissionDeniedError(TekashiError):
    """The caller may not touch this resource."""

    status_code = status.HTTP_403_FORBIDDEN


class DuplicateOrderNumberError(ConflictError):
    """Another order already uses this order number."""

    def __init__(self, order_number: str):
        super().__init__(f"Order number {order_number} is already in use")
        self.order_number = order_number
