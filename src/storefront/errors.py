"""Error kinds surfaced by the storefront core.

Every failure leaving a command handler or query is a ``StorefrontError``
subclass. The kind decides how a caller should react (4xx vs 5xx at the HTTP
boundary); ``operation`` names the use case that failed and ``__cause__``
keeps the underlying gateway or persistence error for inspection.
"""

from contextlib import contextmanager

from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from sqlalchemy.exc import SQLAlchemyError


class StorefrontError(Exception):
    code = "INTERNAL_ERROR"
    status_code = 500

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation

    @property
    def is_client_error(self) -> bool:
        return self.status_code < 500

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class NotFound(StorefrontError):
    code = "NOT_FOUND"
    status_code = 404


class BadRequest(StorefrontError):
    code = "BAD_REQUEST"
    status_code = 400


class EmptyCart(BadRequest):
    def __init__(self, operation: str | None = None) -> None:
        super().__init__("empty cart", operation=operation)


class InvalidTransition(BadRequest):
    code = "INVALID_TRANSITION"

    def __init__(self, entity: str, current: str, target: str, operation: str | None = None) -> None:
        super().__init__(f"Cannot transition {entity} from {current} to {target}", operation=operation)
        self.entity = entity
        self.current = current
        self.target = target


class Conflict(StorefrontError):
    code = "CONFLICT"
    status_code = 409


class InsufficientStock(Conflict):
    """Raised when a product cannot cover the requested quantity.

    Surfaced separately from generic conflicts so callers can offer
    alternatives for the named product.
    """

    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: str, available: int, requested: int, operation: str | None = None) -> None:
        super().__init__(
            f"Insufficient stock for product {product_id}: {available} available, {requested} requested",
            operation=operation,
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class ThirdPartyError(StorefrontError):
    code = "THIRD_PARTY_ERROR"
    status_code = 502


class InternalError(StorefrontError):
    code = "INTERNAL_ERROR"
    status_code = 500


class MalformedEvent(InternalError):
    """A verified gateway event lacks a field the processor depends on."""

    code = "MALFORMED_EVENT"


class DatabaseError(StorefrontError):
    code = "DATABASE_ERROR"
    status_code = 500


def validation_message(exc: ValidationError) -> str:
    messages = getattr(exc, "messages", None) or {}
    if isinstance(messages, dict):
        return "; ".join(f"{field}: {', '.join(str(m) for m in errors)}" for field, errors in messages.items())
    return str(exc)


@contextmanager
def wrap_errors(operation: str):
    """Tag failures raised inside the block with ``operation``.

    Storefront errors keep their kind; Protean and SQLAlchemy persistence and validation
    errors are converted to the matching kind with the original chained.
    """
    try:
        yield
    except StorefrontError as exc:
        if exc.operation is None:
            exc.operation = operation
        raise
    except ObjectNotFoundError as exc:
        raise NotFound(str(exc), operation=operation) from exc
    except ValidationError as exc:
        raise BadRequest(validation_message(exc), operation=operation) from exc
    except ExpectedVersionError as exc:
        raise Conflict("Record was modified concurrently, retry the request", operation=operation) from exc
    except SQLAlchemyError as exc:
        raise DatabaseError("Database operation failed", operation=operation) from exc
