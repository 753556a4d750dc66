# shopstock/core/exceptions.py

# ***************************************************************
# Domain errors raised by the services layer.
# main.py maps each kind to an HTTP status code.
# ***************************************************************


class ShopStockError(Exception):
    """Base class for every error the services layer raises."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ShopStockError):
    """Malformed or out-of-domain input. Raised before any mutation."""

    @classmethod
    def from_pydantic(cls, exc, prefix: str = "") -> "ValidationError":
        problems = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()))
            problems.append(f"{location}: {error['msg']}" if location else error["msg"])
        return cls(prefix + "; ".join(problems))


class NotFoundError(ShopStockError):
    """A referenced product, category, supplier, sale or restock does not exist."""

    def __init__(self, entity: str, entity_id):
        super().__init__(f"{entity} {entity_id} not found.")
        self.entity = entity
        self.entity_id = entity_id


class ConsistencyError(ShopStockError):
    """A line item could not be applied to the catalog."""


class InsufficientStockError(ConsistencyError):
    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for product {product_id}: requested {requested}, available {available}."
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class StorageError(ShopStockError):
    """The database failed. Retryable; nothing was committed."""
