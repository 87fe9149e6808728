"""
Domain errors raised by the inventory services.

Each error carries the HTTP status code the API layer reports it with,
so route handlers can translate any of them uniformly.
"""


class InventoryError(Exception):
    """Base class for all inventory errors."""
    status_code = 500


class ValidationError(InventoryError):
    """Input is malformed or outside its allowed range."""
    status_code = 400


class DuplicateNameError(InventoryError):
    """Another product already uses the requested name."""
    status_code = 409


class ProductNotFoundError(InventoryError):
    """The referenced product does not exist."""
    status_code = 404

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product with ID {product_id} not found")


class InsufficientStockError(InventoryError):
    """A sale asked for more units than the product has in stock."""
    status_code = 400

    def __init__(self, product_name: str, available: int, requested: int):
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient stock for {product_name}. "
            f"Current quantity: {available}, requested: {requested}"
        )


class StoreUnavailableError(InventoryError):
    """The underlying database failed; nothing was written."""
    status_code = 500
