from sqlalchemy.orm import Session
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from decimal import Decimal
from typing import List, Optional
import logging

from stockapp.exceptions import (
    DuplicateNameError,
    InventoryError,
    ProductNotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from stockapp.models.product import Product
from stockapp.schemas.product import ProductCreate, ProductUpdate, ProductResponse
from stockapp.services.stock_ledger import MAX_QUANTITY, MIN_UNIT_PRICE, StockLedger, is_whole_cents
from stockapp.utils.cache import CacheService, cache_service

logger = logging.getLogger(__name__)

UPDATE_CORRECTION_REASON = "Manual correction via product update"


class InventoryService:
    """
    Service class for Product CRUD operations.

    This service handles:
    - Creating, updating and deleting products
    - Product name uniqueness
    - Listing products (with caching) and low-stock products

    Quantity is only set here on creation. A quantity change on update is
    handed to the StockLedger as a manual correction so it is recorded.
    """

    def __init__(self, db: Session, ledger: StockLedger = None, cache: CacheService = cache_service):
        self.db = db
        self.cache = cache
        self.ledger = ledger or StockLedger(db, cache)

    def create_product(self, product_data: ProductCreate) -> Product:
        """
        Create a new product.

        Raises:
            DuplicateNameError: If a product with that name exists
            ValidationError: If a numeric field is out of range
        """
        self._check_ranges(
            quantity=product_data.quantity,
            unit_cost=product_data.unit_cost,
            min_stock_level=product_data.min_stock_level,
        )
        self._ensure_name_available(product_data.name)

        product = Product(
            name=product_data.name,
            quantity=product_data.quantity,
            unit_cost=product_data.unit_cost,
            min_stock_level=product_data.min_stock_level,
        )
        self.db.add(product)
        self._commit(f"create product '{product_data.name}'", name=product_data.name)
        self.db.refresh(product)

        self.cache.invalidate_products()
        logger.info(f"Product #{product.id} '{product.name}' created with quantity {product.quantity}")
        return product

    def get_product(self, product_id: int) -> Optional[Product]:
        """Get a product by ID, or None if it doesn't exist."""
        return self.db.query(Product).filter(Product.id == product_id).first()

    def update_product(self, product_id: int, product_data: ProductUpdate) -> Product:
        """
        Update an existing product. Only provided, non-None fields change.

        Raises:
            ProductNotFoundError: If the product doesn't exist
            DuplicateNameError: If the new name belongs to another product
            ValidationError: If a numeric field is out of range
        """
        update_data = {
            field: value
            for field, value in product_data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        reason = update_data.pop("adjustment_reason", None) or UPDATE_CORRECTION_REASON
        new_quantity = update_data.pop("quantity", None)
        self._check_ranges(quantity=new_quantity, **update_data)

        try:
            product = (
                self.db.query(Product)
                .filter(Product.id == product_id)
                .with_for_update()
                .first()
            )
            if not product:
                raise ProductNotFoundError(product_id)

            new_name = update_data.get("name")
            if new_name is not None and new_name != product.name:
                self._ensure_name_available(new_name, exclude_id=product_id)

            for field, value in update_data.items():
                setattr(product, field, value)

            if new_quantity is not None and new_quantity != product.quantity:
                self.ledger.apply_correction(product, new_quantity, reason)
        except InventoryError:
            self.db.rollback()
            raise

        self._commit(f"update product #{product_id}", name=update_data.get("name"))
        self.db.refresh(product)

        self.cache.invalidate_products()
        logger.info(f"Product #{product_id} updated")
        return product

    def delete_product(self, product_id: int) -> None:
        """
        Delete a product. Sales, purchases and adjustments that reference it
        are kept with their product name snapshot.

        Raises:
            ProductNotFoundError: If the product doesn't exist
        """
        product = self.db.query(Product).filter(Product.id == product_id).first()

        if not product:
            raise ProductNotFoundError(product_id)

        self.db.delete(product)
        self._commit(f"delete product #{product_id}")

        self.cache.invalidate_products()
        logger.info(f"Product #{product_id} deleted")

    def list_products(self) -> List[Product]:
        """All products ordered by name."""
        return self.db.query(Product).order_by(Product.name.asc()).all()

    def list_products_cached(self) -> List[dict]:
        """
        Product listing as serialized dictionaries, served from Redis when
        available and cached on a miss.
        """
        # Read before the query: a write landing in between bumps the version
        version = self.cache.products_version()
        cached = self.cache.get_products(version)
        if cached is not None:
            return cached

        products = [
            ProductResponse.model_validate(p).model_dump(mode="json", by_alias=True)
            for p in self.list_products()
        ]
        self.cache.set_products(version, products)
        return products

    def list_low_stock(self) -> List[Product]:
        """Products at or below their minimum stock level, ordered by name."""
        return (
            self.db.query(Product)
            .filter(Product.quantity <= Product.min_stock_level)
            .order_by(Product.name.asc())
            .all()
        )

    def _ensure_name_available(self, name: str, exclude_id: int = None) -> None:
        query = self.db.query(Product.id).filter(Product.name == name)
        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)
        if query.first() is not None:
            raise DuplicateNameError(f"A product named '{name}' already exists")

    @staticmethod
    def _check_ranges(quantity=None, unit_cost=None, min_stock_level=None, **_) -> None:
        if quantity is not None and not 0 <= quantity <= MAX_QUANTITY:
            raise ValidationError(f"Quantity must be between 0 and {MAX_QUANTITY}")
        if min_stock_level is not None and not 0 <= min_stock_level <= MAX_QUANTITY:
            raise ValidationError(f"Minimum stock level must be between 0 and {MAX_QUANTITY}")
        if unit_cost is not None and unit_cost < MIN_UNIT_PRICE:
            raise ValidationError(f"Unit cost must be at least {MIN_UNIT_PRICE}")
        if unit_cost is not None and not is_whole_cents(Decimal(str(unit_cost))):
            raise ValidationError(f"Unit cost must be a whole number of cents, got {unit_cost}")

    def _commit(self, action: str, name: str = None) -> None:
        """Commit the session, translating store failures into domain errors."""
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if name is not None:
                # Unique index on products.name lost a race with another writer
                raise DuplicateNameError(f"A product named '{name}' already exists") from e
            logger.error(f"Integrity error on {action}: {e}")
            raise ValidationError(f"Could not {action}: constraint violated") from e
        except DataError as e:
            self.db.rollback()
            logger.warning(f"Out-of-range value on {action}: {e}")
            raise ValidationError(f"Could not {action}: value out of range") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error on {action}: {e}")
            raise StoreUnavailableError(f"Could not {action}") from e
