from datetime import datetime
from decimal import Decimal
from typing import List, Optional
import logging

from sqlalchemy import func, select, update
from sqlalchemy.exc import DataError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from stockapp.exceptions import (
    InsufficientStockError,
    InventoryError,
    ProductNotFoundError,
    StoreUnavailableError,
    ValidationError,
)
from stockapp.models.product import Product
from stockapp.models.purchase import Purchase
from stockapp.models.sale import Sale
from stockapp.models.stock_adjustment import StockAdjustment
from stockapp.utils.cache import CacheService, cache_service

logger = logging.getLogger(__name__)

MIN_UNIT_PRICE = Decimal("0.01")
CENT = Decimal("0.01")
# Range of the Integer quantity columns
MAX_QUANTITY = 2**31 - 1
DEFAULT_CORRECTION_REASON = "Manual correction"


def is_low_stock(product) -> bool:
    """True when the product sits at or below its minimum stock level."""
    return product.quantity <= product.min_stock_level


def is_whole_cents(amount: Decimal) -> bool:
    """True when the amount has no digits below the cent."""
    return amount.is_finite() and amount.normalize().as_tuple().exponent >= -2


class StockLedger:
    """
    Applies every quantity change to a product and records it.

    CONCURRENCY STRATEGY:
    =====================
    Sales and purchases never read the quantity before writing it. Each one
    is a single conditional UPDATE evaluated by the database:

        UPDATE products SET quantity = quantity - :n
        WHERE id = :id AND quantity >= :n

    If no row matched, the product is either missing or short on stock, and
    nothing has been written. Two concurrent sales against the same product
    are therefore serialized by the row write itself: the second one sees the
    quantity left by the first. The ledger row is inserted in the same
    transaction, so quantity and history commit together or not at all.

    Manual corrections set an absolute quantity, so they lock the row with
    SELECT ... FOR UPDATE before reading the previous value.
    """

    def __init__(self, db: Session, cache: CacheService = cache_service):
        self.db = db
        self.cache = cache

    def record_sale(
        self,
        product_id: int,
        quantity_sold: int,
        unit_price: Decimal,
        sale_date: Optional[datetime] = None,
    ) -> Sale:
        """
        Sell units of a product.

        Args:
            product_id: Product being sold
            quantity_sold: Units sold, at least 1
            unit_price: Sale price per unit, at least 0.01
            sale_date: When the sale happened (defaults to now)

        Returns:
            The created Sale

        Raises:
            ValidationError: If quantity or price is out of range
            ProductNotFoundError: If the product doesn't exist
            InsufficientStockError: If fewer than quantity_sold units are in stock
        """
        unit_price = self._validate(quantity_sold, unit_price)

        try:
            row = self.db.execute(
                update(Product)
                .where(Product.id == product_id, Product.quantity >= quantity_sold)
                .values(quantity=Product.quantity - quantity_sold)
                .returning(Product.name, Product.quantity),
                execution_options={"synchronize_session": False},
            ).first()

            if row is None:
                product = self.db.get(Product, product_id)
                if product is None:
                    raise ProductNotFoundError(product_id)
                raise InsufficientStockError(product.name, product.quantity, quantity_sold)

            sale = Sale(
                product_id=product_id,
                product_name=row.name,
                unit_price=unit_price,
                quantity_sold=quantity_sold,
                total_price=unit_price * quantity_sold,
            )
            if sale_date is not None:
                sale.sale_date = sale_date

            self.db.add(sale)
            self.db.commit()
            self.db.refresh(sale)

        except InsufficientStockError as e:
            self.db.rollback()
            logger.warning(f"Sale rejected for product #{product_id}: {e}")
            raise
        except InventoryError:
            self.db.rollback()
            raise
        except IntegrityError as e:
            # check_quantity_non_negative caught a concurrent modification
            self.db.rollback()
            logger.error(f"Integrity error recording sale for product #{product_id}: {e}")
            product = self.db.get(Product, product_id)
            if product is None:
                raise ProductNotFoundError(product_id) from e
            raise InsufficientStockError(product.name, product.quantity, quantity_sold) from e
        except DataError as e:
            self.db.rollback()
            logger.warning(f"Out-of-range sale for product #{product_id}: {e}")
            raise ValidationError("Quantity or price is out of range for the store") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error recording sale for product #{product_id}: {e}")
            raise StoreUnavailableError("Could not record the sale") from e

        self.cache.invalidate_products()
        logger.info(
            f"Sale #{sale.id} recorded: {quantity_sold} x '{sale.product_name}', "
            f"{row.quantity} left in stock"
        )
        return sale

    def record_purchase(
        self,
        product_id: int,
        quantity_purchased: int,
        unit_price: Decimal,
        purchase_date: Optional[datetime] = None,
    ) -> Purchase:
        """
        Restock a product. The resulting quantity is only bounded by the
        range of the quantity column.

        Raises:
            ValidationError: If quantity or price is out of range, or the
                restock would overflow the stored quantity
            ProductNotFoundError: If the product doesn't exist
        """
        unit_price = self._validate(quantity_purchased, unit_price)

        try:
            row = self.db.execute(
                update(Product)
                .where(
                    Product.id == product_id,
                    Product.quantity <= MAX_QUANTITY - quantity_purchased,
                )
                .values(quantity=Product.quantity + quantity_purchased)
                .returning(Product.name, Product.quantity),
                execution_options={"synchronize_session": False},
            ).first()

            if row is None:
                product = self.db.get(Product, product_id)
                if product is None:
                    raise ProductNotFoundError(product_id)
                raise ValidationError(
                    f"Purchase of {quantity_purchased} would take {product.name} "
                    f"past the maximum quantity of {MAX_QUANTITY}"
                )

            purchase = Purchase(
                product_id=product_id,
                product_name=row.name,
                unit_price=unit_price,
                quantity_purchased=quantity_purchased,
                total_price=unit_price * quantity_purchased,
            )
            if purchase_date is not None:
                purchase.purchase_date = purchase_date

            self.db.add(purchase)
            self.db.commit()
            self.db.refresh(purchase)

        except InventoryError:
            self.db.rollback()
            raise
        except DataError as e:
            self.db.rollback()
            logger.warning(f"Out-of-range purchase for product #{product_id}: {e}")
            raise ValidationError("Quantity or price is out of range for the store") from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error recording purchase for product #{product_id}: {e}")
            raise StoreUnavailableError("Could not record the purchase") from e

        self.cache.invalidate_products()
        logger.info(
            f"Purchase #{purchase.id} recorded: {quantity_purchased} x '{purchase.product_name}', "
            f"{row.quantity} now in stock"
        )
        return purchase

    def correct_stock(
        self,
        product_id: int,
        new_quantity: int,
        reason: Optional[str] = None,
    ) -> StockAdjustment:
        """
        Set a product's quantity to a counted value and record the correction.

        Returns:
            The created StockAdjustment

        Raises:
            ValidationError: If new_quantity is negative
            ProductNotFoundError: If the product doesn't exist
        """
        try:
            product = (
                self.db.query(Product)
                .filter(Product.id == product_id)
                .with_for_update()
                .first()
            )
            if not product:
                raise ProductNotFoundError(product_id)

            adjustment = self.apply_correction(product, new_quantity, reason)
            self.db.commit()
            self.db.refresh(adjustment)

        except InventoryError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Error correcting stock for product #{product_id}: {e}")
            raise StoreUnavailableError("Could not correct the stock level") from e

        self.cache.invalidate_products()
        return adjustment

    def apply_correction(
        self,
        product: Product,
        new_quantity: int,
        reason: Optional[str] = None,
    ) -> StockAdjustment:
        """
        Stage a manual correction on an already-locked product.

        The caller owns the transaction: nothing is committed here.
        """
        if new_quantity is None or new_quantity < 0:
            raise ValidationError("Quantity must be a non-negative integer")
        if new_quantity > MAX_QUANTITY:
            raise ValidationError(f"Quantity must be at most {MAX_QUANTITY}")

        previous = product.quantity
        product.quantity = new_quantity
        adjustment = StockAdjustment(
            product_id=product.id,
            product_name=product.name,
            previous_quantity=previous,
            new_quantity=new_quantity,
            delta=new_quantity - previous,
            reason=reason or DEFAULT_CORRECTION_REASON,
        )
        self.db.add(adjustment)
        logger.info(
            f"Stock of '{product.name}' corrected from {previous} to {new_quantity} "
            f"({adjustment.reason})"
        )
        return adjustment

    def list_sales(self) -> List[Sale]:
        """All sales, newest first."""
        return (
            self.db.query(Sale)
            .order_by(Sale.sale_date.desc(), Sale.id.desc())
            .all()
        )

    def list_purchases(self) -> List[Purchase]:
        """All purchases, newest first."""
        return (
            self.db.query(Purchase)
            .order_by(Purchase.purchase_date.desc(), Purchase.id.desc())
            .all()
        )

    def list_adjustments(self) -> List[StockAdjustment]:
        """All manual corrections, newest first."""
        return (
            self.db.query(StockAdjustment)
            .order_by(StockAdjustment.adjusted_at.desc(), StockAdjustment.id.desc())
            .all()
        )

    def sales_summary(self) -> dict:
        count, units, revenue = self.db.execute(
            select(
                func.count(Sale.id),
                func.coalesce(func.sum(Sale.quantity_sold), 0),
                func.coalesce(func.sum(Sale.total_price), 0),
            )
        ).one()
        return {
            "count": count,
            "units_sold": int(units),
            "total_revenue": Decimal(str(revenue)).quantize(CENT),
        }

    def purchases_summary(self) -> dict:
        count, units, cost = self.db.execute(
            select(
                func.count(Purchase.id),
                func.coalesce(func.sum(Purchase.quantity_purchased), 0),
                func.coalesce(func.sum(Purchase.total_price), 0),
            )
        ).one()
        return {
            "count": count,
            "units_purchased": int(units),
            "total_cost": Decimal(str(cost)).quantize(CENT),
        }

    @staticmethod
    def _validate(quantity: int, unit_price) -> Decimal:
        """Check numeric preconditions and return the price as a Decimal."""
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError("Quantity must be an integer of at least 1")
        if quantity > MAX_QUANTITY:
            raise ValidationError(f"Quantity must be at most {MAX_QUANTITY}")
        try:
            price = Decimal(str(unit_price))
        except ArithmeticError:
            raise ValidationError(f"Invalid unit price: {unit_price!r}") from None
        if not price.is_finite() or price < MIN_UNIT_PRICE:
            raise ValidationError(f"Unit price must be at least {MIN_UNIT_PRICE}")
        if not is_whole_cents(price):
            raise ValidationError(f"Unit price must be a whole number of cents, got {price}")
        return price
