from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Numeric, DateTime, CheckConstraint

from stockapp.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class Sale(Base):
    """
    Sale model: an append-only record of stock leaving inventory.

    product_id is kept without a foreign key so the row outlives the
    product; product_name is the name at the time of the sale.

    Attributes:
        id: Unique identifier for the sale
        product_id: ID of the product that was sold
        product_name: Product name snapshot
        unit_price: Sale price per unit
        quantity_sold: Number of units sold
        total_price: unit_price * quantity_sold, stored at creation
        sale_date: When the sale happened
    """
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    quantity_sold = Column(Integer, nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    sale_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    __table_args__ = (
        CheckConstraint('quantity_sold >= 1', name='check_quantity_sold_positive'),
        CheckConstraint('unit_price >= 0.01', name='check_sale_unit_price_minimum'),
    )

    def __repr__(self):
        return f"<Sale(id={self.id}, product_id={self.product_id}, quantity_sold={self.quantity_sold})>"
