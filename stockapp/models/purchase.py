from sqlalchemy import Column, Integer, String, Numeric, DateTime, CheckConstraint

from stockapp.database import Base
from stockapp.models.sale import _utcnow


class Purchase(Base):
    """
    Purchase model: an append-only record of stock entering inventory.

    Attributes:
        id: Unique identifier for the purchase
        product_id: ID of the restocked product (no foreign key, survives deletion)
        product_name: Product name snapshot
        unit_price: Acquisition price per unit
        quantity_purchased: Number of units received
        total_price: unit_price * quantity_purchased, stored at creation
        purchase_date: When the purchase happened
    """
    __tablename__ = "purchases"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    unit_price = Column(Numeric(12, 2), nullable=False)
    quantity_purchased = Column(Integer, nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)
    purchase_date = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    __table_args__ = (
        CheckConstraint('quantity_purchased >= 1', name='check_quantity_purchased_positive'),
        CheckConstraint('unit_price >= 0.01', name='check_purchase_unit_price_minimum'),
    )

    def __repr__(self):
        return f"<Purchase(id={self.id}, product_id={self.product_id}, quantity_purchased={self.quantity_purchased})>"
