from sqlalchemy import Column, Integer, String, Numeric, DateTime, CheckConstraint
from sqlalchemy.sql import func

from stockapp.database import Base


class Product(Base):
    """
    Product model representing a stock-keeping unit.

    Attributes:
        id: Unique identifier for the product
        name: Product name (unique)
        quantity: Units currently in stock (never negative)
        unit_cost: Price paid when acquiring one unit
        min_stock_level: Threshold at or below which the product is low on stock
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, unique=True, index=True)
    quantity = Column(Integer, nullable=False, default=0)
    unit_cost = Column(Numeric(12, 2), nullable=False)
    min_stock_level = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Database-level constraints to ensure data integrity
    __table_args__ = (
        CheckConstraint('quantity >= 0', name='check_quantity_non_negative'),
        CheckConstraint('unit_cost >= 0.01', name='check_unit_cost_minimum'),
        CheckConstraint('min_stock_level >= 0', name='check_min_stock_non_negative'),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', quantity={self.quantity})>"
