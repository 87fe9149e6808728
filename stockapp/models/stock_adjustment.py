from sqlalchemy import Column, Integer, String, DateTime, CheckConstraint

from stockapp.database import Base
from stockapp.models.sale import _utcnow


class StockAdjustment(Base):
    """
    Manual stock correction (e.g. after a stocktake).

    Written only by the stock ledger, never updated. Records the quantity
    before and after so direct edits stay auditable next to sales and
    purchases.
    """
    __tablename__ = "stock_adjustments"

    id = Column(Integer, primary_key=True, index=True)
    product_id = Column(Integer, nullable=False, index=True)
    product_name = Column(String(255), nullable=False)
    previous_quantity = Column(Integer, nullable=False)
    new_quantity = Column(Integer, nullable=False)
    delta = Column(Integer, nullable=False)
    reason = Column(String(500), nullable=False)
    adjusted_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    __table_args__ = (
        CheckConstraint('new_quantity >= 0', name='check_adjusted_quantity_non_negative'),
    )

    def __repr__(self):
        return f"<StockAdjustment(id={self.id}, product_id={self.product_id}, delta={self.delta})>"
