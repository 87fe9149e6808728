from pydantic import Field
from datetime import datetime
from typing import Optional

from stockapp.schemas.common import CamelModel, Money, Price, MAX_INT


class PurchaseCreate(CamelModel):
    """Schema for recording a purchase (restock)."""
    product_id: int = Field(..., ge=1, le=MAX_INT, description="ID of the product being restocked")
    quantity_purchased: int = Field(..., ge=1, le=MAX_INT, description="Units received")
    unit_price: Price = Field(..., description="Acquisition price per unit")
    purchase_date: Optional[datetime] = Field(None, description="Defaults to the time of recording")


class PurchaseResponse(CamelModel):
    """Schema for purchase response."""
    id: int
    product_id: int
    product_name: str
    unit_price: Money
    quantity_purchased: int
    total_price: Money
    purchase_date: datetime


class PurchasesSummary(CamelModel):
    """Totals across all recorded purchases."""
    count: int
    units_purchased: int
    total_cost: Money
