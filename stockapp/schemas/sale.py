from pydantic import Field
from datetime import datetime
from typing import Optional

from stockapp.schemas.common import CamelModel, Money, Price, MAX_INT


class SaleCreate(CamelModel):
    """Schema for recording a sale."""
    product_id: int = Field(..., ge=1, le=MAX_INT, description="ID of the product being sold")
    quantity_sold: int = Field(..., ge=1, le=MAX_INT, description="Units sold")
    unit_price: Price = Field(..., description="Sale price per unit")
    sale_date: Optional[datetime] = Field(None, description="Defaults to the time of recording")


class SaleResponse(CamelModel):
    """Schema for sale response."""
    id: int
    product_id: int
    product_name: str
    unit_price: Money
    quantity_sold: int
    total_price: Money
    sale_date: datetime


class SalesSummary(CamelModel):
    """Totals across all recorded sales."""
    count: int
    units_sold: int
    total_revenue: Money
