from pydantic import Field
from datetime import datetime
from typing import Optional

from stockapp.schemas.common import CamelModel, MAX_INT


class AdjustmentCreate(CamelModel):
    """Schema for a manual stock correction."""
    quantity: int = Field(..., ge=0, le=MAX_INT, description="Counted stock level")
    reason: Optional[str] = Field(None, max_length=500, description="Why the stock was corrected")


class AdjustmentResponse(CamelModel):
    """Schema for stock adjustment response."""
    id: int
    product_id: int
    product_name: str
    previous_quantity: int
    new_quantity: int
    delta: int
    reason: str
    adjusted_at: datetime
