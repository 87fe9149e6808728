from pydantic import Field, ConfigDict, computed_field
from datetime import datetime
from typing import Optional

from stockapp.schemas.common import CamelModel, Price, MAX_INT
from stockapp.services.stock_ledger import is_low_stock


class ProductBase(CamelModel):
    """Base schema for Product with common attributes."""
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=255, description="Product name (unique)")
    quantity: int = Field(..., ge=0, le=MAX_INT, description="Units in stock (must be non-negative)")
    unit_cost: Price = Field(..., description="Acquisition cost per unit")
    min_stock_level: int = Field(..., ge=0, le=MAX_INT, description="Low-stock threshold")


class ProductCreate(ProductBase):
    """Schema for creating a new product."""
    pass


class ProductUpdate(CamelModel):
    """
    Schema for updating an existing product. All fields are optional.

    A changed quantity is applied as a manual stock correction and
    recorded with adjustment_reason.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Product name")
    quantity: Optional[int] = Field(None, ge=0, le=MAX_INT, description="Corrected stock level")
    unit_cost: Optional[Price] = Field(None, description="Acquisition cost per unit")
    min_stock_level: Optional[int] = Field(None, ge=0, le=MAX_INT, description="Low-stock threshold")
    adjustment_reason: Optional[str] = Field(None, max_length=500, description="Why quantity was corrected")


class ProductResponse(ProductBase):
    """Schema for product response including all fields."""
    id: int
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="isLowStock")
    @property
    def is_low_stock(self) -> bool:
        return is_low_stock(self)
