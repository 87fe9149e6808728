from fastapi import APIRouter, Depends, HTTPException, Path, Response, status
from sqlalchemy.orm import Session
from typing import Annotated

from stockapp.database import get_db
from stockapp.exceptions import InventoryError, ProductNotFoundError
from stockapp.services.inventory_service import InventoryService
from stockapp.services.stock_ledger import StockLedger
from stockapp.schemas.common import ErrorResponse, MAX_INT
from stockapp.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
)
from stockapp.schemas.adjustment import AdjustmentCreate, AdjustmentResponse

router = APIRouter(prefix="/products", tags=["Products"])

ProductId = Annotated[int, Path(le=MAX_INT, description="Product ID")]


@router.get(
    "",
    response_model=list[ProductResponse],
    summary="List all products",
    description="Get all products ordered by name. The listing is cached in Redis."
)
def list_products(db: Session = Depends(get_db)):
    """Get all products, ordered by name ascending."""
    service = InventoryService(db)
    return service.list_products_cached()


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}, 400: {"model": ErrorResponse}},
    summary="Create a new product",
    description="Create a new product with name, initial quantity, unit cost and minimum stock level."
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db)
):
    """
    Create a new product.

    - **name**: Product name, must be unique (required)
    - **quantity**: Initial stock, must be non-negative (required)
    - **unitCost**: Acquisition cost per unit, at least 0.01 (required)
    - **minStockLevel**: Low-stock threshold, must be non-negative (required)
    """
    service = InventoryService(db)
    try:
        return service.create_product(product_data)
    except InventoryError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get(
    "/low-stock",
    response_model=list[ProductResponse],
    summary="List low-stock products",
    description="Products whose quantity is at or below their minimum stock level."
)
def list_low_stock(db: Session = Depends(get_db)):
    """Get products at or below their minimum stock level."""
    service = InventoryService(db)
    return service.list_low_stock()


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get product by ID"
)
def get_product(
    product_id: ProductId,
    db: Session = Depends(get_db)
):
    """Get a product by ID."""
    service = InventoryService(db)
    product = service.get_product(product_id)

    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(ProductNotFoundError(product_id))
        )

    return product


@router.put(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}, 400: {"model": ErrorResponse}},
    summary="Update a product",
    description="Update product details. Only provided fields will be updated."
)
def update_product(
    product_id: ProductId,
    product_data: ProductUpdate,
    db: Session = Depends(get_db)
):
    """
    Update a product.

    Partial updates are supported - only include fields you want to change.
    A new **quantity** is recorded as a manual stock correction; pass
    **adjustmentReason** to say why.
    """
    service = InventoryService(db)
    try:
        return service.update_product(product_id, product_data)
    except InventoryError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete(
    "/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    responses={404: {"model": ErrorResponse}},
    summary="Delete a product",
    description="Delete a product by ID. Its sales and purchases history is kept."
)
def delete_product(
    product_id: ProductId,
    db: Session = Depends(get_db)
):
    """Delete a product."""
    service = InventoryService(db)
    try:
        service.delete_product(product_id)
    except InventoryError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{product_id}/adjustments",
    response_model=AdjustmentResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 400: {"model": ErrorResponse}},
    summary="Correct a product's stock level",
    description="Set the quantity to a counted value. The correction is recorded as a stock adjustment."
)
def correct_stock(
    product_id: ProductId,
    adjustment_data: AdjustmentCreate,
    db: Session = Depends(get_db)
):
    """Correct a product's stock level and record the adjustment."""
    ledger = StockLedger(db)
    try:
        return ledger.correct_stock(product_id, adjustment_data.quantity, adjustment_data.reason)
    except InventoryError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
