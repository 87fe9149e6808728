from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from stockapp.database import get_db
from stockapp.exceptions import InventoryError
from stockapp.services.inventory_service import InventoryService
from stockapp.services.stock_ledger import StockLedger
from stockapp.schemas.common import ErrorResponse
from stockapp.schemas.sale import SaleCreate, SaleResponse, SalesSummary
from stockapp.tasks.stock_tasks import dispatch_low_stock_alert

router = APIRouter(prefix="/sales", tags=["Sales"])


@router.get(
    "",
    response_model=list[SaleResponse],
    summary="List all sales",
    description="Get every recorded sale, newest first."
)
def list_sales(db: Session = Depends(get_db)):
    """Get all sales, newest first."""
    ledger = StockLedger(db)
    return ledger.list_sales()


@router.post(
    "",
    response_model=SaleResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 400: {"model": ErrorResponse}},
    summary="Record a sale",
    description="""
    Record a sale and take the sold units out of stock.

    **Overselling protection:**
    The stock is decremented with a single conditional update, so
    concurrent sales of the same product can never push its quantity
    below zero. A sale asking for more than is in stock gets a 400 error
    naming the product and its current quantity.

    If the sale leaves the product at or below its minimum stock level,
    a background Celery task raises a low-stock alert.
    """
)
def create_sale(
    sale_data: SaleCreate,
    db: Session = Depends(get_db)
):
    """
    Record a sale.

    - **productId**: ID of the product sold (required)
    - **quantitySold**: Units sold, at least 1 (required)
    - **unitPrice**: Sale price per unit, at least 0.01 (required)
    - **saleDate**: When the sale happened (optional, defaults to now)
    """
    ledger = StockLedger(db)

    try:
        sale = ledger.record_sale(
            sale_data.product_id,
            sale_data.quantity_sold,
            sale_data.unit_price,
            sale_data.sale_date,
        )
    except InventoryError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

    product = InventoryService(db, ledger).get_product(sale.product_id)
    if product:
        dispatch_low_stock_alert(product)

    return sale


@router.get(
    "/summary",
    response_model=SalesSummary,
    summary="Sales totals",
    description="Number of sales, units sold and total revenue."
)
def sales_summary(db: Session = Depends(get_db)):
    """Get sales totals."""
    ledger = StockLedger(db)
    return ledger.sales_summary()
