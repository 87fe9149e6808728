from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from stockapp.database import get_db
from stockapp.exceptions import InventoryError
from stockapp.services.stock_ledger import StockLedger
from stockapp.schemas.common import ErrorResponse
from stockapp.schemas.purchase import PurchaseCreate, PurchaseResponse, PurchasesSummary

router = APIRouter(prefix="/purchases", tags=["Purchases"])


@router.get(
    "",
    response_model=list[PurchaseResponse],
    summary="List all purchases",
    description="Get every recorded purchase, newest first."
)
def list_purchases(db: Session = Depends(get_db)):
    """Get all purchases, newest first."""
    ledger = StockLedger(db)
    return ledger.list_purchases()


@router.post(
    "",
    response_model=PurchaseResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 400: {"model": ErrorResponse}},
    summary="Record a purchase",
    description="Record a purchase and add the received units to stock."
)
def create_purchase(
    purchase_data: PurchaseCreate,
    db: Session = Depends(get_db)
):
    """
    Record a purchase (restock).

    - **productId**: ID of the product received (required)
    - **quantityPurchased**: Units received, at least 1 (required)
    - **unitPrice**: Acquisition price per unit, at least 0.01 (required)
    - **purchaseDate**: When the purchase happened (optional, defaults to now)
    """
    ledger = StockLedger(db)

    try:
        return ledger.record_purchase(
            purchase_data.product_id,
            purchase_data.quantity_purchased,
            purchase_data.unit_price,
            purchase_data.purchase_date,
        )
    except InventoryError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get(
    "/summary",
    response_model=PurchasesSummary,
    summary="Purchase totals",
    description="Number of purchases, units purchased and total cost."
)
def purchases_summary(db: Session = Depends(get_db)):
    """Get purchase totals."""
    ledger = StockLedger(db)
    return ledger.purchases_summary()
