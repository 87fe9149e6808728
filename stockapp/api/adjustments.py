from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockapp.database import get_db
from stockapp.services.stock_ledger import StockLedger
from stockapp.schemas.adjustment import AdjustmentResponse

router = APIRouter(prefix="/adjustments", tags=["Stock adjustments"])


@router.get(
    "",
    response_model=list[AdjustmentResponse],
    summary="List stock adjustments",
    description="Every manual stock correction, newest first."
)
def list_adjustments(db: Session = Depends(get_db)):
    """Get all manual stock corrections, newest first."""
    ledger = StockLedger(db)
    return ledger.list_adjustments()
