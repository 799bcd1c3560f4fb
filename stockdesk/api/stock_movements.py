from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from stockdesk.database import get_db
from stockdesk.schemas.stock import StockMovementOut
from stockdesk.services import movement_service

router = APIRouter(prefix="/stock-movements", tags=["Stock Movements"])


@router.get("", response_model=list[StockMovementOut])
def list_movements(
    product_id: str | None = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    """Movement log, newest first."""
    return movement_service.list_movements(db, product_id=product_id, skip=skip, limit=limit)
