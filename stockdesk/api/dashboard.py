from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockdesk.database import get_db
from stockdesk.schemas.product import ProductOut
from stockdesk.schemas.stock import StockMovementOut
from stockdesk.services import product_service, report_service

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/stats")
def stats(db: Session = Depends(get_db)):
    return report_service.dashboard_stats(db)


@router.get("/recent-movements", response_model=list[StockMovementOut])
def recent_movements(limit: int | None = Query(None, ge=1, le=100), db: Session = Depends(get_db)):
    return report_service.recent_movements(db, limit=limit)


@router.get("/low-stock", response_model=list[ProductOut])
def low_stock(db: Session = Depends(get_db)):
    return product_service.get_low_stock(db)
