from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from stockdesk.database import get_db
from stockdesk.schemas.warehouse import WarehouseCreate, WarehouseOut
from stockdesk.services import warehouse_service

router = APIRouter(prefix="/warehouses", tags=["Warehouses"])


@router.get("", response_model=list[WarehouseOut])
def list_warehouses(db: Session = Depends(get_db)):
    return warehouse_service.list_warehouses(db)


@router.post("", response_model=WarehouseOut, status_code=201)
def create_warehouse(data: WarehouseCreate, db: Session = Depends(get_db)):
    return warehouse_service.create_warehouse(db, data)


@router.get("/{warehouse_id}", response_model=WarehouseOut)
def get_warehouse(warehouse_id: str, db: Session = Depends(get_db)):
    warehouse = warehouse_service.get_warehouse(db, warehouse_id)
    if not warehouse:
        raise HTTPException(404, "Warehouse not found")
    return warehouse
