from fastapi import APIRouter, Depends, HTTPException, Response, UploadFile
from sqlalchemy.orm import Session

from stockdesk.api.auth import get_optional_user
from stockdesk.database import get_db
from stockdesk.models.user import User
from stockdesk.schemas.customer import CustomerOut
from stockdesk.schemas.order import OrderItemOut, OrderSummaryOut
from stockdesk.schemas.product import ImportCsvRequest, ImportResult, ProductCreate, ProductOut, ProductUpdate
from stockdesk.schemas.stock import (
    ProductOrderOut,
    ProductUsageOut,
    StockChangeOut,
    StockMovementOut,
    StockTransfer,
    StockUpdate,
    WarehouseStockOut,
)
from stockdesk.schemas.warehouse import WarehouseQuantitySet
from stockdesk.services import import_service, movement_service, product_service, warehouse_service

router = APIRouter(prefix="/products", tags=["Products"])


@router.post("", response_model=ProductOut, status_code=201)
def create_product(data: ProductCreate, db: Session = Depends(get_db)):
    return product_service.create_product(db, data)


@router.get("", response_model=list[ProductOut])
def list_products(
    skip: int = 0,
    limit: int = 100,
    search: str | None = None,
    category: str | None = None,
    include_archived: bool = False,
    db: Session = Depends(get_db),
):
    return product_service.list_products(
        db, skip=skip, limit=limit, search=search, category=category, include_archived=include_archived
    )


@router.get("/low-stock", response_model=list[ProductOut])
def low_stock(db: Session = Depends(get_db)):
    return product_service.get_low_stock(db)


@router.post("/import-csv", response_model=ImportResult)
def import_csv(data: ImportCsvRequest, db: Session = Depends(get_db)):
    if not data.csv.strip():
        raise HTTPException(400, "CSV content is required")
    created = import_service.import_products_csv(db, data.csv, data.warehouse_id)
    return {"imported": len(created), "products": created}


@router.post("/import", response_model=ImportResult)
def import_csv_file(file: UploadFile, warehouse_id: str | None = None, db: Session = Depends(get_db)):
    if not file.filename or not file.filename.endswith(".csv"):
        raise HTTPException(400, "Only CSV files are supported")
    try:
        content = file.file.read().decode("utf-8-sig")
    except UnicodeDecodeError:
        raise HTTPException(400, "CSV must be UTF-8 text")
    created = import_service.import_products_csv(db, content, warehouse_id)
    return {"imported": len(created), "products": created}


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: str, db: Session = Depends(get_db)):
    product = product_service.get_product(db, product_id)
    if not product:
        raise HTTPException(404, "Product not found")
    return product


@router.get("/{product_id}/usage", response_model=ProductUsageOut)
def product_usage(product_id: str, db: Session = Depends(get_db)):
    usage = product_service.get_product_usage(db, product_id)
    orders = [
        ProductOrderOut(
            order=OrderSummaryOut.model_validate(item.order),
            item=OrderItemOut.model_validate(item),
            customer=CustomerOut.model_validate(item.order.customer) if item.order.customer else None,
        )
        for item in usage["order_items"]
    ]
    return ProductUsageOut(
        product=ProductOut.model_validate(usage["product"]),
        warehouse_stock=[WarehouseStockOut.model_validate(row) for row in usage["warehouse_stock"]],
        movements=[StockMovementOut.model_validate(m) for m in usage["movements"]],
        orders=orders,
    )


@router.put("/{product_id}", response_model=ProductOut)
def update_product(product_id: str, data: ProductUpdate, db: Session = Depends(get_db)):
    return product_service.update_product(db, product_id, data)


@router.delete("/{product_id}", status_code=204)
def delete_product(product_id: str, db: Session = Depends(get_db)):
    product_service.archive_product(db, product_id)
    return Response(status_code=204)


@router.post("/{product_id}/stock", response_model=StockChangeOut)
def set_stock(
    product_id: str,
    data: StockUpdate,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    change = product_service.set_stock(db, product_id, data, user_id=user.id if user else None)
    product = product_service.get_product(db, product_id)
    return {"previous": change.previous, "new": change.new, "product": product}


@router.post("/{product_id}/transfer", response_model=WarehouseStockOut)
def transfer_stock(
    product_id: str,
    data: StockTransfer,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return warehouse_service.transfer_stock(db, product_id, data, user_id=user.id if user else None)


@router.put("/{product_id}/warehouse-stock/{warehouse_id}", response_model=WarehouseStockOut)
def set_warehouse_quantity(
    product_id: str, warehouse_id: str, data: WarehouseQuantitySet, db: Session = Depends(get_db)
):
    return warehouse_service.set_quantity(db, product_id, warehouse_id, data.quantity, data.location)


@router.get("/{product_id}/movements", response_model=list[StockMovementOut])
def product_movements(product_id: str, skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    product_service.require_product(db, product_id)
    return movement_service.list_movements(db, product_id=product_id, skip=skip, limit=limit)
