import logging

from sqlalchemy.orm import Session, joinedload

from stockdesk.exceptions import InvalidRequestError, NotFoundError
from stockdesk.models.product import Product
from stockdesk.models.stock_movement import StockAction
from stockdesk.models.warehouse import Warehouse, WarehouseStock
from stockdesk.schemas.stock import StockTransfer
from stockdesk.schemas.warehouse import BinLocation, WarehouseCreate
from stockdesk.services import auth_service, ledger_service, movement_service

logger = logging.getLogger(__name__)


def create_warehouse(db: Session, data: WarehouseCreate) -> Warehouse:
    warehouse = Warehouse(**data.model_dump())
    db.add(warehouse)
    db.commit()
    db.refresh(warehouse)
    return warehouse


def get_warehouse(db: Session, warehouse_id: str) -> Warehouse | None:
    return db.query(Warehouse).filter(Warehouse.id == warehouse_id).first()


def list_warehouses(db: Session) -> list[Warehouse]:
    return db.query(Warehouse).filter(Warehouse.is_active.is_(True)).order_by(Warehouse.name).all()


def require_warehouse(db: Session, warehouse_id: str) -> Warehouse:
    warehouse = get_warehouse(db, warehouse_id)
    if not warehouse:
        raise NotFoundError(f"Warehouse {warehouse_id} not found")
    return warehouse


def get_stock_row(db: Session, product_id: str, warehouse_id: str) -> WarehouseStock | None:
    return (
        db.query(WarehouseStock)
        .filter(WarehouseStock.product_id == product_id, WarehouseStock.warehouse_id == warehouse_id)
        .first()
    )


def upsert_quantity(
    db: Session, product_id: str, warehouse_id: str, quantity: int, location: BinLocation | None = None
) -> WarehouseStock:
    """Set the physical quantity for a (product, warehouse) pair without committing.

    Bin fields are overwritten only when ``location`` is given. The
    product's ledger counters are not touched.
    """
    row = get_stock_row(db, product_id, warehouse_id)
    if row is None:
        row = WarehouseStock(product_id=product_id, warehouse_id=warehouse_id, quantity=quantity)
        db.add(row)
    else:
        row.quantity = quantity
    if location is not None:
        row.aisle = location.aisle
        row.rack = location.rack
        row.box_number = location.box_number
    return row


def set_quantity(
    db: Session, product_id: str, warehouse_id: str, quantity: int, location: BinLocation | None = None
) -> WarehouseStock:
    if not db.query(Product).filter(Product.id == product_id).first():
        raise NotFoundError(f"Product {product_id} not found")
    require_warehouse(db, warehouse_id)
    row = upsert_quantity(db, product_id, warehouse_id, quantity, location)
    db.commit()
    db.refresh(row)
    return row


def list_stock_for_product(db: Session, product_id: str) -> list[WarehouseStock]:
    return (
        db.query(WarehouseStock)
        .options(joinedload(WarehouseStock.warehouse))
        .filter(WarehouseStock.product_id == product_id)
        .all()
    )


def transfer_stock(db: Session, product_id: str, data: StockTransfer, user_id: str | None = None) -> WarehouseStock:
    """Move physical quantity between two warehouses.

    Ledger counters stay as they are; the move is recorded as a
    ``transfer`` movement whose before/after snapshot is the unchanged
    availability.
    """
    product = ledger_service.lock_product(db, product_id)
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    source_wh = require_warehouse(db, data.from_warehouse_id)
    dest_wh = require_warehouse(db, data.to_warehouse_id)
    actor_id = auth_service.resolve_actor_id(db, data.user_id or user_id)

    source = get_stock_row(db, product_id, source_wh.id)
    held = source.quantity if source else 0
    if held < data.quantity:
        raise InvalidRequestError(
            f"Warehouse {source_wh.name} holds {held} of {product.sku}, cannot transfer {data.quantity}"
        )
    source.quantity = held - data.quantity

    dest = get_stock_row(db, product_id, dest_wh.id)
    if dest is None:
        dest = WarehouseStock(product_id=product_id, warehouse_id=dest_wh.id, quantity=0)
        db.add(dest)
    dest.quantity += data.quantity

    movement_service.record_movement(
        db,
        product_id=product_id,
        action=StockAction.TRANSFER,
        quantity=data.quantity,
        previous_stock=product.stock_available,
        new_stock=product.stock_available,
        reason=data.reason or f"Transfer {source_wh.name} -> {dest_wh.name}",
        warehouse_id=source_wh.id,
        user_id=actor_id,
    )
    ledger_service.commit_stock(db)
    db.refresh(dest)
    logger.info("Transferred %d x %s from %s to %s", data.quantity, product.sku, source_wh.name, dest_wh.name)
    return dest
