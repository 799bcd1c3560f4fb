import logging

from sqlalchemy.orm import Session, joinedload

from stockdesk.config import settings
from stockdesk.database import contains_pattern
from stockdesk.exceptions import ConflictError, InvalidRequestError, NotFoundError
from stockdesk.models.order import Order, OrderItem
from stockdesk.models.product import Product, ProductStatus
from stockdesk.models.stock_movement import StockAction
from stockdesk.schemas.product import ProductCreate, ProductUpdate
from stockdesk.schemas.stock import StockUpdate
from stockdesk.services import auth_service, ledger_service, movement_service, warehouse_service
from stockdesk.services.ledger_service import StockChange

logger = logging.getLogger(__name__)


def create_product(db: Session, data: ProductCreate) -> Product:
    if get_product_by_sku(db, data.sku):
        raise ConflictError(f"Product with SKU {data.sku} already exists")
    if data.warehouse_id:
        warehouse_service.require_warehouse(db, data.warehouse_id)

    product = Product(
        sku=data.sku,
        name=data.name,
        description=data.description,
        type=data.type,
        price=data.price,
        image_url=data.image_url,
        stock_total=data.stock_total,
        stock_used=0,
        stock_available=data.stock_total,
        min_stock_level=(
            data.min_stock_level if data.min_stock_level is not None else settings.DEFAULT_MIN_STOCK_LEVEL
        ),
        status=ProductStatus.ACTIVE.value,
    )
    db.add(product)
    db.flush()

    if data.stock_total > 0:
        movement_service.record_movement(
            db,
            product_id=product.id,
            action=StockAction.ADD,
            quantity=data.stock_total,
            previous_stock=0,
            new_stock=data.stock_total,
            reason="Initial stock on product creation",
            warehouse_id=data.warehouse_id,
        )
        if data.warehouse_id:
            warehouse_service.upsert_quantity(db, product.id, data.warehouse_id, data.stock_total)

    db.commit()
    db.refresh(product)
    logger.info("Created product %s (%s) with %d in stock", product.sku, product.id, product.stock_total)
    return product


def get_product(db: Session, product_id: str) -> Product | None:
    return db.query(Product).filter(Product.id == product_id).first()


def require_product(db: Session, product_id: str) -> Product:
    product = get_product(db, product_id)
    if not product:
        raise NotFoundError(f"Product {product_id} not found")
    return product


def get_product_by_sku(db: Session, sku: str) -> Product | None:
    return db.query(Product).filter(Product.sku == sku).first()


def list_products(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    search: str | None = None,
    category: str | None = None,
    include_archived: bool = False,
) -> list[Product]:
    q = db.query(Product)
    if not include_archived:
        q = q.filter(Product.status == ProductStatus.ACTIVE.value)
    if search:
        q = q.filter(Product.name.ilike(contains_pattern(search), escape="\\"))
    if category:
        q = q.filter(Product.type == category)
    return q.order_by(Product.name).offset(skip).limit(limit).all()


def update_product(db: Session, product_id: str, data: ProductUpdate) -> Product:
    product = require_product(db, product_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(product, field, value)
    ledger_service.commit_stock(db)
    db.refresh(product)
    return product


def archive_product(db: Session, product_id: str) -> Product:
    product = require_product(db, product_id)
    product.status = ProductStatus.ARCHIVED.value
    ledger_service.commit_stock(db)
    db.refresh(product)
    logger.info("Archived product %s", product.sku)
    return product


def get_low_stock(db: Session) -> list[Product]:
    return (
        db.query(Product)
        .filter(
            Product.status == ProductStatus.ACTIVE.value,
            Product.stock_available <= Product.min_stock_level,
        )
        .order_by(Product.stock_available.asc())
        .all()
    )


def set_stock(db: Session, product_id: str, data: StockUpdate, user_id: str | None = None) -> StockChange:
    """Apply a manual add/use/adjust and log it, in one transaction."""
    if not get_product(db, product_id):
        raise NotFoundError(f"Product {product_id} not found")
    if data.warehouse_id:
        warehouse_service.require_warehouse(db, data.warehouse_id)
    actor_id = auth_service.resolve_actor_id(db, data.user_id or user_id)
    if data.action == StockAction.TRANSFER:
        raise InvalidRequestError("Transfers move stock between warehouses; use transfer_stock")

    change = ledger_service.apply_stock_change(db, product_id, data.action, data.quantity)
    movement_service.record_movement(
        db,
        product_id=product_id,
        action=data.action,
        quantity=change.delta,
        previous_stock=change.previous,
        new_stock=change.new,
        reason=data.reason,
        warehouse_id=data.warehouse_id,
        user_id=actor_id,
    )
    ledger_service.commit_stock(db)
    return change


def get_orders_for_product(db: Session, product_id: str) -> list[OrderItem]:
    return (
        db.query(OrderItem)
        .join(Order, OrderItem.order_id == Order.id)
        .options(joinedload(OrderItem.order).joinedload(Order.customer))
        .filter(OrderItem.product_id == product_id)
        .order_by(Order.created_at.desc())
        .all()
    )


def get_product_usage(db: Session, product_id: str) -> dict:
    product = require_product(db, product_id)
    return {
        "product": product,
        "warehouse_stock": warehouse_service.list_stock_for_product(db, product_id),
        "movements": movement_service.list_movements(db, product_id=product_id, limit=1000),
        "order_items": get_orders_for_product(db, product_id),
    }
