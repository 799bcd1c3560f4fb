from sqlalchemy import func
from sqlalchemy.orm import Session

from stockdesk.config import settings
from stockdesk.models.order import Order, OrderStatus
from stockdesk.models.product import Product, ProductStatus
from stockdesk.models.stock_movement import StockMovement
from stockdesk.models.warehouse import Warehouse
from stockdesk.services import movement_service


def dashboard_stats(db: Session) -> dict:
    active = db.query(Product).filter(Product.status == ProductStatus.ACTIVE.value)
    total_products = active.count()
    low_stock_count = active.filter(Product.stock_available <= Product.min_stock_level).count()

    by_status = dict(db.query(Order.status, func.count(Order.id)).group_by(Order.status).all())
    total_orders = sum(by_status.values())

    warehouse_count = db.query(Warehouse).filter(Warehouse.is_active.is_(True)).count()

    return {
        "total_products": total_products,
        "low_stock_count": low_stock_count,
        "total_orders": total_orders,
        "pending_orders": by_status.get(OrderStatus.PENDING, 0),
        "orders_needing_approval": by_status.get(OrderStatus.NEEDS_APPROVAL, 0),
        "warehouse_count": warehouse_count,
    }


def recent_movements(db: Session, limit: int | None = None) -> list[StockMovement]:
    return movement_service.list_movements(db, limit=limit or settings.RECENT_MOVEMENTS_LIMIT)
