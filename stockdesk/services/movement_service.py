import logging

from sqlalchemy.orm import Session, joinedload

from stockdesk.models.stock_movement import StockAction, StockMovement

logger = logging.getLogger(__name__)


def record_movement(
    db: Session,
    product_id: str,
    action: StockAction,
    quantity: int,
    previous_stock: int | None,
    new_stock: int | None,
    reason: str = "",
    warehouse_id: str | None = None,
    user_id: str | None = None,
    order_id: str | None = None,
) -> StockMovement:
    """Append an audit entry. Movements are insert-only."""
    movement = StockMovement(
        product_id=product_id,
        action=StockAction(action).value,
        quantity=quantity,
        previous_stock=previous_stock,
        new_stock=new_stock,
        reason=reason,
        warehouse_id=warehouse_id,
        user_id=user_id,
        order_id=order_id,
    )
    db.add(movement)
    logger.info(
        "Movement %s product=%s qty=%d stock %s -> %s (%s)",
        movement.action, product_id, quantity, previous_stock, new_stock, reason,
    )
    return movement


def list_movements(
    db: Session, product_id: str | None = None, skip: int = 0, limit: int = 100
) -> list[StockMovement]:
    q = db.query(StockMovement).options(
        joinedload(StockMovement.product),
        joinedload(StockMovement.warehouse),
    )
    if product_id:
        q = q.filter(StockMovement.product_id == product_id)
    return q.order_by(StockMovement.created_at.desc()).offset(skip).limit(limit).all()
