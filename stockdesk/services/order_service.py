import json
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import func
from sqlalchemy.orm import Session

from stockdesk.database import contains_pattern, utcnow
from stockdesk.exceptions import ConflictError, InvalidRequestError, NotFoundError
from stockdesk.models.order import ApprovalStatus, Order, OrderItem, OrderStatus
from stockdesk.models.product import Product
from stockdesk.models.stock_movement import StockAction
from stockdesk.schemas.order import OrderCreate, OrderFilters, OrderStatusUpdate
from stockdesk.services import customer_service, ledger_service, movement_service

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

# Transitions reachable through update_order_status; approval has its own entry point
STATUS_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {
        OrderStatus.NEEDS_APPROVAL,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.NEEDS_APPROVAL: {OrderStatus.APPROVED},
    OrderStatus.APPROVED: {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
}

SORT_COLUMNS = {
    "created_at": Order.created_at,
    "total": Order.total,
    "status": Order.status,
    "approval_status": Order.approval_status,
    "customer": Order.customer_name,
}


def _generate_order_number() -> str:
    ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    short = uuid.uuid4().hex[:6].upper()
    return f"ORD-{ts}-{short}"


def _money(value) -> Decimal:
    return Decimal(value).quantize(CENTS)


def add_status_history(order: Order, status: str, note: str = "") -> None:
    history = json.loads(order.status_history) if order.status_history else []
    history.append({
        "status": OrderStatus(status).value,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "note": note,
    })
    order.status_history = json.dumps(history)


def mark_needs_approval(order: Order, requested_by: str | None, notes: str | None = None) -> None:
    order.status = OrderStatus.NEEDS_APPROVAL
    order.approval_status = ApprovalStatus.NEEDS_APPROVAL
    order.approval_requested_at = utcnow()
    order.approval_requested_by = requested_by
    if notes is not None:
        order.approval_notes = notes
    add_status_history(order, OrderStatus.NEEDS_APPROVAL, notes or "Approval requested")


def create_order(db: Session, data: OrderCreate) -> Order:
    """Create an order and consume stock for every line.

    Stock is always decremented, even past zero. When a line asks for
    more than was available just before its decrement the order is moved
    to ``needs_approval`` instead of being refused. The whole sequence is
    one transaction.
    """
    products: dict[str, Product] = {}
    for item_data in data.items:
        product = ledger_service.lock_product(db, item_data.product_id)
        if not product:
            raise NotFoundError(f"Product {item_data.product_id} not found")
        if not product.is_active:
            raise InvalidRequestError(f"Product {product.sku} is archived")
        products[product.id] = product

    customer = customer_service.resolve_customer(
        db, data.customer_name, data.customer_email, data.customer_phone
    )

    lines = []
    subtotal = Decimal("0")
    for item_data in data.items:
        product = products[item_data.product_id]
        if item_data.unit_price is not None:
            unit_price = _money(item_data.unit_price)
        else:
            unit_price = _money(product.price or 0)
        total_price = _money(unit_price * item_data.quantity)
        subtotal += total_price
        lines.append(OrderItem(
            product_id=product.id,
            quantity=item_data.quantity,
            unit_price=unit_price,
            total_price=total_price,
        ))

    tax = _money(data.tax)
    order = Order(
        order_number=_generate_order_number(),
        customer_id=customer.id if customer else None,
        customer_name=data.customer_name,
        customer_email=data.customer_email,
        customer_phone=data.customer_phone,
        status=OrderStatus.PENDING,
        subtotal=_money(subtotal),
        tax=tax,
        total=_money(subtotal + tax),
        notes=data.notes,
        items=lines,
    )
    add_status_history(order, OrderStatus.PENDING, "Order created")
    db.add(order)
    db.flush()

    oversold: list[str] = []
    for line in lines:
        product = products[line.product_id]
        if line.quantity > product.stock_available:
            oversold.append(product.sku)
        change = ledger_service.apply_stock_change(db, product.id, StockAction.USE, line.quantity)
        movement_service.record_movement(
            db,
            product_id=product.id,
            action=StockAction.USE,
            quantity=-line.quantity,
            previous_stock=change.previous,
            new_stock=change.new,
            reason=f"Used for order {order.order_number}",
            order_id=order.id,
        )

    if oversold:
        requested_by = data.requested_by or data.customer_name
        mark_needs_approval(order, requested_by, f"Insufficient stock for {', '.join(oversold)}")
        logger.warning("Order %s oversells %s; approval requested", order.order_number, ", ".join(oversold))

    ledger_service.commit_stock(db)
    db.refresh(order)
    logger.info("Created order %s with %d item(s), status %s", order.order_number, len(lines), order.status)
    return order


def get_order(db: Session, order_id: str) -> Order | None:
    return db.query(Order).filter(Order.id == order_id).first()


def require_order(db: Session, order_id: str) -> Order:
    order = get_order(db, order_id)
    if not order:
        raise NotFoundError(f"Order {order_id} not found")
    return order


def get_order_by_number(db: Session, order_number: str) -> Order | None:
    return db.query(Order).filter(Order.order_number == order_number).first()


def list_orders(db: Session, filters: OrderFilters) -> list[tuple[Order, int]]:
    """Orders with their line-item count, filtered and sorted."""
    item_count = func.count(OrderItem.id).label("item_count")
    q = (
        db.query(Order, item_count)
        .outerjoin(OrderItem, OrderItem.order_id == Order.id)
        .group_by(Order.id)
    )
    if filters.status:
        q = q.filter(Order.status == filters.status)
    if filters.approval_status:
        q = q.filter(Order.approval_status == filters.approval_status)
    if filters.customer:
        q = q.filter(Order.customer_name.ilike(contains_pattern(filters.customer), escape="\\"))
    if filters.date_from:
        q = q.filter(Order.created_at >= filters.date_from)
    if filters.date_to:
        q = q.filter(Order.created_at <= filters.date_to)
    if filters.min_total is not None:
        q = q.filter(Order.total >= filters.min_total)
    if filters.max_total is not None:
        q = q.filter(Order.total <= filters.max_total)

    column = SORT_COLUMNS[filters.sort_by]
    q = q.order_by(column.asc() if filters.sort_dir == "asc" else column.desc())
    return [(order, count) for order, count in q.offset(filters.skip).limit(filters.limit).all()]


def update_order_status(db: Session, order_id: str, data: OrderStatusUpdate) -> Order:
    order = require_order(db, order_id)
    current = OrderStatus(order.status)
    target = data.status
    if target == OrderStatus.APPROVED:
        raise InvalidRequestError("Orders are approved through the approve endpoint")
    if target not in STATUS_TRANSITIONS[current]:
        raise ConflictError(f"Cannot move order {order.order_number} from {current.value} to {target.value}")

    if target == OrderStatus.NEEDS_APPROVAL:
        mark_needs_approval(order, requested_by=None, notes=data.note or None)
    else:
        order.status = target
        add_status_history(order, target, data.note)
    db.commit()
    db.refresh(order)
    logger.info("Order %s status %s -> %s", order.order_number, current.value, target.value)
    return order
