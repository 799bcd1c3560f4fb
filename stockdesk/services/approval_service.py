"""Approval workflow layered on the order engine.

An order that needs review sits in ``needs_approval`` until someone
approves it. The requester may document what was actually received
from a vendor with a goods receipt note (GRN); each order has at most
one GRN, and resubmitting replaces its item lines wholesale.
"""

import logging

from sqlalchemy.orm import Session

from stockdesk.database import utcnow
from stockdesk.exceptions import ConflictError
from stockdesk.models.grn import Grn, GrnItem
from stockdesk.models.order import ApprovalStatus, Order, OrderStatus
from stockdesk.schemas.grn import GrnHeader, GrnItemIn
from stockdesk.services.order_service import add_status_history, mark_needs_approval, require_order

logger = logging.getLogger(__name__)

REQUESTABLE_STATUSES = {OrderStatus.PENDING, OrderStatus.NEEDS_APPROVAL}
APPROVABLE_STATUSES = {OrderStatus.PENDING, OrderStatus.NEEDS_APPROVAL, OrderStatus.APPROVED}


def _check_requestable(order: Order) -> None:
    if OrderStatus(order.status) not in REQUESTABLE_STATUSES:
        raise ConflictError(f"Order {order.order_number} is {OrderStatus(order.status).value}; approval cannot be requested")


def request_approval(
    db: Session, order_id: str, requested_by: str | None = None, notes: str | None = None
) -> Order:
    """Send an order for approval without receipt paperwork."""
    order = require_order(db, order_id)
    _check_requestable(order)
    mark_needs_approval(order, requested_by or order.customer_name, notes)
    db.commit()
    db.refresh(order)
    logger.info("Approval requested for order %s by %s", order.order_number, order.approval_requested_by)
    return order


def get_grn_for_order(db: Session, order_id: str) -> Grn | None:
    return db.query(Grn).filter(Grn.order_id == order_id).first()


def submit_approval_with_grn(
    db: Session,
    order_id: str,
    header: GrnHeader,
    items: list[GrnItemIn],
    requested_by: str | None = None,
    notes: str | None = None,
) -> tuple[Order, Grn]:
    """Upsert the order's GRN, replace its items and send the order for approval."""
    order = require_order(db, order_id)
    _check_requestable(order)

    grn = get_grn_for_order(db, order.id)
    if grn is None:
        grn = Grn(order_id=order.id, **header.model_dump())
        db.add(grn)
        replaced = 0
    else:
        for field, value in header.model_dump(exclude_unset=True).items():
            setattr(grn, field, value)
        replaced = len(grn.items)

    # delete-orphan cascade removes the previous lines on flush
    grn.items = [GrnItem(**item.model_dump()) for item in items]

    mark_needs_approval(order, requested_by or order.customer_name, notes)
    db.commit()
    db.refresh(order)
    db.refresh(grn)
    logger.info(
        "GRN for order %s saved: %d item(s), %d replaced", order.order_number, len(grn.items), replaced
    )
    return order, grn


def approve_order(db: Session, order_id: str, approved_by: str, notes: str | None = None) -> Order:
    """Approve an order. Approving again overwrites approver and timestamp."""
    order = require_order(db, order_id)
    current = OrderStatus(order.status)
    if current not in APPROVABLE_STATUSES:
        raise ConflictError(f"Order {order.order_number} is {current.value} and cannot be approved")

    order.status = OrderStatus.APPROVED
    order.approval_status = ApprovalStatus.APPROVED
    order.approved_by = approved_by
    order.approved_at = utcnow()
    if notes is not None:
        order.approval_notes = notes
    add_status_history(order, OrderStatus.APPROVED, notes or f"Approved by {approved_by}")
    db.commit()
    db.refresh(order)
    logger.info("Order %s approved by %s", order.order_number, approved_by)
    return order


def get_order_grn(db: Session, order_id: str) -> Grn | None:
    order = require_order(db, order_id)
    return get_grn_for_order(db, order.id)
