from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from stockdesk.api.auth import get_optional_user
from stockdesk.database import get_db
from stockdesk.models.user import User
from stockdesk.schemas.grn import (
    ApprovalRequest,
    ApprovalResult,
    ApproveRequest,
    GrnHeader,
    OrderGrnOut,
)
from stockdesk.schemas.order import OrderCreate, OrderFilters, OrderOut, OrderStatusUpdate, OrderSummaryOut
from stockdesk.services import approval_service, order_service

router = APIRouter(prefix="/orders", tags=["Orders"])


def _actor_name(user: User | None) -> str | None:
    if user is None:
        return None
    return user.display_name or user.username


@router.post("", response_model=OrderOut, status_code=201)
def create_order(data: OrderCreate, db: Session = Depends(get_db)):
    return order_service.create_order(db, data)


@router.get("", response_model=list[OrderSummaryOut])
def list_orders(filters: Annotated[OrderFilters, Query()], db: Session = Depends(get_db)):
    results = []
    for order, item_count in order_service.list_orders(db, filters):
        summary = OrderSummaryOut.model_validate(order)
        summary.item_count = item_count
        results.append(summary)
    return results


@router.get("/{order_id}", response_model=OrderOut)
def get_order(order_id: str, db: Session = Depends(get_db)):
    order = order_service.get_order(db, order_id)
    if not order:
        raise HTTPException(404, "Order not found")
    return order


@router.put("/{order_id}/status", response_model=OrderOut)
def update_status(order_id: str, data: OrderStatusUpdate, db: Session = Depends(get_db)):
    return order_service.update_order_status(db, order_id, data)


@router.post("/{order_id}/request-approval", response_model=ApprovalResult)
def request_approval(
    order_id: str,
    data: ApprovalRequest | None = None,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    """Send an order for approval, optionally with its goods receipt note."""
    data = data or ApprovalRequest()
    requested_by = data.requested_by or _actor_name(user)
    if data.has_grn:
        order, grn = approval_service.submit_approval_with_grn(
            db,
            order_id,
            header=data.grn or GrnHeader(),
            items=data.items or [],
            requested_by=requested_by,
            notes=data.notes,
        )
        return {"success": True, "order": order, "grn": grn}
    order = approval_service.request_approval(db, order_id, requested_by=requested_by, notes=data.notes)
    return {"success": True, "order": order, "grn": approval_service.get_grn_for_order(db, order.id)}


@router.post("/{order_id}/approve", response_model=ApprovalResult)
def approve(
    order_id: str,
    data: ApproveRequest | None = None,
    user: User | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    data = data or ApproveRequest()
    approved_by = data.approved_by or _actor_name(user)
    if not approved_by:
        raise HTTPException(400, "approved_by is required")
    order = approval_service.approve_order(db, order_id, approved_by, data.notes)
    return {"success": True, "order": order, "grn": approval_service.get_grn_for_order(db, order.id)}


@router.get("/{order_id}/grn", response_model=OrderGrnOut)
def get_grn(order_id: str, db: Session = Depends(get_db)):
    grn = approval_service.get_order_grn(db, order_id)
    if grn is None:
        return {"grn": None, "items": []}
    return {"grn": grn, "items": grn.items}
