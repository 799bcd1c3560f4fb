import json
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from stockdesk.models.order import ApprovalStatus, OrderStatus
from stockdesk.schemas.customer import CustomerOut


class OrderItemCreate(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)
    unit_price: Decimal | None = Field(default=None, ge=0)  # empty = product price


class OrderCreate(BaseModel):
    customer_name: str = Field(min_length=1)
    customer_email: str | None = None
    customer_phone: str | None = None
    tax: Decimal = Field(default=Decimal("0"), ge=0)
    notes: str = ""
    requested_by: str | None = None  # approval requester if the order oversells
    items: list[OrderItemCreate] = Field(min_length=1)


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    note: str = ""


class OrderFilters(BaseModel):
    status: OrderStatus | None = None
    approval_status: ApprovalStatus | None = None
    customer: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None
    min_total: Decimal | None = None
    max_total: Decimal | None = None
    sort_by: Literal["created_at", "total", "status", "approval_status", "customer"] = "created_at"
    sort_dir: Literal["asc", "desc"] = "desc"
    skip: int = Field(default=0, ge=0)
    limit: int = Field(default=100, ge=1, le=500)


class OrderProductOut(BaseModel):
    id: str
    sku: str
    name: str
    stock_available: int

    model_config = {"from_attributes": True}


class OrderItemOut(BaseModel):
    id: str
    product_id: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    product: OrderProductOut | None = None

    model_config = {"from_attributes": True}


class OrderSummaryOut(BaseModel):
    id: str
    order_number: str
    customer_id: str | None = None
    customer_name: str
    customer_email: str | None = None
    customer_phone: str | None = None
    status: OrderStatus
    approval_status: ApprovalStatus | None = None
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    approval_requested_by: str | None = None
    approval_requested_at: datetime | None = None
    approved_by: str | None = None
    approved_at: datetime | None = None
    approval_notes: str | None = None
    notes: str = ""
    created_at: datetime
    updated_at: datetime
    item_count: int = 0

    model_config = {"from_attributes": True}

    @field_validator("notes", mode="before")
    @classmethod
    def notes_default(cls, v):
        return v or ""


class OrderOut(OrderSummaryOut):
    status_history: list[dict] = []
    items: list[OrderItemOut] = []
    customer: CustomerOut | None = None

    @field_validator("status_history", mode="before")
    @classmethod
    def parse_status_history(cls, v):
        if isinstance(v, str):
            return json.loads(v) if v else []
        return v or []
