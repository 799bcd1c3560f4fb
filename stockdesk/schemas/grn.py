from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel

from stockdesk.schemas.order import OrderOut


class GrnHeader(BaseModel):
    vendor_name: str | None = None
    vendor_bill_no: str | None = None
    vendor_bill_date: date | None = None
    indent_no: str | None = None
    po_no: str | None = None
    po_date: date | None = None
    challan_no: str | None = None
    grn_date: date | None = None
    job_order_no: str | None = None
    location: str | None = None
    received_by: str | None = None
    person_name: str | None = None
    remarks: str | None = None


class GrnItemIn(BaseModel):
    sr_no: int | None = None
    mfg_part_code: str | None = None
    required_part: str | None = None
    make_model: str | None = None
    part_no: str | None = None
    condition: str | None = None
    qty_unit: str | None = None
    rate: Decimal | None = None
    quantity: Decimal | None = None
    amount: Decimal | None = None


class ApprovalRequest(BaseModel):
    grn: GrnHeader | None = None
    items: list[GrnItemIn] | None = None
    notes: str | None = None
    requested_by: str | None = None

    @property
    def has_grn(self) -> bool:
        has_header = self.grn is not None and bool(self.grn.model_dump(exclude_none=True))
        has_items = bool(self.items)
        return has_header or has_items


class ApproveRequest(BaseModel):
    approved_by: str | None = None  # empty = authenticated user
    notes: str | None = None


class GrnItemOut(GrnItemIn):
    id: str
    grn_id: str

    model_config = {"from_attributes": True}


class GrnOut(GrnHeader):
    id: str
    order_id: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class OrderGrnOut(BaseModel):
    grn: GrnOut | None = None
    items: list[GrnItemOut] = []


class ApprovalResult(BaseModel):
    success: bool = True
    order: OrderOut
    grn: GrnOut | None = None
