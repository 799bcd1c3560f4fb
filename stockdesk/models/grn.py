import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Date, DateTime, ForeignKey, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockdesk.database import Base


class Grn(Base):
    """Goods receipt note attached to an order that needs approval. At most one per order."""

    __tablename__ = "grns"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    order_id: Mapped[str] = mapped_column(String, ForeignKey("orders.id"), unique=True, nullable=False)

    vendor_name: Mapped[str | None] = mapped_column(String, nullable=True)
    vendor_bill_no: Mapped[str | None] = mapped_column(String, nullable=True)
    vendor_bill_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    indent_no: Mapped[str | None] = mapped_column(String, nullable=True)
    po_no: Mapped[str | None] = mapped_column(String, nullable=True)
    po_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    challan_no: Mapped[str | None] = mapped_column(String, nullable=True)
    grn_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    job_order_no: Mapped[str | None] = mapped_column(String, nullable=True)
    location: Mapped[str | None] = mapped_column(String, nullable=True)
    received_by: Mapped[str | None] = mapped_column(String, nullable=True)
    person_name: Mapped[str | None] = mapped_column(String, nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    order: Mapped["Order"] = relationship("Order", back_populates="grn")
    items: Mapped[list["GrnItem"]] = relationship(
        "GrnItem", back_populates="grn", cascade="all, delete-orphan", order_by="GrnItem.sr_no"
    )


class GrnItem(Base):
    __tablename__ = "grn_items"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    grn_id: Mapped[str] = mapped_column(String, ForeignKey("grns.id"), nullable=False, index=True)
    sr_no: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mfg_part_code: Mapped[str | None] = mapped_column(String, nullable=True)
    required_part: Mapped[str | None] = mapped_column(String, nullable=True)
    make_model: Mapped[str | None] = mapped_column(String, nullable=True)
    part_no: Mapped[str | None] = mapped_column(String, nullable=True)
    condition: Mapped[str | None] = mapped_column(String, nullable=True)
    qty_unit: Mapped[str | None] = mapped_column(String, nullable=True)
    rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    quantity: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    amount: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)

    grn: Mapped["Grn"] = relationship("Grn", back_populates="items")


from stockdesk.models.order import Order  # noqa: E402, F401
