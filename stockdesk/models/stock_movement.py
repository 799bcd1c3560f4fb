import uuid
from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockdesk.database import Base, utcnow


class StockAction(str, PyEnum):
    ADD = "add"
    USE = "use"
    TRANSFER = "transfer"
    ADJUST = "adjust"


class StockMovement(Base):
    """Audit trail entry for one stock-affecting action. Rows are never updated or deleted."""

    __tablename__ = "stock_movements"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id: Mapped[str] = mapped_column(String, ForeignKey("products.id"), nullable=False, index=True)
    warehouse_id: Mapped[str | None] = mapped_column(String, ForeignKey("warehouses.id"), nullable=True)
    action: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)  # signed: negative for use
    previous_stock: Mapped[int | None] = mapped_column(Integer, nullable=True)
    new_stock: Mapped[int | None] = mapped_column(Integer, nullable=True)
    reason: Mapped[str] = mapped_column(Text, default="")
    user_id: Mapped[str | None] = mapped_column(String, ForeignKey("users.id"), nullable=True)
    order_id: Mapped[str | None] = mapped_column(String, ForeignKey("orders.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, index=True)

    product: Mapped["Product"] = relationship("Product")
    warehouse: Mapped["Warehouse"] = relationship("Warehouse")


from stockdesk.models.product import Product  # noqa: E402, F401
from stockdesk.models.warehouse import Warehouse  # noqa: E402, F401
