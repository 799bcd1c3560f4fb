import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockdesk.database import Base


class Warehouse(Base):
    __tablename__ = "warehouses"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String, nullable=False)
    location: Mapped[str] = mapped_column(String, nullable=False)
    address: Mapped[str] = mapped_column(String, default="")
    latitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    longitude: Mapped[float | None] = mapped_column(Float, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())


class WarehouseStock(Base):
    """Physical placement of a product in a warehouse.

    Independent of the product counters: quantities here are not summed
    into ``Product.stock_total`` and may disagree with it.
    """

    __tablename__ = "warehouse_stock"
    __table_args__ = (UniqueConstraint("product_id", "warehouse_id", name="uq_warehouse_stock_product_warehouse"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    product_id: Mapped[str] = mapped_column(String, ForeignKey("products.id"), nullable=False, index=True)
    warehouse_id: Mapped[str] = mapped_column(String, ForeignKey("warehouses.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Bin coordinates
    aisle: Mapped[str | None] = mapped_column(String, nullable=True)
    rack: Mapped[str | None] = mapped_column(String, nullable=True)
    box_number: Mapped[str | None] = mapped_column(String, nullable=True)

    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    product: Mapped["Product"] = relationship("Product", back_populates="warehouse_stock")
    warehouse: Mapped["Warehouse"] = relationship("Warehouse")


# Avoid circular import
from stockdesk.models.product import Product  # noqa: E402, F401
