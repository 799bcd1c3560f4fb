import uuid
from datetime import datetime
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import DateTime, Integer, Numeric, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from stockdesk.config import settings
from stockdesk.database import Base


class ProductStatus(str, PyEnum):
    ACTIVE = "active"
    ARCHIVED = "archived"


class Product(Base):
    __tablename__ = "products"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    sku: Mapped[str] = mapped_column(String, unique=True, index=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    type: Mapped[str] = mapped_column(String, default="General")
    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    image_url: Mapped[str] = mapped_column(String, default="")

    # Ledger counters: stock_available == stock_total - stock_used, written together
    stock_total: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    stock_used: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    stock_available: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    min_stock_level: Mapped[int] = mapped_column(Integer, default=lambda: settings.DEFAULT_MIN_STOCK_LEVEL)

    # Soft delete; archived rows stay for movement history
    status: Mapped[str] = mapped_column(String, default=ProductStatus.ACTIVE.value, index=True)

    version: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    warehouse_stock: Mapped[list["WarehouseStock"]] = relationship("WarehouseStock", back_populates="product")

    __mapper_args__ = {"version_id_col": version}

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE.value

    @property
    def is_low_stock(self) -> bool:
        return self.stock_available <= (self.min_stock_level or 0)


# Avoid circular import; WarehouseStock lives in stockdesk.models.warehouse
from stockdesk.models.warehouse import WarehouseStock  # noqa: E402, F401
