from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from stockdesk.models.stock_movement import StockAction
from stockdesk.schemas.customer import CustomerOut
from stockdesk.schemas.order import OrderItemOut, OrderSummaryOut
from stockdesk.schemas.product import ProductOut
from stockdesk.schemas.warehouse import WarehouseOut


class StockUpdate(BaseModel):
    action: StockAction
    quantity: int
    warehouse_id: str | None = None
    reason: str = ""
    user_id: str | None = None

    @model_validator(mode="after")
    def check_quantity(self):
        if self.action == StockAction.TRANSFER:
            raise ValueError("use the transfer endpoint to move stock between warehouses")
        if self.action == StockAction.ADJUST:
            if self.quantity < 0:
                raise ValueError("adjusted total cannot be negative")
        elif self.quantity <= 0:
            raise ValueError("quantity must be positive")
        return self


class StockTransfer(BaseModel):
    from_warehouse_id: str
    to_warehouse_id: str
    quantity: int = Field(gt=0)
    reason: str = ""
    user_id: str | None = None

    @model_validator(mode="after")
    def check_warehouses(self):
        if self.from_warehouse_id == self.to_warehouse_id:
            raise ValueError("source and destination warehouse must differ")
        return self


class StockChangeOut(BaseModel):
    previous: int
    new: int
    product: ProductOut


class StockMovementOut(BaseModel):
    id: str
    product_id: str
    warehouse_id: str | None = None
    action: str
    quantity: int
    previous_stock: int | None = None
    new_stock: int | None = None
    reason: str = ""
    user_id: str | None = None
    order_id: str | None = None
    created_at: datetime
    product_sku: str = ""
    product_name: str = ""
    warehouse_name: str | None = None

    model_config = {"from_attributes": True}

    @model_validator(mode="before")
    @classmethod
    def flatten_relations(cls, v):
        product = getattr(v, "product", None)
        if product is None:
            return v
        warehouse = getattr(v, "warehouse", None)
        return {
            "id": v.id,
            "product_id": v.product_id,
            "warehouse_id": v.warehouse_id,
            "action": v.action,
            "quantity": v.quantity,
            "previous_stock": v.previous_stock,
            "new_stock": v.new_stock,
            "reason": v.reason or "",
            "user_id": v.user_id,
            "order_id": v.order_id,
            "created_at": v.created_at,
            "product_sku": product.sku,
            "product_name": product.name,
            "warehouse_name": warehouse.name if warehouse else None,
        }


class WarehouseStockOut(BaseModel):
    id: str
    product_id: str
    warehouse_id: str
    quantity: int
    aisle: str | None = None
    rack: str | None = None
    box_number: str | None = None
    updated_at: datetime
    warehouse: WarehouseOut | None = None

    model_config = {"from_attributes": True}


class ProductOrderOut(BaseModel):
    order: OrderSummaryOut
    item: OrderItemOut
    customer: CustomerOut | None = None


class ProductUsageOut(BaseModel):
    product: ProductOut
    warehouse_stock: list[WarehouseStockOut]
    movements: list[StockMovementOut]
    orders: list[ProductOrderOut]
