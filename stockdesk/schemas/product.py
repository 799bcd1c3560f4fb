from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator


class ProductCreate(BaseModel):
    sku: str = Field(min_length=1)
    name: str = Field(min_length=1)
    description: str = ""
    type: str = "General"
    price: Decimal | None = Field(default=None, ge=0)
    image_url: str = ""
    stock_total: int = Field(default=0, ge=0)
    min_stock_level: int | None = Field(default=None, ge=0)
    warehouse_id: str | None = None  # place the initial stock in this warehouse


class ProductUpdate(BaseModel):
    """Descriptive fields only; counters change through the stock endpoint."""

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    type: str | None = None
    price: Decimal | None = Field(default=None, ge=0)
    image_url: str | None = None
    min_stock_level: int | None = Field(default=None, ge=0)

    @field_validator("name", "description", "type", "image_url", "min_stock_level")
    @classmethod
    def not_null(cls, v):
        # omitted fields are skipped; only price may be cleared
        if v is None:
            raise ValueError("may not be null")
        return v


class ProductOut(BaseModel):
    id: str
    sku: str
    name: str
    description: str
    type: str
    price: Decimal | None = None
    image_url: str = ""
    stock_total: int
    stock_used: int
    stock_available: int
    min_stock_level: int
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ImportCsvRequest(BaseModel):
    csv: str
    warehouse_id: str | None = None


class ImportResult(BaseModel):
    imported: int
    products: list[ProductOut]
