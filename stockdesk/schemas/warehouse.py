from datetime import datetime

from pydantic import BaseModel, Field


class WarehouseCreate(BaseModel):
    name: str = Field(min_length=1)
    location: str = Field(min_length=1)
    address: str = ""
    latitude: float | None = None
    longitude: float | None = None


class WarehouseOut(BaseModel):
    id: str
    name: str
    location: str
    address: str
    latitude: float | None = None
    longitude: float | None = None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class BinLocation(BaseModel):
    aisle: str | None = None
    rack: str | None = None
    box_number: str | None = None


class WarehouseQuantitySet(BaseModel):
    quantity: int = Field(ge=0)
    location: BinLocation | None = None
