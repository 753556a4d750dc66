# shopstock/schemas/ledger.py
# type: ignore

from pydantic import AliasChoices, BaseModel, Field, field_serializer
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from shopstock.models.inventory import MAX_INT, MAX_MONEY


# -------------------------------------------------------------------
# Input Schemas
# -------------------------------------------------------------------

class LineItemIn(BaseModel):
    """One (product, quantity, unit price) line of a sale or restock."""
    product_id: int = Field(..., ge=1, le=MAX_INT, validation_alias=AliasChoices("product_id", "productId"))
    quantity: int = Field(..., ge=1, le=MAX_INT)
    price: Decimal = Field(..., ge=0, le=MAX_MONEY, decimal_places=2, description="Unit price")


class SaleCreate(BaseModel):
    items: List[LineItemIn]
    # Optional client-side total; checked against the recomputed one
    total: Optional[Decimal] = None


class RestockCreate(BaseModel):
    supplier_id: Optional[int] = Field(None, ge=1, le=MAX_INT, validation_alias=AliasChoices("supplier_id", "supplierId"))
    items: List[LineItemIn]
    total: Optional[Decimal] = None


# -------------------------------------------------------------------
# Output Schemas
# -------------------------------------------------------------------

class LineItemInDB(BaseModel):
    product_id: int
    quantity: int
    price: Decimal

    model_config = {
        "from_attributes": True,
    }

    @field_serializer("price")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class SaleInDB(BaseModel):
    id: int
    date: datetime
    total: Decimal
    user_id: int
    partially_applied: bool
    items: List[LineItemInDB]

    model_config = {
        "from_attributes": True,
    }

    @field_serializer("total")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class RestockInDB(SaleInDB):
    supplier_id: Optional[int] = None
