# shopstock/schemas/inventory.py
# type: ignore

from pydantic import BaseModel, Field, field_serializer, field_validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from shopstock.models.inventory import MAX_INT, MAX_MONEY


# -------------------------------------------------------------------
# Category
# -------------------------------------------------------------------

class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

    model_config = {
        "from_attributes": True,
    }

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(CategoryBase):
    name: Optional[str] = Field(None, min_length=1, max_length=255)


class CategoryInDB(CategoryBase):
    id: int


# -------------------------------------------------------------------
# Supplier
# -------------------------------------------------------------------

class SupplierBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_person: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    categories: List[str] = Field(default_factory=list, description="Category names this supplier delivers")

    model_config = {
        "from_attributes": True,
    }


class SupplierCreate(SupplierBase):
    pass


class SupplierUpdate(SupplierBase):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    categories: Optional[List[str]] = None


class SupplierInDB(SupplierBase):
    id: int
    last_order_date: Optional[datetime] = None


# -------------------------------------------------------------------
# Product
# -------------------------------------------------------------------

class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    sku: Optional[str] = Field(None, max_length=100, description="Stock Keeping Unit (unique when set)")
    category_id: Optional[int] = Field(None, ge=1, le=MAX_INT)
    supplier_id: Optional[int] = Field(None, ge=1, le=MAX_INT)
    quantity: int = Field(0, ge=0, le=MAX_INT)
    alert_threshold: Optional[int] = Field(None, ge=0, le=MAX_INT, description="Falls back to DEFAULT_ALERT_THRESHOLD when unset")
    purchase_price: Decimal = Field(..., ge=0, le=MAX_MONEY, decimal_places=2, description="Cost of goods")
    selling_price: Decimal = Field(..., ge=0, le=MAX_MONEY, decimal_places=2, description="Default selling price")
    expiry_date: Optional[datetime] = None

    model_config = {
        "from_attributes": True,
    }

    # Decimal -> float for JSON output
    @field_serializer("purchase_price", "selling_price", when_used="json")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class ProductCreate(ProductBase):
    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be blank")
        return value


class ProductUpdate(ProductBase):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    quantity: Optional[int] = Field(None, ge=0, le=MAX_INT)
    purchase_price: Optional[Decimal] = Field(None, ge=0, le=MAX_MONEY, decimal_places=2)
    selling_price: Optional[Decimal] = Field(None, ge=0, le=MAX_MONEY, decimal_places=2)

    @field_serializer("purchase_price", "selling_price", when_used="json")
    def serialize_decimal(self, value: Optional[Decimal]) -> Optional[float]:
        return float(value) if value is not None else None


class ProductInDB(ProductBase):
    id: int
    category_name: str
    version: int
    created_at: datetime

    @field_serializer("created_at")
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()
