# shopstock/schemas/dashboard.py

from pydantic import BaseModel, field_serializer
from typing import List
from decimal import Decimal
from datetime import datetime

from shopstock.schemas.inventory import ProductInDB


class DashboardStats(BaseModel):
    range: str
    start_date: datetime
    total_sales: Decimal
    low_stock_count: int
    out_of_stock_count: int
    expiring_items_count: int
    top_category: str

    @field_serializer("total_sales")
    def serialize_decimal(self, value: Decimal) -> float:
        return float(value)


class AlertSummary(BaseModel):
    """The three alert sets for the current catalog."""
    out_of_stock: List[ProductInDB]
    low_stock: List[ProductInDB]
    expiring_soon: List[ProductInDB]
