# shopstock/models/inventory.py
# type: ignore

from sqlalchemy import Column, Integer, String, Text, ForeignKey, Numeric, TIMESTAMP, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from decimal import Decimal
from shopstock.database import Base

UNCATEGORIZED = "Uncategorized"

# Largest values the INTEGER and NUMERIC(10, 2) columns can hold
MAX_INT = 2**31 - 1
MAX_MONEY = Decimal("99999999.99")


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)

    products = relationship("Product", back_populates="category")


class Supplier(Base):
    __tablename__ = "suppliers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    contact_person = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)

    # Category names this supplier delivers (free tags, not foreign keys)
    categories = Column(JSON, nullable=False, default=list)

    # Only written by the ledger when a restock is recorded
    last_order_date = Column(TIMESTAMP, nullable=True)

    products = relationship("Product", back_populates="supplier")


class Product(Base):
    """Current stock state of a product."""
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(100), nullable=True, unique=True)

    # Weak references: a deleted category/supplier leaves NULL behind
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    supplier_id = Column(Integer, ForeignKey("suppliers.id", ondelete="SET NULL"), nullable=True)

    quantity = Column(Integer, nullable=False, default=0)
    # NULL means "use DEFAULT_ALERT_THRESHOLD"
    alert_threshold = Column(Integer, nullable=True)

    # NUMERIC(10,2) for money
    purchase_price = Column(Numeric(10, 2), nullable=False)
    selling_price = Column(Numeric(10, 2), nullable=False)

    expiry_date = Column(TIMESTAMP, nullable=True)
    created_at = Column(TIMESTAMP, default=datetime.now)

    # Bumped on every ledger quantity write
    version = Column(Integer, nullable=False, default=1)

    category = relationship("Category", back_populates="products", lazy="joined")
    supplier = relationship("Supplier", back_populates="products")

    @property
    def category_name(self) -> str:
        return self.category.name if self.category is not None else UNCATEGORIZED
