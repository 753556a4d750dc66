# shopstock/models/ledger.py
# type: ignore

from sqlalchemy import Column, Integer, Boolean, ForeignKey, Numeric, TIMESTAMP
from sqlalchemy.orm import relationship
from datetime import datetime
from shopstock.database import Base


# ***************************************************************
# Append-only ledger. Rows are inserted once and never updated.
# Line items keep the raw product_id (no FK) so deleting a product
# does not touch history.
# ***************************************************************

class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(TIMESTAMP, nullable=False, default=datetime.now, index=True)
    total = Column(Numeric(10, 2), nullable=False)
    user_id = Column(Integer, nullable=False)

    # True when some line items were skipped (MISSING_PRODUCT_POLICY=skip)
    partially_applied = Column(Boolean, nullable=False, default=False)

    items = relationship(
        "SaleItem",
        back_populates="sale",
        order_by="SaleItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True)
    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)

    product_id = Column(Integer, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    sale = relationship("Sale", back_populates="items")


class Restock(Base):
    __tablename__ = "restocks"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(TIMESTAMP, nullable=False, default=datetime.now, index=True)
    supplier_id = Column(Integer, nullable=True)
    total = Column(Numeric(10, 2), nullable=False)
    user_id = Column(Integer, nullable=False)
    partially_applied = Column(Boolean, nullable=False, default=False)

    items = relationship(
        "RestockItem",
        back_populates="restock",
        order_by="RestockItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class RestockItem(Base):
    __tablename__ = "restock_items"

    id = Column(Integer, primary_key=True)
    restock_id = Column(Integer, ForeignKey("restocks.id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False)

    product_id = Column(Integer, nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    restock = relationship("Restock", back_populates="items")
