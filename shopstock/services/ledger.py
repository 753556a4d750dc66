# shopstock/services/ledger.py

import logging
from collections import OrderedDict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from shopstock.core.config import settings
from shopstock.core.exceptions import (
    ConsistencyError,
    InsufficientStockError,
    NotFoundError,
    ValidationError,
)
from shopstock.models.inventory import MAX_INT, MAX_MONEY, Product
from shopstock.models.ledger import Restock, RestockItem, Sale, SaleItem
from shopstock.schemas.ledger import LineItemIn
from shopstock.services.catalog import CatalogStore
from shopstock.services.common import get_by_id, parse_payload, storage_guard, to_money, unit_of_work

logger = logging.getLogger(__name__)

STOCK_POLICIES = ("reject", "clamp")
MISSING_PRODUCT_POLICIES = ("fail", "skip")


# ***************************************************************
# Line item helpers
# ***************************************************************

def parse_line_items(items: Optional[Iterable]) -> List[LineItemIn]:
    """Validates every line item before anything touches the database."""
    lines = []
    for index, item in enumerate(items or []):
        lines.append(parse_payload(LineItemIn, item, prefix=f"items[{index}] "))
    if not lines:
        raise ValidationError("A transaction needs at least one line item.")
    return lines


def lines_total(lines: List[LineItemIn]) -> Decimal:
    total = to_money(sum((line.price * line.quantity for line in lines), Decimal("0")))
    if total > MAX_MONEY:
        raise ValidationError(f"total {total} exceeds the maximum amount ({MAX_MONEY}).")
    return total


def check_total(claimed, computed: Decimal) -> None:
    if claimed is None:
        return
    try:
        claimed = to_money(claimed)
    except ArithmeticError as exc:
        raise ValidationError(f"total {claimed!r} is not a number.") from exc
    if claimed != computed:
        raise ValidationError(f"total {claimed} does not match the line items ({computed}).")


def demand_by_product(lines: List[LineItemIn]) -> Dict[int, int]:
    """Summed quantity per product id, ascending id (lock order)."""
    demand: Dict[int, int] = {}
    for line in lines:
        demand[line.product_id] = demand.get(line.product_id, 0) + line.quantity
        if demand[line.product_id] > MAX_INT:
            raise ValidationError(f"quantity for product {line.product_id} exceeds the maximum ({MAX_INT}).")
    return OrderedDict(sorted(demand.items()))


# ***************************************************************
# Ledger
# ***************************************************************

class TransactionLedger:
    """
    Append-only record of sales and restocks.

    Recording a transaction inserts the ledger row, its line items and every
    stock change in a single database transaction. Product rows are locked in
    ascending id order and each decrement is a conditional UPDATE, so two
    concurrent sales can never take the same unit.
    """

    def __init__(
        self,
        db: Session,
        insufficient_stock_policy: Optional[str] = None,
        missing_product_policy: Optional[str] = None,
    ):
        self.db = db
        self.catalog = CatalogStore(db)
        self.insufficient_stock_policy = insufficient_stock_policy or settings.INSUFFICIENT_STOCK_POLICY
        self.missing_product_policy = missing_product_policy or settings.MISSING_PRODUCT_POLICY

        if self.insufficient_stock_policy not in STOCK_POLICIES:
            raise ValueError(f"Unknown insufficient stock policy {self.insufficient_stock_policy!r}")
        if self.missing_product_policy not in MISSING_PRODUCT_POLICIES:
            raise ValueError(f"Unknown missing product policy {self.missing_product_policy!r}")

    # 1. Reads ------------------------------------------------------

    def list_sales(self) -> List[Sale]:
        with storage_guard("list sales"):
            return self.db.query(Sale).all()

    def get_sale(self, sale_id: int) -> Sale:
        with storage_guard("read sale"):
            sale = get_by_id(self.db, Sale, sale_id)
        if sale is None:
            raise NotFoundError("Sale", sale_id)
        return sale

    def list_restocks(self) -> List[Restock]:
        with storage_guard("list restocks"):
            return self.db.query(Restock).all()

    def get_restock(self, restock_id: int) -> Restock:
        with storage_guard("read restock"):
            restock = get_by_id(self.db, Restock, restock_id)
        if restock is None:
            raise NotFoundError("Restock", restock_id)
        return restock

    # 2. Sales ------------------------------------------------------

    def record_sale(self, items, user_id: int, total=None, when: Optional[datetime] = None) -> Sale:
        lines = parse_line_items(items)
        computed = lines_total(lines)
        check_total(total, computed)
        when = when or datetime.now()

        with unit_of_work(self.db, "record sale"):
            demand = demand_by_product(lines)
            on_hand = self._lock_products(demand)
            skipped = self._unresolved(demand, on_hand, "sale")

            for product_id, quantity in demand.items():
                if product_id not in skipped:
                    self._take(product_id, quantity, on_hand[product_id])

            sale = Sale(
                date=when,
                total=computed,
                user_id=user_id,
                partially_applied=bool(skipped),
                items=[
                    SaleItem(position=i, product_id=line.product_id, quantity=line.quantity, price=line.price)
                    for i, line in enumerate(lines)
                ],
            )
            self.db.add(sale)

        self.db.refresh(sale)
        logger.info("Recorded sale %s: total=%s lines=%d user=%s", sale.id, sale.total, len(lines), user_id)
        return sale

    # 3. Restocks ---------------------------------------------------

    def record_restock(
        self,
        items,
        user_id: int,
        supplier_id: Optional[int] = None,
        total=None,
        when: Optional[datetime] = None,
    ) -> Restock:
        lines = parse_line_items(items)
        computed = lines_total(lines)
        check_total(total, computed)
        when = when or datetime.now()

        with unit_of_work(self.db, "record restock"):
            if supplier_id is not None:
                self.catalog.record_order(supplier_id, when)

            demand = demand_by_product(lines)
            on_hand = self._lock_products(demand)
            skipped = self._unresolved(demand, on_hand, "restock")

            for product_id, quantity in demand.items():
                if product_id not in skipped:
                    self._give(product_id, quantity, on_hand[product_id])

            restock = Restock(
                date=when,
                supplier_id=supplier_id,
                total=computed,
                user_id=user_id,
                partially_applied=bool(skipped),
                items=[
                    RestockItem(position=i, product_id=line.product_id, quantity=line.quantity, price=line.price)
                    for i, line in enumerate(lines)
                ],
            )
            self.db.add(restock)

        self.db.refresh(restock)
        logger.info(
            "Recorded restock %s: total=%s lines=%d supplier=%s user=%s",
            restock.id, restock.total, len(lines), supplier_id, user_id,
        )
        return restock

    # 4. Stock mutation ---------------------------------------------

    def _lock_products(self, demand: Dict[int, int]) -> Dict[int, int]:
        """SELECT ... FOR UPDATE on the touched products. Returns {id: quantity} for those that exist."""
        rows = self.db.execute(
            select(Product.id, Product.quantity)
            .where(Product.id.in_(list(demand)))
            .order_by(Product.id)
            .with_for_update()
        ).all()
        return {row.id: row.quantity for row in rows}

    def _unresolved(self, demand: Dict[int, int], on_hand: Dict[int, int], kind: str) -> Set[int]:
        missing = [product_id for product_id in demand if product_id not in on_hand]
        if not missing:
            return set()
        if self.missing_product_policy == "fail":
            raise ConsistencyError(f"Unknown product id(s) {missing}; {kind} not recorded.")
        logger.warning("Skipping %s line items for unknown product id(s) %s", kind, missing)
        return set(missing)

    def _take(self, product_id: int, quantity: int, available: int) -> None:
        if self.insufficient_stock_policy == "clamp":
            stmt = (
                update(Product)
                .where(Product.id == product_id)
                .values(
                    quantity=case((Product.quantity > quantity, Product.quantity - quantity), else_=0),
                    version=Product.version + 1,
                )
            )
        else:
            stmt = (
                update(Product)
                .where(Product.id == product_id, Product.quantity >= quantity)
                .values(quantity=Product.quantity - quantity, version=Product.version + 1)
            )

        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        if result.rowcount == 0:
            if self.insufficient_stock_policy == "clamp":
                raise ConsistencyError(f"Product {product_id} disappeared while recording the sale.")
            logger.info(
                "Rejected sale line: product %s requested %s, available %s", product_id, quantity, available
            )
            raise InsufficientStockError(product_id, quantity, available)

    def _give(self, product_id: int, quantity: int, available: int) -> None:
        if available + quantity > MAX_INT:
            raise ValidationError(
                f"Restocking {quantity} units of product {product_id} would exceed the maximum quantity ({MAX_INT})."
            )
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(quantity=Product.quantity + quantity, version=Product.version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ConsistencyError(f"Product {product_id} disappeared while recording the restock.")
