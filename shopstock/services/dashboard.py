# shopstock/services/dashboard.py

import calendar
from datetime import datetime, timedelta
from typing import Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from shopstock.core.config import settings
from shopstock.models.inventory import Category, Product
from shopstock.models.ledger import Sale, SaleItem
from shopstock.schemas.dashboard import DashboardStats
from shopstock.services.alerts import classify
from shopstock.services.catalog import CatalogStore
from shopstock.services.common import storage_guard, to_money

RANGES = ("today", "week", "month", "year")
NO_TOP_CATEGORY = "None"


def shift_months(value: datetime, months: int) -> datetime:
    """Moves a datetime back by whole calendar months, clamping the day (Mar 31 -> Feb 28)."""
    index = value.year * 12 + (value.month - 1) - months
    year, month = divmod(index, 12)
    month += 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return value.replace(year=year, month=month, day=day)


def resolve_range(range_name: Optional[str], now: datetime) -> Tuple[str, datetime]:
    """Returns (range, start date). Unknown ranges fall back to today."""
    if range_name == "week":
        return "week", now - timedelta(days=7)
    if range_name == "month":
        return "month", shift_months(now, 1)
    if range_name == "year":
        return "year", shift_months(now, 12)
    return "today", now.replace(hour=0, minute=0, second=0, microsecond=0)


class DashboardAggregator:
    """Read-only snapshot over the ledger and the catalog."""

    def __init__(
        self,
        db: Session,
        default_alert_threshold: Optional[int] = None,
        expiry_window_days: Optional[int] = None,
    ):
        self.db = db
        self.catalog = CatalogStore(db, default_alert_threshold)
        self.expiry_window_days = (
            settings.EXPIRY_WINDOW_DAYS if expiry_window_days is None else expiry_window_days
        )

    def compute_stats(self, range_name: Optional[str] = "today", now: Optional[datetime] = None) -> DashboardStats:
        now = now or datetime.now()
        resolved, start_date = resolve_range(range_name, now)

        with storage_guard("compute dashboard stats"):
            total_sales = (
                self.db.query(func.coalesce(func.sum(Sale.total), 0))
                .filter(Sale.date >= start_date)
                .scalar()
            )

            # Alert counts are point-in-time, not limited to the range
            report = classify(
                self.catalog.list_products(),
                now=now,
                days=self.expiry_window_days,
                default_threshold=self.catalog.default_alert_threshold,
            )
            top_category = self._top_category(start_date)

        return DashboardStats(
            range=resolved,
            start_date=start_date,
            total_sales=to_money(total_sales),
            low_stock_count=len(report.low_stock),
            out_of_stock_count=len(report.out_of_stock),
            expiring_items_count=len(report.expiring_soon),
            top_category=top_category,
        )

    def _top_category(self, start_date: datetime) -> str:
        """Category with the most units sold since start_date, resolved against the current catalog."""
        units = func.sum(SaleItem.quantity)
        row = (
            self.db.query(Category.name, units.label("units"))
            .select_from(SaleItem)
            .join(Sale, Sale.id == SaleItem.sale_id)
            .join(Product, Product.id == SaleItem.product_id)
            .join(Category, Category.id == Product.category_id)
            .filter(Sale.date >= start_date)
            .group_by(Category.name)
            .order_by(units.desc(), Category.name)
            .first()
        )
        return row.name if row is not None else NO_TOP_CATEGORY
