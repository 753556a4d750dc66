# shopstock/services/alerts.py
"""
Stock alert classification.

Pure functions over product-like objects (anything with ``quantity``,
``alert_threshold`` and ``expiry_date``). Nothing is cached: callers pass
the current catalog and get a fresh answer every time.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Iterable, List, Optional

from shopstock.core.config import settings


@dataclass(frozen=True)
class AlertReport:
    out_of_stock: List = field(default_factory=list)
    low_stock: List = field(default_factory=list)
    expiring_soon: List = field(default_factory=list)


def effective_threshold(product, default_threshold: Optional[int] = None) -> int:
    if product.alert_threshold is not None:
        return product.alert_threshold
    if default_threshold is not None:
        return default_threshold
    return settings.DEFAULT_ALERT_THRESHOLD


def is_out_of_stock(product) -> bool:
    return product.quantity == 0


def is_low_stock(product, default_threshold: Optional[int] = None) -> bool:
    """0 < quantity <= threshold. Out-of-stock products are never low-stock."""
    return 0 < product.quantity <= effective_threshold(product, default_threshold)


def is_expiring_soon(product, now: datetime, days: int) -> bool:
    """Expiry in (now, now + days]: already expired products do not count."""
    expiry = product.expiry_date
    if expiry is None:
        return False
    return now < expiry <= now + timedelta(days=days)


def classify(
    products: Iterable,
    now: Optional[datetime] = None,
    days: Optional[int] = None,
    default_threshold: Optional[int] = None,
) -> AlertReport:
    """Splits products into the three (independent) alert sets, ordered by id."""
    now = now or datetime.now()
    days = settings.EXPIRY_WINDOW_DAYS if days is None else days

    report = AlertReport()
    for product in sorted(products, key=lambda p: p.id):
        if is_out_of_stock(product):
            report.out_of_stock.append(product)
        elif is_low_stock(product, default_threshold):
            report.low_stock.append(product)
        if is_expiring_soon(product, now, days):
            report.expiring_soon.append(product)
    return report
