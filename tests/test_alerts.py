from datetime import datetime, timedelta
from types import SimpleNamespace

from shopstock.services.alerts import (
    classify,
    effective_threshold,
    is_expiring_soon,
    is_low_stock,
    is_out_of_stock,
)

NOW = datetime(2026, 3, 15, 12, 0, 0)


def product(id=1, quantity=10, alert_threshold=None, expiry_date=None):
    return SimpleNamespace(id=id, quantity=quantity, alert_threshold=alert_threshold, expiry_date=expiry_date)


def test_out_of_stock_only_at_zero():
    assert is_out_of_stock(product(quantity=0))
    assert not is_out_of_stock(product(quantity=1))


def test_empty_product_is_never_low_stock():
    assert not is_low_stock(product(quantity=0, alert_threshold=5))
    assert not is_low_stock(product(quantity=0), default_threshold=10)


def test_low_stock_threshold_is_inclusive():
    assert is_low_stock(product(quantity=5, alert_threshold=5))
    assert not is_low_stock(product(quantity=6, alert_threshold=5))


def test_unset_threshold_uses_default():
    p = product(quantity=10, alert_threshold=None)
    assert effective_threshold(p, default_threshold=10) == 10
    assert is_low_stock(p, default_threshold=10)
    assert not is_low_stock(p, default_threshold=9)


def test_zero_threshold_is_respected():
    p = product(quantity=1, alert_threshold=0)
    assert effective_threshold(p, default_threshold=10) == 0
    assert not is_low_stock(p, default_threshold=10)


def test_expiry_window_boundaries():
    assert is_expiring_soon(product(expiry_date=NOW + timedelta(days=7)), NOW, 7)
    assert is_expiring_soon(product(expiry_date=NOW + timedelta(seconds=1)), NOW, 7)
    assert not is_expiring_soon(product(expiry_date=NOW), NOW, 7)
    assert not is_expiring_soon(product(expiry_date=NOW - timedelta(days=1)), NOW, 7)
    assert not is_expiring_soon(product(expiry_date=NOW + timedelta(days=7, seconds=1)), NOW, 7)
    assert not is_expiring_soon(product(expiry_date=None), NOW, 7)


def test_classification_sets_are_independent():
    low_and_expiring = product(id=1, quantity=2, alert_threshold=5, expiry_date=NOW + timedelta(days=3))
    empty_and_expiring = product(id=2, quantity=0, expiry_date=NOW + timedelta(days=1))
    healthy = product(id=3, quantity=50, alert_threshold=5)

    report = classify([healthy, empty_and_expiring, low_and_expiring], now=NOW, days=7, default_threshold=10)

    assert report.low_stock == [low_and_expiring]
    assert report.out_of_stock == [empty_and_expiring]
    assert report.expiring_soon == [low_and_expiring, empty_and_expiring]


def test_classify_is_idempotent():
    products = [
        product(id=i, quantity=q, alert_threshold=t, expiry_date=NOW + timedelta(days=d))
        for i, (q, t, d) in enumerate([(0, 3, 1), (2, 3, 10), (4, None, 6), (20, 5, -1)], start=1)
    ]

    first = classify(products, now=NOW, days=7, default_threshold=10)
    second = classify(products, now=NOW, days=7, default_threshold=10)

    assert first == second
