from datetime import datetime, timedelta
from decimal import Decimal

import pytest

from shopstock.services.dashboard import (
    NO_TOP_CATEGORY,
    DashboardAggregator,
    resolve_range,
    shift_months,
)

NOW = datetime(2026, 3, 15, 12, 0, 0)


def line(product, quantity, price):
    return {"product_id": product.id, "quantity": quantity, "price": price}


@pytest.fixture
def aggregator(db):
    return DashboardAggregator(db, default_alert_threshold=10, expiry_window_days=7)


# ***************************************************************
# Date ranges
# ***************************************************************

@pytest.mark.parametrize(
    "range_name, expected",
    [
        ("today", datetime(2026, 3, 15)),
        ("week", datetime(2026, 3, 8, 12, 0, 0)),
        ("month", datetime(2026, 2, 15, 12, 0, 0)),
        ("year", datetime(2025, 3, 15, 12, 0, 0)),
    ],
)
def test_resolve_range(range_name, expected):
    assert resolve_range(range_name, NOW) == (range_name, expected)


@pytest.mark.parametrize("range_name", [None, "", "fortnight", "WEEK"])
def test_unknown_range_falls_back_to_today(range_name):
    assert resolve_range(range_name, NOW) == ("today", datetime(2026, 3, 15))


def test_shift_months_clamps_the_day():
    assert shift_months(datetime(2026, 3, 31, 9, 30), 1) == datetime(2026, 2, 28, 9, 30)
    assert shift_months(datetime(2024, 3, 31), 1) == datetime(2024, 2, 29)
    assert shift_months(datetime(2026, 1, 10), 1) == datetime(2025, 12, 10)
    assert shift_months(datetime(2024, 2, 29), 12) == datetime(2023, 2, 28)


# ***************************************************************
# Totals
# ***************************************************************

def test_week_total_only_counts_sales_inside_the_window(aggregator, ledger, make_product):
    product = make_product(quantity=100)
    ledger.record_sale([line(product, 1, "100.00")], user_id=1, when=NOW - timedelta(days=1))
    ledger.record_sale([line(product, 1, "50.00")], user_id=1, when=NOW - timedelta(days=2))
    ledger.record_sale([line(product, 1, "200.00")], user_id=1, when=NOW - timedelta(days=10))

    stats = aggregator.compute_stats("week", now=NOW)

    assert stats.range == "week"
    assert stats.start_date == NOW - timedelta(days=7)
    assert stats.total_sales == Decimal("150.00")


def test_sale_at_the_range_start_is_included(aggregator, ledger, make_product):
    product = make_product(quantity=10)
    ledger.record_sale([line(product, 1, "5.00")], user_id=1, when=datetime(2026, 3, 15))
    ledger.record_sale([line(product, 1, "7.00")], user_id=1, when=datetime(2026, 3, 14, 23, 59, 59))

    assert aggregator.compute_stats("today", now=NOW).total_sales == Decimal("5.00")


def test_empty_ledger(aggregator):
    stats = aggregator.compute_stats("year", now=NOW)

    assert stats.total_sales == Decimal("0.00")
    assert stats.low_stock_count == 0
    assert stats.out_of_stock_count == 0
    assert stats.expiring_items_count == 0
    assert stats.top_category == NO_TOP_CATEGORY


# ***************************************************************
# Alert counts
# ***************************************************************

def test_alert_counts(aggregator, make_product):
    make_product(quantity=2, alert_threshold=5, expiry_date=NOW + timedelta(days=2))
    make_product(quantity=8)
    make_product(quantity=0)
    make_product(quantity=50, expiry_date=NOW + timedelta(days=7))
    make_product(quantity=50, expiry_date=NOW - timedelta(days=1))

    stats = aggregator.compute_stats("today", now=NOW)

    assert stats.low_stock_count == 2
    assert stats.out_of_stock_count == 1
    assert stats.expiring_items_count == 2


def test_stats_do_not_change_the_catalog(aggregator, catalog, make_product):
    make_product(quantity=3)
    before = [(p.id, p.quantity, p.version) for p in catalog.list_products()]

    first = aggregator.compute_stats("month", now=NOW)
    second = aggregator.compute_stats("month", now=NOW)

    assert first == second
    assert [(p.id, p.quantity, p.version) for p in catalog.list_products()] == before


# ***************************************************************
# Top category
# ***************************************************************

def test_top_category_by_units_sold(aggregator, catalog, ledger, make_product):
    dairy = catalog.create_category({"name": "Dairy"})
    bakery = catalog.create_category({"name": "Bakery"})
    milk = make_product(quantity=50, category_id=dairy.id)
    cheese = make_product(quantity=50, category_id=dairy.id)
    bread = make_product(quantity=50, category_id=bakery.id)

    # Bakery earns more, Dairy moves more units
    ledger.record_sale([line(bread, 4, "10.00")], user_id=1, when=NOW - timedelta(hours=1))
    ledger.record_sale([line(milk, 3, "1.00"), line(cheese, 2, "1.00")], user_id=1, when=NOW - timedelta(hours=2))
    # Outside the window
    ledger.record_sale([line(bread, 20, "1.00")], user_id=1, when=NOW - timedelta(days=3))

    assert aggregator.compute_stats("today", now=NOW).top_category == "Dairy"
    assert aggregator.compute_stats("week", now=NOW).top_category == "Bakery"


def test_top_category_tie_is_broken_by_name(aggregator, catalog, ledger, make_product):
    snacks = catalog.create_category({"name": "Snacks"})
    drinks = catalog.create_category({"name": "Drinks"})
    chips = make_product(quantity=10, category_id=snacks.id)
    soda = make_product(quantity=10, category_id=drinks.id)

    ledger.record_sale([line(chips, 2, "1.00"), line(soda, 2, "1.00")], user_id=1, when=NOW)

    assert aggregator.compute_stats("today", now=NOW).top_category == "Drinks"


def test_top_category_is_none_for_uncategorized_sales(aggregator, ledger, make_product):
    product = make_product(quantity=10)
    ledger.record_sale([line(product, 5, "1.00")], user_id=1, when=NOW)

    stats = aggregator.compute_stats("today", now=NOW)

    assert stats.total_sales == Decimal("5.00")
    assert stats.top_category == NO_TOP_CATEGORY


def test_top_category_ignores_deleted_products(aggregator, catalog, ledger, make_product):
    produce = catalog.create_category({"name": "Produce"})
    frozen = catalog.create_category({"name": "Frozen"})
    apples = make_product(quantity=10, category_id=produce.id)
    peas = make_product(quantity=10, category_id=frozen.id)
    ledger.record_sale([line(apples, 5, "1.00"), line(peas, 1, "1.00")], user_id=1, when=NOW)

    catalog.delete_product(apples.id)

    stats = aggregator.compute_stats("today", now=NOW)
    assert stats.top_category == "Frozen"
    # Revenue stays in the ledger
    assert stats.total_sales == Decimal("6.00")
