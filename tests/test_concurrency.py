import threading

import pytest
from sqlalchemy.orm import sessionmaker

from shopstock.core.exceptions import InsufficientStockError
from shopstock.database import Base, build_engine
from shopstock.models.inventory import Product
from shopstock.models.ledger import Sale
from shopstock.services.ledger import TransactionLedger


@pytest.fixture
def file_sessions(tmp_path):
    """Sessions on a file-backed SQLite database, one connection per thread."""
    engine = build_engine(f"sqlite:///{tmp_path / 'shop.db'}")
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


def seed_product(Session, quantity):
    with Session() as db:
        product = Product(name="Last loaf", quantity=quantity, purchase_price=1, selling_price=2)
        db.add(product)
        db.commit()
        return product.id


def race(Session, product_id, policy, buyers=2):
    barrier = threading.Barrier(buyers)
    outcomes = []

    def buy(user_id):
        db = Session()
        ledger = TransactionLedger(db, insufficient_stock_policy=policy, missing_product_policy="fail")
        try:
            barrier.wait()
            ledger.record_sale([{"product_id": product_id, "quantity": 1, "price": "2.00"}], user_id=user_id)
            outcomes.append("sold")
        except InsufficientStockError:
            outcomes.append("rejected")
        except Exception as exc:
            outcomes.append(exc)
        finally:
            db.close()

    threads = [threading.Thread(target=buy, args=(n,)) for n in range(1, buyers + 1)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)
    return outcomes


def test_two_buyers_for_the_last_unit(file_sessions):
    product_id = seed_product(file_sessions, quantity=1)

    outcomes = race(file_sessions, product_id, policy="reject")

    assert sorted(outcomes) == ["rejected", "sold"]
    with file_sessions() as db:
        assert db.get(Product, product_id).quantity == 0
        assert db.query(Sale).count() == 1


def test_clamped_race_never_goes_negative(file_sessions):
    product_id = seed_product(file_sessions, quantity=1)

    outcomes = race(file_sessions, product_id, policy="clamp", buyers=3)

    assert outcomes == ["sold", "sold", "sold"]
    with file_sessions() as db:
        assert db.get(Product, product_id).quantity == 0
        assert db.query(Sale).count() == 3


def test_concurrent_sales_are_all_counted(file_sessions):
    product_id = seed_product(file_sessions, quantity=10)

    outcomes = race(file_sessions, product_id, policy="reject", buyers=4)

    assert outcomes == ["sold"] * 4
    with file_sessions() as db:
        product = db.get(Product, product_id)
        assert product.quantity == 6
        assert product.version == 5
