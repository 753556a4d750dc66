# shopstock/services/common.py

import logging
from contextlib import contextmanager
from decimal import Decimal, ROUND_HALF_UP

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from shopstock.core.exceptions import ShopStockError, StorageError, ValidationError
from shopstock.models.inventory import MAX_INT

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Rounds any numeric value to cents."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def parse_payload(schema, data, prefix: str = ""):
    """Accepts a schema instance or a plain mapping; raises ValidationError on bad input."""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc, prefix) from exc


@contextmanager
def storage_guard(action: str):
    """Turns database failures during a read into StorageError."""
    try:
        yield
    except SQLAlchemyError as exc:
        logger.exception("Database error while trying to %s", action)
        raise StorageError(f"Could not {action}: storage unavailable.") from exc


@contextmanager
def unit_of_work(db: Session, action: str):
    """
    Runs the block as one database transaction.

    Commits when the block finishes. Any exception rolls the transaction
    back; database failures are re-raised as StorageError.
    """
    try:
        yield
        db.commit()
    except ShopStockError:
        db.rollback()
        raise
    except IntegrityError as exc:
        db.rollback()
        logger.info("Integrity error while trying to %s: %s", action, exc.orig)
        raise ValidationError(f"Could not {action}: conflicts with existing data.") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Database error while trying to %s", action)
        raise StorageError(f"Could not {action}: storage unavailable, nothing was saved.") from exc
    except Exception:
        db.rollback()
        raise


def get_by_id(db: Session, model, entity_id, **kwargs):
    """Session.get that treats ids outside the INTEGER range as absent."""
    if not 0 < entity_id <= MAX_INT:
        return None
    return db.get(model, entity_id, **kwargs)
