# shopstock/api/v1/endpoints/sales.py
# type: ignore

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from shopstock.database import get_db
from shopstock.models.auth import User
from shopstock.schemas.ledger import SaleCreate, SaleInDB
from shopstock.services.ledger import TransactionLedger
from shopstock.api.v1.endpoints.auth import get_current_user


router = APIRouter()


def get_ledger(db: Session = Depends(get_db)) -> TransactionLedger:
    return TransactionLedger(db)


@router.get("/", response_model=List[SaleInDB])
def read_sales(ledger: TransactionLedger = Depends(get_ledger), current_user: User = Depends(get_current_user)):
    """All sales, most recent first."""
    return sorted(ledger.list_sales(), key=lambda sale: (sale.date, sale.id), reverse=True)


@router.post("/", response_model=SaleInDB, status_code=status.HTTP_201_CREATED)
def create_sale(
    sale_in: SaleCreate,
    ledger: TransactionLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
):
    """
    Records a sale and takes its quantities out of stock in one transaction.
    Any cashier may sell; the sale is owned by the authenticated user.
    """
    return ledger.record_sale(sale_in.items, user_id=current_user.id, total=sale_in.total)


@router.get("/{sale_id}", response_model=SaleInDB)
def read_sale(sale_id: int, ledger: TransactionLedger = Depends(get_ledger), current_user: User = Depends(get_current_user)):
    return ledger.get_sale(sale_id)
