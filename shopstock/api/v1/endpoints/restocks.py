# shopstock/api/v1/endpoints/restocks.py
# type: ignore

from fastapi import APIRouter, Depends, status
from typing import List

from shopstock.models.auth import User
from shopstock.schemas.ledger import RestockCreate, RestockInDB
from shopstock.services.ledger import TransactionLedger
from shopstock.api.v1.endpoints.auth import get_current_user, require_catalog_editor
from shopstock.api.v1.endpoints.sales import get_ledger


router = APIRouter()


@router.get("/", response_model=List[RestockInDB])
def read_restocks(ledger: TransactionLedger = Depends(get_ledger), current_user: User = Depends(get_current_user)):
    """All restocks, most recent first."""
    return sorted(ledger.list_restocks(), key=lambda restock: (restock.date, restock.id), reverse=True)


@router.post("/", response_model=RestockInDB, status_code=status.HTTP_201_CREATED)
def create_restock(
    restock_in: RestockCreate,
    ledger: TransactionLedger = Depends(get_ledger),
    editor: User = Depends(require_catalog_editor),
):
    """Adds the delivered quantities to stock and stamps the supplier's last order date."""
    return ledger.record_restock(
        restock_in.items,
        user_id=editor.id,
        supplier_id=restock_in.supplier_id,
        total=restock_in.total,
    )


@router.get("/{restock_id}", response_model=RestockInDB)
def read_restock(
    restock_id: int,
    ledger: TransactionLedger = Depends(get_ledger),
    current_user: User = Depends(get_current_user),
):
    return ledger.get_restock(restock_id)
