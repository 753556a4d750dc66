# shopstock/api/v1/endpoints/suppliers.py
# type: ignore

from fastapi import APIRouter, Depends, status
from typing import List

from shopstock.models.auth import User
from shopstock.schemas.inventory import SupplierCreate, SupplierUpdate, SupplierInDB
from shopstock.services.catalog import CatalogStore
from shopstock.api.v1.endpoints.auth import get_current_user, require_catalog_editor, require_owner
from shopstock.api.v1.endpoints.products import get_catalog


router = APIRouter()


@router.get("/", response_model=List[SupplierInDB])
def read_suppliers(catalog: CatalogStore = Depends(get_catalog), current_user: User = Depends(get_current_user)):
    return catalog.list_suppliers()


@router.post("/", response_model=SupplierInDB, status_code=status.HTTP_201_CREATED)
def create_supplier(
    supplier_in: SupplierCreate,
    catalog: CatalogStore = Depends(get_catalog),
    editor: User = Depends(require_catalog_editor),
):
    return catalog.create_supplier(supplier_in)


@router.get("/{supplier_id}", response_model=SupplierInDB)
def read_supplier(
    supplier_id: int,
    catalog: CatalogStore = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    return catalog.get_supplier(supplier_id)


@router.patch("/{supplier_id}", response_model=SupplierInDB)
def update_supplier(
    supplier_id: int,
    supplier_in: SupplierUpdate,
    catalog: CatalogStore = Depends(get_catalog),
    editor: User = Depends(require_catalog_editor),
):
    # last_order_date is not part of SupplierUpdate: only restocks move it
    return catalog.update_supplier(supplier_id, supplier_in)


@router.delete("/{supplier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_supplier(
    supplier_id: int,
    catalog: CatalogStore = Depends(get_catalog),
    owner: User = Depends(require_owner),
):
    catalog.delete_supplier(supplier_id)
    return
