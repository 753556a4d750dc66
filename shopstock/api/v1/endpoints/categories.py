# shopstock/api/v1/endpoints/categories.py
# type: ignore

from fastapi import APIRouter, Depends, status
from typing import List

from shopstock.models.auth import User
from shopstock.schemas.inventory import CategoryCreate, CategoryUpdate, CategoryInDB
from shopstock.services.catalog import CatalogStore
from shopstock.api.v1.endpoints.auth import get_current_user, require_catalog_editor, require_owner
from shopstock.api.v1.endpoints.products import get_catalog


router = APIRouter()


@router.get("/", response_model=List[CategoryInDB])
def read_categories(catalog: CatalogStore = Depends(get_catalog), current_user: User = Depends(get_current_user)):
    return catalog.list_categories()


@router.post("/", response_model=CategoryInDB, status_code=status.HTTP_201_CREATED)
def create_category(
    category_in: CategoryCreate,
    catalog: CatalogStore = Depends(get_catalog),
    editor: User = Depends(require_catalog_editor),
):
    return catalog.create_category(category_in)


@router.get("/{category_id}", response_model=CategoryInDB)
def read_category(
    category_id: int,
    catalog: CatalogStore = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    return catalog.get_category(category_id)


@router.patch("/{category_id}", response_model=CategoryInDB)
def update_category(
    category_id: int,
    category_in: CategoryUpdate,
    catalog: CatalogStore = Depends(get_catalog),
    editor: User = Depends(require_catalog_editor),
):
    return catalog.update_category(category_id, category_in)


@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    catalog: CatalogStore = Depends(get_catalog),
    owner: User = Depends(require_owner),
):
    """Products in the category become 'Uncategorized'."""
    catalog.delete_category(category_id)
    return
