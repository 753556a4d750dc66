# shopstock/api/v1/endpoints/products.py
# type: ignore

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional

from shopstock.core.config import settings
from shopstock.database import get_db
from shopstock.models.auth import User
from shopstock.schemas.inventory import ProductCreate, ProductUpdate, ProductInDB
from shopstock.schemas.dashboard import AlertSummary
from shopstock.services.alerts import classify
from shopstock.services.catalog import CatalogStore
from shopstock.api.v1.endpoints.auth import get_current_user, require_catalog_editor, require_owner


router = APIRouter()


def get_catalog(db: Session = Depends(get_db)) -> CatalogStore:
    return CatalogStore(db)


# ***************************************************************
# 1. Alert views (declared before /{product_id})
# ***************************************************************
@router.get("/low-stock", response_model=List[ProductInDB])
def read_low_stock_products(
    threshold: Optional[int] = Query(None, ge=0, description="Overrides every product's alert threshold."),
    catalog: CatalogStore = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    return catalog.get_low_stock_products(threshold)


@router.get("/expiring", response_model=List[ProductInDB])
def read_expiring_products(
    days: Optional[int] = Query(None, ge=0, description="Look-ahead window in days (EXPIRY_WINDOW_DAYS by default)."),
    catalog: CatalogStore = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    return catalog.get_expiring_products(settings.EXPIRY_WINDOW_DAYS if days is None else days)


@router.get("/alerts", response_model=AlertSummary)
def read_alerts(
    days: Optional[int] = Query(None, ge=0),
    catalog: CatalogStore = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    """Out-of-stock, low-stock and expiring-soon products in one call."""
    report = classify(catalog.list_products(), days=days, default_threshold=catalog.default_alert_threshold)
    return AlertSummary(
        out_of_stock=[ProductInDB.model_validate(p) for p in report.out_of_stock],
        low_stock=[ProductInDB.model_validate(p) for p in report.low_stock],
        expiring_soon=[ProductInDB.model_validate(p) for p in report.expiring_soon],
    )


# ***************************************************************
# 2. CRUD
# ***************************************************************
@router.post("/", response_model=ProductInDB, status_code=status.HTTP_201_CREATED)
def create_product(
    product_in: ProductCreate,
    catalog: CatalogStore = Depends(get_catalog),
    editor: User = Depends(require_catalog_editor),
):
    return catalog.create_product(product_in)


@router.get("/", response_model=List[ProductInDB])
def read_products(
    catalog: CatalogStore = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
    limit: int = Query(100, gt=0),
    skip: int = Query(0, ge=0),
    search: Optional[str] = Query(None, description="Search by name or SKU."),
):
    return catalog.list_products(search=search, skip=skip, limit=limit)


@router.get("/{product_id}", response_model=ProductInDB)
def read_product(
    product_id: int,
    catalog: CatalogStore = Depends(get_catalog),
    current_user: User = Depends(get_current_user),
):
    return catalog.get_product(product_id)


@router.patch("/{product_id}", response_model=ProductInDB)
def update_product(
    product_id: int,
    product_in: ProductUpdate,
    catalog: CatalogStore = Depends(get_catalog),
    editor: User = Depends(require_catalog_editor),
):
    return catalog.update_product(product_id, product_in)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    catalog: CatalogStore = Depends(get_catalog),
    owner: User = Depends(require_owner),
):
    catalog.delete_product(product_id)
    return
