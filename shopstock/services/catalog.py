# shopstock/services/catalog.py

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from shopstock.core.config import settings
from shopstock.core.exceptions import NotFoundError, ValidationError
from shopstock.models.inventory import MAX_INT, Category, Product, Supplier
from shopstock.schemas.inventory import (
    CategoryCreate, CategoryUpdate,
    ProductCreate, ProductUpdate,
    SupplierCreate, SupplierUpdate,
)
from shopstock.services.common import get_by_id, parse_payload, unit_of_work

logger = logging.getLogger(__name__)

# Columns that may not be set to NULL through an update
PRODUCT_REQUIRED_FIELDS = ("name", "quantity", "purchase_price", "selling_price")


class CatalogStore:
    """
    Current state of products, categories and suppliers.

    Every write commits its own transaction, except ``record_order`` which
    is only called from inside a ledger transaction.
    """

    def __init__(self, db: Session, default_alert_threshold: Optional[int] = None):
        self.db = db
        self.default_alert_threshold = (
            settings.DEFAULT_ALERT_THRESHOLD if default_alert_threshold is None else default_alert_threshold
        )

    # ***************************************************************
    # 1. Products
    # ***************************************************************

    def list_products(self, search: Optional[str] = None, skip: int = 0, limit: Optional[int] = None) -> List[Product]:
        query = self.db.query(Product)

        if search:
            pattern = f"%{search}%"
            query = query.filter((Product.name.ilike(pattern)) | (Product.sku.ilike(pattern)))

        query = query.order_by(Product.id).offset(skip)
        if limit is not None:
            query = query.limit(limit)
        return query.all()

    def get_product(self, product_id: int, for_update: bool = False) -> Product:
        """With for_update, re-reads the row under a lock (SELECT ... FOR UPDATE)."""
        if for_update:
            product = get_by_id(self.db, Product, product_id, with_for_update=True, populate_existing=True)
        else:
            product = get_by_id(self.db, Product, product_id)
        if product is None:
            raise NotFoundError("Product", product_id)
        return product

    def create_product(self, data) -> Product:
        product_in = parse_payload(ProductCreate, data)

        # 1. Foreign keys and SKU uniqueness
        self._check_references(product_in.category_id, product_in.supplier_id)
        sku = self._normalize_sku(product_in.sku)
        self._check_sku_free(sku)

        # 2. Persist
        db_product = Product(**product_in.model_dump(exclude={"sku"}), sku=sku, version=1)
        with unit_of_work(self.db, "create product"):
            self.db.add(db_product)
        self.db.refresh(db_product)
        return db_product

    def update_product(self, product_id: int, data) -> Product:
        """Merges the provided fields. Cross-field rules (e.g. selling >= purchase) are not enforced."""
        product_in = parse_payload(ProductUpdate, data)
        db_product = self.get_product(product_id)

        update_data = product_in.model_dump(exclude_unset=True)

        for key in PRODUCT_REQUIRED_FIELDS:
            if key in update_data and update_data[key] is None:
                raise ValidationError(f"{key} cannot be null.")
        if "name" in update_data:
            update_data["name"] = update_data["name"].strip()
            if not update_data["name"]:
                raise ValidationError("name must not be blank.")

        self._check_references(update_data.get("category_id"), update_data.get("supplier_id"))

        if "sku" in update_data:
            update_data["sku"] = self._normalize_sku(update_data["sku"])
            if update_data["sku"] != db_product.sku:
                self._check_sku_free(update_data["sku"])

        with unit_of_work(self.db, "update product"):
            if "quantity" in update_data:
                # Same row lock the ledger takes; version is bumped in SQL, not from the loaded value
                db_product = self.get_product(product_id, for_update=True)
                db_product.version = Product.version + 1
            for key, value in update_data.items():
                setattr(db_product, key, value)
        self.db.refresh(db_product)
        return db_product

    def delete_product(self, product_id: int) -> None:
        """Hard delete. Ledger line items keep pointing at the old id."""
        db_product = self.get_product(product_id)
        with unit_of_work(self.db, "delete product"):
            self.db.delete(db_product)
        logger.info("Deleted product %s", product_id)

    def get_low_stock_products(self, threshold_override: Optional[int] = None) -> List[Product]:
        """quantity <= (override, else the product threshold, else the default). Includes empty products."""
        if threshold_override is not None:
            if not 0 <= threshold_override <= MAX_INT:
                raise ValidationError(f"threshold must be between 0 and {MAX_INT}.")
            limit = threshold_override
        else:
            limit = func.coalesce(Product.alert_threshold, self.default_alert_threshold)

        return self.db.query(Product).filter(Product.quantity <= limit).order_by(Product.id).all()

    def get_expiring_products(self, within_days: int, now: Optional[datetime] = None) -> List[Product]:
        """Products whose expiry date falls in (now, now + within_days]."""
        if within_days < 0:
            raise ValidationError("days must be >= 0.")
        now = now or datetime.now()
        horizon = now + timedelta(days=within_days)

        return (
            self.db.query(Product)
            .filter(
                Product.expiry_date.isnot(None),
                Product.expiry_date > now,
                Product.expiry_date <= horizon,
            )
            .order_by(Product.expiry_date, Product.id)
            .all()
        )

    # ***************************************************************
    # 2. Categories
    # ***************************************************************

    def list_categories(self) -> List[Category]:
        return self.db.query(Category).order_by(Category.name).all()

    def get_category(self, category_id: int) -> Category:
        category = get_by_id(self.db, Category, category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    def create_category(self, data) -> Category:
        category_in = parse_payload(CategoryCreate, data)
        self._check_category_name_free(category_in.name)

        db_category = Category(name=category_in.name)
        with unit_of_work(self.db, "create category"):
            self.db.add(db_category)
        self.db.refresh(db_category)
        return db_category

    def update_category(self, category_id: int, data) -> Category:
        category_in = parse_payload(CategoryUpdate, data)
        db_category = self.get_category(category_id)

        update_data = category_in.model_dump(exclude_unset=True)
        if "name" in update_data:
            if update_data["name"] is None:
                raise ValidationError("name cannot be null.")
            if update_data["name"] != db_category.name:
                self._check_category_name_free(update_data["name"])

        with unit_of_work(self.db, "update category"):
            for key, value in update_data.items():
                setattr(db_category, key, value)
        self.db.refresh(db_category)
        return db_category

    def delete_category(self, category_id: int) -> None:
        """Products of the category become uncategorized."""
        db_category = self.get_category(category_id)
        with unit_of_work(self.db, "delete category"):
            for product in list(db_category.products):
                product.category = None
            self.db.delete(db_category)
        logger.info("Deleted category %s", category_id)

    # ***************************************************************
    # 3. Suppliers
    # ***************************************************************

    def list_suppliers(self) -> List[Supplier]:
        return self.db.query(Supplier).order_by(Supplier.name, Supplier.id).all()

    def get_supplier(self, supplier_id: int) -> Supplier:
        supplier = get_by_id(self.db, Supplier, supplier_id)
        if supplier is None:
            raise NotFoundError("Supplier", supplier_id)
        return supplier

    def create_supplier(self, data) -> Supplier:
        supplier_in = parse_payload(SupplierCreate, data)

        db_supplier = Supplier(**supplier_in.model_dump())
        with unit_of_work(self.db, "create supplier"):
            self.db.add(db_supplier)
        self.db.refresh(db_supplier)
        return db_supplier

    def update_supplier(self, supplier_id: int, data) -> Supplier:
        supplier_in = parse_payload(SupplierUpdate, data)
        db_supplier = self.get_supplier(supplier_id)

        update_data = supplier_in.model_dump(exclude_unset=True)
        if "name" in update_data and update_data["name"] is None:
            raise ValidationError("name cannot be null.")
        if "categories" in update_data and update_data["categories"] is None:
            update_data["categories"] = []

        with unit_of_work(self.db, "update supplier"):
            for key, value in update_data.items():
                setattr(db_supplier, key, value)
        self.db.refresh(db_supplier)
        return db_supplier

    def delete_supplier(self, supplier_id: int) -> None:
        db_supplier = self.get_supplier(supplier_id)
        with unit_of_work(self.db, "delete supplier"):
            for product in list(db_supplier.products):
                product.supplier = None
            self.db.delete(db_supplier)
        logger.info("Deleted supplier %s", supplier_id)

    def record_order(self, supplier_id: int, when: datetime) -> Supplier:
        """Sets last_order_date. Does not commit: the calling ledger transaction does."""
        db_supplier = self.get_supplier(supplier_id)
        db_supplier.last_order_date = when
        self.db.flush()
        return db_supplier

    # ***************************************************************
    # Helpers
    # ***************************************************************

    def _check_references(self, category_id: Optional[int], supplier_id: Optional[int]) -> None:
        if category_id is not None:
            self.get_category(category_id)
        if supplier_id is not None:
            self.get_supplier(supplier_id)

    @staticmethod
    def _normalize_sku(sku: Optional[str]) -> Optional[str]:
        if sku is None:
            return None
        sku = sku.strip()
        return sku or None

    def _check_sku_free(self, sku: Optional[str]) -> None:
        if sku and self.db.query(Product.id).filter(Product.sku == sku).first():
            raise ValidationError(f"A product with SKU {sku!r} already exists.")

    def _check_category_name_free(self, name: str) -> None:
        if self.db.query(Category.id).filter(Category.name == name).first():
            raise ValidationError(f"Category {name!r} already exists.")
