# shopstock/main.py
# type: ignore

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopstock.core.config import settings
from shopstock.core.exceptions import (
    ConsistencyError,
    NotFoundError,
    ShopStockError,
    StorageError,
    ValidationError,
)
from shopstock.core.logging_setup import setup_logging
from shopstock.core.security import get_password_hash
from shopstock.database import get_db, Base, engine, SessionLocal

# ***************************************************************
# 1. Import every model so SQLAlchemy registers its table
# ***************************************************************
from shopstock.models.auth import User
import shopstock.models.inventory  # Category, Supplier, Product
import shopstock.models.ledger  # Sale, SaleItem, Restock, RestockItem

# ***************************************************************
# 2. API routers
# ***************************************************************
from shopstock.api.v1.endpoints import auth
from shopstock.api.v1.endpoints import users
from shopstock.api.v1.endpoints import categories
from shopstock.api.v1.endpoints import suppliers
from shopstock.api.v1.endpoints import products
from shopstock.api.v1.endpoints import sales
from shopstock.api.v1.endpoints import restocks
from shopstock.api.v1.endpoints import dashboard

setup_logging(settings)
logger = logging.getLogger(__name__)


def create_tables():
    """Creates every table that does not exist yet."""
    Base.metadata.create_all(bind=engine)


def create_default_owner(db: Session) -> bool:
    """Seeds the owner account on first start. Returns True when a user was created."""
    if db.query(User).filter(User.username == settings.DEFAULT_ADMIN_USERNAME).first():
        return False

    db.add(User(
        username=settings.DEFAULT_ADMIN_USERNAME,
        password_hash=get_password_hash(settings.DEFAULT_ADMIN_PASSWORD),
        full_name="Store Owner",
        role="owner",
    ))
    db.commit()
    logger.info("Created default owner account %r", settings.DEFAULT_ADMIN_USERNAME)
    return True


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    db = SessionLocal()
    try:
        create_default_owner(db)
    finally:
        db.close()
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Inventory and point-of-sale backend: stock, sales, restocks, alerts and dashboard.",
    lifespan=lifespan,
)

# ***************************************************************
# 3. Domain errors -> HTTP
# ***************************************************************
ERROR_STATUS = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConsistencyError, status.HTTP_409_CONFLICT),
    (StorageError, status.HTTP_503_SERVICE_UNAVAILABLE),
)


@app.exception_handler(ShopStockError)
async def shopstock_error_handler(request: Request, exc: ShopStockError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_class, code in ERROR_STATUS:
        if isinstance(exc, error_class):
            status_code = code
            break
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Unhandled database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Storage unavailable, please retry."},
    )

# ***************************************************************
# 4. Routers
# ***************************************************************
app.include_router(auth.router, tags=["Auth"], prefix=f"{settings.API_V1_STR}/auth")
app.include_router(users.router, tags=["Users"], prefix=f"{settings.API_V1_STR}/users")
app.include_router(categories.router, tags=["Categories"], prefix=f"{settings.API_V1_STR}/categories")
app.include_router(suppliers.router, tags=["Suppliers"], prefix=f"{settings.API_V1_STR}/suppliers")
app.include_router(products.router, tags=["Products"], prefix=f"{settings.API_V1_STR}/products")
app.include_router(sales.router, tags=["Sales"], prefix=f"{settings.API_V1_STR}/sales")
app.include_router(restocks.router, tags=["Restocks"], prefix=f"{settings.API_V1_STR}/restocks")
app.include_router(dashboard.router, tags=["Dashboard"], prefix=f"{settings.API_V1_STR}/dashboard")


@app.get("/health", tags=["Health"])
def health(db: Session = Depends(get_db)):
    db.execute(text("SELECT 1"))
    return {"status": "ok", "service": "shopstock"}
