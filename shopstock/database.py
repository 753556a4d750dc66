# shopstock/database.py

from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import declarative_base, sessionmaker

from shopstock.core.config import settings


# *****************************************************************
# 1. Engine
# *****************************************************************
def use_immediate_transactions(engine):
    """
    Makes every SQLite transaction start with BEGIN IMMEDIATE.

    SQLite has no row locks; taking the write lock up front serializes
    concurrent stock updates instead of failing one of them with
    "database is locked" when both try to upgrade a read lock.
    """

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_begin(dbapi_connection, connection_record):
        # pysqlite would otherwise emit its own (deferred) BEGIN
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def build_engine(database_url: str, echo: bool = False):
    """Creates an engine for DATABASE_URL. File-backed SQLite gets immediate transactions."""
    url = make_url(database_url)

    if url.get_backend_name() != "sqlite":
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    engine = create_engine(
        database_url,
        echo=echo,
        connect_args={"check_same_thread": False},
    )
    if url.database and url.database != ":memory:":
        use_immediate_transactions(engine)
    return engine


engine = build_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)

# 2. Session class used once per request
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 3. Declarative base for every model
Base = declarative_base()


def get_db():
    """Provides a database session to a FastAPI endpoint."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
