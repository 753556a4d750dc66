# shopstock/models/auth.py
# type: ignore

from sqlalchemy import Column, Integer, String, Boolean, TIMESTAMP
from datetime import datetime
from shopstock.database import Base


# Roles known to the application, most privileged first
ROLES = ("superuser", "owner", "supervisor", "stock_manager", "cashier")
DEFAULT_ROLE = "cashier"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default=DEFAULT_ROLE)

    is_active = Column(Boolean, default=True)
    created_at = Column(TIMESTAMP, default=datetime.now)
