# shopstock/schemas/auth.py
#type: ignore

from pydantic import BaseModel, Field, field_serializer, field_validator
from typing import Optional
from datetime import datetime

from shopstock.models.auth import ROLES, DEFAULT_ROLE


def _check_role(value: Optional[str]) -> Optional[str]:
    if value is not None and value not in ROLES:
        raise ValueError(f"role must be one of {', '.join(ROLES)}")
    return value


# ***************************************************************
# 1. Authentication schemas (JWT)
# ***************************************************************
class Token(BaseModel):
    """Access token response."""
    access_token: str
    refresh_token: Optional[str] = None
    token_type: str = "bearer"
    role: str

class TokenPayload(BaseModel):
    """JWT payload."""
    sub: Optional[str] = None
    exp: Optional[int] = None

class UserLogin(BaseModel):
    """Login request."""
    username: str
    password: str

# ***************************************************************
# 2. User schemas (Request/Response)
# ***************************************************************
class UserBase(BaseModel):
    username: str = Field(..., min_length=1, max_length=255)
    full_name: str = Field(..., min_length=1, max_length=255)
    role: str = DEFAULT_ROLE
    is_active: bool = True

    model_config = {
        "from_attributes": True,
    }

    @field_validator("role")
    @classmethod
    def validate_role(cls, value):
        return _check_role(value)


class UserCreate(UserBase):
    """New user (includes the plain password)."""
    password: str = Field(..., min_length=6)

class UserUpdate(BaseModel):
    """All fields optional."""
    username: Optional[str] = Field(None, min_length=1, max_length=255)
    full_name: Optional[str] = Field(None, min_length=1, max_length=255)
    role: Optional[str] = None
    is_active: Optional[bool] = None
    password: Optional[str] = Field(None, min_length=6)

    @field_validator("role")
    @classmethod
    def validate_role(cls, value):
        return _check_role(value)

class UserInDB(UserBase):
    """User as stored, without the hash."""
    id: int
    created_at: datetime

    @field_serializer("created_at", when_used="always")
    def serialize_datetime(self, value: datetime) -> str:
        return value.isoformat()
