# shopstock/core/security.py
# type: ignore
from datetime import datetime, timedelta, timezone
from typing import Any, Union
from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import ValidationError

from shopstock.core.config import settings
from shopstock.schemas.auth import TokenPayload

# ***************************************************************
# 1. Security configuration
# ***************************************************************

# Password hashing context (pbkdf2_sha256)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

# Bearer scheme for protected endpoints
reusable_oauth2 = OAuth2PasswordBearer(
    tokenUrl=f"{settings.API_V1_STR}/auth/login"
)

# ***************************************************************
# 2. Password hashing
# ***************************************************************

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)

# ***************************************************************
# 3. JWT creation and verification
# ***************************************************************

def _encode(subject: Union[str, Any], expire: datetime, token_type: str) -> str:
    to_encode = {"exp": expire, "sub": str(subject), "type": token_type}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def create_access_token(subject: Union[str, Any], expires_delta: timedelta = None) -> str:
    """Creates a short-lived access token."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode(subject, datetime.now(timezone.utc) + expires_delta, "access")

def create_refresh_token(subject: Union[str, Any], expires_delta: timedelta = None) -> str:
    """Creates a refresh token (REFRESH_TOKEN_EXPIRE_DAYS by default)."""
    if expires_delta is None:
        expires_delta = timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    return _encode(subject, datetime.now(timezone.utc) + expires_delta, "refresh")


def decode_token(token: str, expected_type: str = "access") -> TokenPayload:
    """Decodes and validates a JWT. Raises 401 on any failure."""
    credentials_error = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid credentials or expired token.",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
        if payload.get("type") != expected_type:
            raise credentials_error
        return TokenPayload(**payload)

    except (JWTError, ValidationError, TypeError) as e:
        raise credentials_error from e
