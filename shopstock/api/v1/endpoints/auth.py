# shopstock/api/v1/endpoints/auth.py
# type: ignore

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from shopstock.database import get_db
from shopstock.schemas.auth import UserLogin, Token, UserInDB
from shopstock.models.auth import User
from shopstock.core.security import (
    verify_password,
    create_access_token,
    create_refresh_token,
    reusable_oauth2,
    decode_token,
)


router = APIRouter()

# ***************************************************************
# Authenticated user dependency
# ***************************************************************
def _load_active_user(db: Session, user_id) -> User:
    try:
        user = db.get(User, int(user_id))
    except (TypeError, ValueError):
        user = None
    if user is None or not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not found or inactive.")
    return user


def get_current_user(
    db: Session = Depends(get_db), token: str = Depends(reusable_oauth2)
) -> User:
    """Decodes the access token and loads the user it belongs to."""
    token_data = decode_token(token)
    if token_data.sub is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token carries no user id.")
    return _load_active_user(db, token_data.sub)


def require_roles(*roles: str):
    """Dependency factory: only users whose role is in `roles` get through."""
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Access denied. Allowed roles: {', '.join(roles)}.",
            )
        return current_user
    return role_checker


# Role gates shared by the routers
require_catalog_editor = require_roles("owner", "stock_manager")
require_owner = require_roles("owner")
require_user_admin = require_roles("owner", "superuser")


def _issue_tokens(user: User) -> dict:
    return {
        "access_token": create_access_token(subject=user.id),
        "refresh_token": create_refresh_token(subject=user.id),
        "token_type": "bearer",
        "role": user.role,
    }

# ***************************************************************
# 1. Login
# ***************************************************************
@router.post("/login", response_model=Token)
def login_for_access_token(user_in: UserLogin, db: Session = Depends(get_db)):
    """Authenticates a user and returns an access token and a refresh token."""
    user = db.query(User).filter(User.username == user_in.username).first()

    if not user or not verify_password(user_in.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive.")

    return _issue_tokens(user)

# ***************************************************************
# 2. Refresh (token rotation)
# ***************************************************************
@router.post("/refresh", response_model=Token)
def refresh_access_token(
    # refresh token travels in 'Authorization: Bearer <token>'
    refresh_token: str = Depends(reusable_oauth2),
    db: Session = Depends(get_db)
):
    """Returns a new access token and a new refresh token."""
    token_data = decode_token(refresh_token, expected_type="refresh")
    current_user = _load_active_user(db, token_data.sub)
    return _issue_tokens(current_user)

# ***************************************************************
# 3. Current user
# ***************************************************************
@router.get("/me", response_model=UserInDB)
def read_users_me(current_user: User = Depends(get_current_user)):
    return current_user
