# shopstock/api/v1/endpoints/users.py
# type: ignore

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List

from shopstock.database import get_db
from shopstock.models.auth import User
from shopstock.schemas.auth import UserCreate, UserInDB, UserUpdate
from shopstock.core.security import get_password_hash
from shopstock.services.common import get_by_id
from shopstock.api.v1.endpoints.auth import require_user_admin


router = APIRouter()


def get_user_or_404(user_id: int, db: Session) -> User:
    user = get_by_id(db, User, user_id)
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")
    return user


# ***************************************************************
# 1. List users (GET /api/v1/users/)
# ***************************************************************
@router.get("/", response_model=List[UserInDB])
def read_users(db: Session = Depends(get_db), admin: User = Depends(require_user_admin)):
    return db.query(User).order_by(User.id).all()


# ***************************************************************
# 2. Create user (POST /api/v1/users/)
# ***************************************************************
@router.post("/", response_model=UserInDB, status_code=status.HTTP_201_CREATED)
def create_user(
    user_in: UserCreate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_user_admin)
):
    # 1. Username must be unique
    if db.query(User).filter(User.username == user_in.username).first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists.")

    # 2. Only a superuser may create another superuser
    if user_in.role == "superuser" and admin.role != "superuser":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only a superuser can create a superuser.")

    db_user = User(
        username=user_in.username,
        password_hash=get_password_hash(user_in.password),
        full_name=user_in.full_name,
        role=user_in.role,
        is_active=user_in.is_active,
    )
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


# ***************************************************************
# 3. Read user (GET /api/v1/users/{user_id})
# ***************************************************************
@router.get("/{user_id}", response_model=UserInDB)
def read_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(require_user_admin)):
    return get_user_or_404(user_id, db)


# ***************************************************************
# 4. Update user (PATCH /api/v1/users/{user_id})
# ***************************************************************
@router.patch("/{user_id}", response_model=UserInDB)
def update_user(
    user_id: int,
    user_in: UserUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_user_admin)
):
    db_user = get_user_or_404(user_id, db)
    update_data = user_in.model_dump(exclude_unset=True)

    # 1. Role changes
    if update_data.get("role") == "superuser" and admin.role != "superuser":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only a superuser can grant the superuser role.")
    if db_user.role == "superuser" and admin.role != "superuser":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only a superuser can modify a superuser.")

    # 2. Username uniqueness
    if "username" in update_data and update_data["username"] != db_user.username:
        if db.query(User).filter(User.username == update_data["username"]).first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Username already exists.")

    # 3. Password
    if "password" in update_data:
        password = update_data.pop("password")
        if password is not None:
            update_data["password_hash"] = get_password_hash(password)

    for key, value in update_data.items():
        if value is not None:
            setattr(db_user, key, value)

    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


# ***************************************************************
# 5. Delete user (DELETE /api/v1/users/{user_id})
# ***************************************************************
@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, db: Session = Depends(get_db), admin: User = Depends(require_user_admin)):
    db_user = get_user_or_404(user_id, db)

    if db_user.id == admin.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="You cannot delete your own account.")
    if db_user.role == "superuser" and admin.role != "superuser":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only a superuser can delete a superuser.")

    db.delete(db_user)
    db.commit()
    return
