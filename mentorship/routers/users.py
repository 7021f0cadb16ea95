# mentorship/routers/users.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from mentorship.database import get_db
from mentorship.errors import ConflictError, NotFound, ValidationError
from mentorship.models.user import User
from mentorship.schemas.user import UserCreate, UserOut, UserUpdate
from mentorship.services.task_service import TaskService
from mentorship.utils.auth import get_current_user
from mentorship.utils.deps import get_task_service
from mentorship.utils.security import hash_password

router = APIRouter()


def _build_user(user: UserCreate) -> User:
    if not user.password:
        raise ValidationError("Password is required")
    return User(
        user_id=user.user_id,
        fullname=user.fullname,
        domain=user.domain,
        mentor=user.mentor,
        password_hash=hash_password(user.password),
    )


@router.post("/", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, db: Session = Depends(get_db)):
    """Sign up a mentee"""
    if db.query(User).filter(User.user_id == user.user_id).first():
        raise ConflictError(f"User {user.user_id} already exists")

    new_user = _build_user(user)
    db.add(new_user)
    db.commit()
    db.refresh(new_user)
    return new_user


@router.post("/many", response_model=List[UserOut], status_code=status.HTTP_201_CREATED)
def create_many_users(users: List[UserCreate], db: Session = Depends(get_db)):
    """Create several mentees at once; nothing is created if any id is taken"""
    ids = [user.user_id for user in users]
    if len(set(ids)) != len(ids):
        raise ValidationError("Duplicate user ids in request")
    taken = db.query(User.user_id).filter(User.user_id.in_(ids)).all()
    if taken:
        raise ConflictError(f"Users already exist: {', '.join(user_id for (user_id,) in taken)}")

    new_users = [_build_user(user) for user in users]
    db.add_all(new_users)
    db.commit()
    for new_user in new_users:
        db.refresh(new_user)
    return new_users


@router.get("/", response_model=List[UserOut])
def get_all_users(db: Session = Depends(get_db)):
    return db.query(User).order_by(User.pk).all()


@router.get("/me", response_model=UserOut)
def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current user information"""
    return current_user


@router.get("/mentor/{mentor_id}", response_model=List[UserOut])
def get_users_by_mentor(mentor_id: str, db: Session = Depends(get_db)):
    """Get mentees of a mentor"""
    return db.query(User).filter(User.mentor == mentor_id).order_by(User.pk).all()


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: str, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFound(f"User {user_id} not found")
    return user


@router.put("/{user_id}", response_model=UserOut)
def update_user(user_id: str, user_update: UserUpdate, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.user_id == user_id).first()
    if not user:
        raise NotFound(f"User {user_id} not found")

    update_data = user_update.model_dump(exclude_unset=True)
    password = update_data.pop("password", None)
    if password:
        user.password_hash = hash_password(password)
    for field, value in update_data.items():
        if value is not None:
            setattr(user, field, value)

    db.commit()
    db.refresh(user)
    return user


@router.delete("/{user_id}")
def delete_user(user_id: str, service: TaskService = Depends(get_task_service)):
    """Delete a user together with the tasks they own"""
    service.delete_user(user_id)
    return {"message": "User deleted successfully"}
