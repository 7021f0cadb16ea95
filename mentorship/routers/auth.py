# mentorship/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from mentorship.database import get_db
from mentorship.models.admin import Admin
from mentorship.models.user import User
from mentorship.schemas import AdminSignin, AdminOut, Token, UserSignin
from mentorship.utils.security import create_access_token, verify_password

router = APIRouter()


@router.post("/signin", response_model=Token)
def signin(credentials: UserSignin, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.fullname == credentials.fullname).first()
    if not user or not verify_password(credentials.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Fullname or password is incorrect")

    token = create_access_token(data={"sub": user.user_id})
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": user,
    }


@router.post("/admin/signin", response_model=AdminOut)
def admin_signin(credentials: AdminSignin, db: Session = Depends(get_db)):
    """Admins sign in with their full name and their admin id as password"""
    admin = db.query(Admin).filter(Admin.admin_id == credentials.password).first()
    if not admin or admin.fullname != credentials.username:
        raise HTTPException(status_code=404, detail="Admin not found")
    return admin
