# mentorship/utils/auth.py
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from mentorship.database import get_db
from mentorship.models.user import User
from mentorship.utils.security import verify_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/signin")


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    payload = verify_token(token)
    if not payload or payload.get("sub") is None:
        raise credentials_exception

    user = db.query(User).filter(User.user_id == payload["sub"]).first()
    if user is None:
        raise credentials_exception
    return user
