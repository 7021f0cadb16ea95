from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

from .task import TaskOut


class UserCreate(BaseModel):
    user_id: str
    fullname: str
    domain: str
    mentor: Optional[str] = None
    password: str


class UserSignin(BaseModel):
    fullname: str
    password: str


class UserUpdate(BaseModel):
    fullname: Optional[str] = None
    domain: Optional[str] = None
    mentor: Optional[str] = None
    password: Optional[str] = None

    model_config = {
        "from_attributes": True
    }


class UserBasic(BaseModel):
    user_id: str
    fullname: str
    domain: str
    mentor: Optional[str] = None
    created_at: datetime

    model_config = {
        "from_attributes": True
    }


class UserOut(UserBasic):
    assigned_tasks: List[TaskOut] = []
    done_tasks: List[TaskOut] = []
