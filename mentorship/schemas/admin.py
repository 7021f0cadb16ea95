from pydantic import BaseModel
from typing import Optional


class AdminCreate(BaseModel):
    admin_id: str
    fullname: str
    domain: str


class AdminUpdate(BaseModel):
    fullname: Optional[str] = None
    domain: Optional[str] = None


class AdminSignin(BaseModel):
    username: str
    password: str


class AdminOut(BaseModel):
    admin_id: str
    fullname: str
    domain: str

    model_config = {
        "from_attributes": True
    }
