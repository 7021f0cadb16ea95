# mentorship/models/admin.py
from sqlalchemy import Column, Integer, String

from mentorship.database import Base


class Admin(Base):
    __tablename__ = "admins"

    pk = Column(Integer, primary_key=True, index=True)
    admin_id = Column(String, unique=True, index=True, nullable=False)
    fullname = Column(String, nullable=False)
    domain = Column(String, nullable=False)
