# mentorship/models/user.py
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Table
from sqlalchemy.orm import relationship

from mentorship.database import Base
from mentorship.models.task import utcnow

# Ordered task references. The autoincrement position column keeps
# insertion order (assignment order / completion order).
user_assigned_tasks = Table(
    "user_assigned_tasks",
    Base.metadata,
    Column("position", Integer, primary_key=True, autoincrement=True),
    Column("user_pk", Integer, ForeignKey("users.pk", ondelete="CASCADE"), nullable=False, index=True),
    Column("task_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True),
)

user_done_tasks = Table(
    "user_done_tasks",
    Base.metadata,
    Column("position", Integer, primary_key=True, autoincrement=True),
    Column("user_pk", Integer, ForeignKey("users.pk", ondelete="CASCADE"), nullable=False, index=True),
    Column("task_id", Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True),
)


class User(Base):
    __tablename__ = "users"

    pk = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, unique=True, index=True, nullable=False)  # business-facing id
    fullname = Column(String, nullable=False, index=True)
    domain = Column(String, nullable=False)
    mentor = Column(String, nullable=True, index=True)  # mentor's admin id, not enforced
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    assigned_tasks = relationship(
        "Task",
        secondary=user_assigned_tasks,
        order_by=user_assigned_tasks.c.position,
    )
    done_tasks = relationship(
        "Task",
        secondary=user_done_tasks,
        order_by=user_done_tasks.c.position,
    )

    def __repr__(self):
        return f"<User(user_id='{self.user_id}', fullname='{self.fullname}')>"
