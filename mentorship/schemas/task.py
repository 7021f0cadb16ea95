# mentorship/schemas/task.py
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, Dict, Any

from mentorship.models.task import TaskStatus


class TaskBase(BaseModel):
    title: str
    description: Optional[str] = None
    resources: Dict[str, str] = Field(default_factory=dict)
    is_global: bool = False

    @field_validator("title")
    @classmethod
    def title_must_not_be_blank(cls, v):
        if not v or not v.strip():
            raise ValueError("Title must not be blank")
        return v.strip()


class TaskCreate(TaskBase):
    user_id: str


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    resources: Optional[Dict[str, str]] = None
    is_global: Optional[bool] = None


class TaskStatusUpdate(BaseModel):
    # also accepts the legacy true/null encodings
    status: Any = None


class SubmissionOut(BaseModel):
    blob_id: str
    file_name: Optional[str] = None
    file_type: Optional[str] = None
    submitted_by: Optional[str] = None
    submitted_at: datetime
    link: Optional[str] = None
    remarks: Optional[str] = None

    class Config:
        from_attributes = True


class TaskOut(BaseModel):
    id: int
    owner_user_id: str
    created_by: Optional[str] = None
    title: str
    description: Optional[str] = None
    resources: Dict[str, str] = {}
    is_global: bool
    curriculum_problem_id: int
    status: TaskStatus
    submission: Optional[SubmissionOut] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class BulkDeleteOut(BaseModel):
    deleted: int
