# mentorship/models/task.py
from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean, Enum, JSON
import enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from mentorship.database import Base
from mentorship.errors import ValidationError


def utcnow() -> datetime:
    """Naive UTC timestamp, the form stored in DateTime columns"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class TaskStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    PENDING = "pending"
    COMPLETED = "completed"

    @classmethod
    def from_legacy(cls, value) -> "TaskStatus":
        """
        Map a status value, including the boolean encodings found in older
        stored data, onto the tri-state enum.

        True means completed and None means not started in every historic
        schema. False meant "incomplete" in one and "not started" in another,
        so it is rejected instead of guessed.
        """
        if isinstance(value, cls):
            return value
        if value is True:
            return cls.COMPLETED
        if value is None:
            return cls.NOT_STARTED
        if isinstance(value, str):
            normalized = value.strip().lower()
            if normalized == "true":
                return cls.COMPLETED
            if normalized == "null":
                return cls.NOT_STARTED
            for member in cls:
                if member.value == normalized:
                    return member
        raise ValidationError(f"Unsupported task status: {value!r}")


@dataclass(frozen=True)
class Submission:
    blob_id: str
    file_name: Optional[str]
    file_type: Optional[str]
    submitted_by: Optional[str]
    submitted_at: datetime
    link: Optional[str] = None
    remarks: Optional[str] = None


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    owner_user_id = Column(String, nullable=False, index=True)
    created_by = Column(String, nullable=True, index=True)  # admin id, None for generated tasks
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=True)
    resources = Column(JSON, nullable=False, default=dict)  # label -> URL
    is_global = Column(Boolean, nullable=False, default=False)
    curriculum_problem_id = Column(Integer, nullable=False, default=0)  # 0 = not a curriculum task
    status = Column(
        Enum(TaskStatus, name="task_status", values_callable=lambda statuses: [s.value for s in statuses]),
        nullable=False,
        default=TaskStatus.NOT_STARTED,
    )

    # Submission (all NULL until the mentee submits)
    submission_blob_id = Column(String, nullable=True, index=True)
    submission_file_name = Column(String(255), nullable=True)
    submission_file_type = Column(String(100), nullable=True)
    submission_submitted_by = Column(String, nullable=True)
    submission_submitted_at = Column(DateTime, nullable=True)
    submission_link = Column(String, nullable=True)
    submission_remarks = Column(Text, nullable=True)

    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    @property
    def submission(self) -> Optional[Submission]:
        if self.submission_submitted_at is None:
            return None
        return Submission(
            blob_id=self.submission_blob_id,
            file_name=self.submission_file_name,
            file_type=self.submission_file_type,
            submitted_by=self.submission_submitted_by,
            submitted_at=self.submission_submitted_at,
            link=self.submission_link,
            remarks=self.submission_remarks,
        )

    @property
    def is_curriculum_task(self) -> bool:
        return (self.curriculum_problem_id or 0) > 0

    def set_submission(self, submission: Submission):
        self.submission_blob_id = submission.blob_id
        self.submission_file_name = submission.file_name
        self.submission_file_type = submission.file_type
        self.submission_submitted_by = submission.submitted_by
        self.submission_submitted_at = submission.submitted_at
        self.submission_link = submission.link
        self.submission_remarks = submission.remarks

    def clear_submission(self):
        self.submission_blob_id = None
        self.submission_file_name = None
        self.submission_file_type = None
        self.submission_submitted_by = None
        self.submission_submitted_at = None
        self.submission_link = None
        self.submission_remarks = None

    def __repr__(self):
        return f"<Task(id={self.id}, owner='{self.owner_user_id}', title='{self.title}', status='{self.status}')>"
