# mentorship/services/task_service.py
"""
Task lifecycle operations: create/assign, submit, verify, reject, delete.

Every mutation of a single task runs under task_locks so a request and the
maintenance job never interleave on the same task inside this process.
"""

from typing import Dict, List, Optional, Tuple
import logging

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mentorship.errors import BlobNotFound, ConflictError, NotFound, StorageError, ValidationError
from mentorship.models import Submission, Task, TaskStatus, User, utcnow
from mentorship.utils.locks import task_locks

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("title", "description", "resources", "is_global")


class TaskService:
    """Lifecycle operations over the task and user tables plus the blob store"""

    def __init__(self, db: Session, blob_store):
        self.db = db
        self.blob_store = blob_store

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_user(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.user_id == user_id).first()
        if not user:
            raise NotFound(f"User {user_id} not found")
        return user

    def get_task(self, task_id: int) -> Task:
        task = self.db.get(Task, task_id, populate_existing=True)
        if not task:
            raise NotFound(f"Task {task_id} not found")
        return task

    def list_tasks(self, skip: int = 0, limit: int = 100, status: Optional[TaskStatus] = None) -> List[Task]:
        query = self.db.query(Task)
        if status:
            query = query.filter(Task.status == status)
        return query.order_by(Task.id).offset(skip).limit(limit).all()

    def list_global_tasks(self) -> List[Task]:
        return self.db.query(Task).filter(Task.is_global.is_(True)).order_by(Task.id).all()

    def list_user_tasks(self, user_id: str) -> List[Task]:
        return self.db.query(Task).filter(Task.owner_user_id == user_id).order_by(Task.id).all()

    def list_admin_tasks(self, admin_id: str) -> List[Task]:
        return self.db.query(Task).filter(Task.created_by == admin_id).order_by(Task.id).all()

    def get_submission_file(self, task_id: int) -> Tuple[bytes, str, str]:
        """Return (data, content_type, file_name) of the task's submitted file"""
        task = self.get_task(task_id)
        submission = task.submission
        if submission is None or not submission.blob_id:
            raise NotFound(f"Task {task_id} has no submitted file")
        data, content_type = self.blob_store.get(submission.blob_id)
        return data, submission.file_type or content_type, submission.file_name or submission.blob_id

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create_task(
        self,
        owner_user_id: str,
        title: str,
        description: Optional[str] = None,
        resources: Optional[Dict[str, str]] = None,
        is_global: bool = False,
        created_by: Optional[str] = None,
        curriculum_problem_id: int = 0,
    ) -> Task:
        """Create a task and append it to the owner's assigned list in one commit"""
        # Owner first, so an unknown id never leaves an orphaned task behind
        owner = self.get_user(owner_user_id)

        task = Task(
            owner_user_id=owner.user_id,
            created_by=created_by,
            title=title,
            description=description,
            resources=dict(resources or {}),
            is_global=is_global,
            curriculum_problem_id=curriculum_problem_id,
            status=TaskStatus.NOT_STARTED,
        )
        self.db.add(task)
        owner.assigned_tasks.append(task)
        self._commit()
        self.db.refresh(task)

        logger.info(f"Created task {task.id} '{task.title}' for user {owner.user_id}")
        return task

    def update_task(self, task_id: int, **fields) -> Task:
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields cannot be edited: {', '.join(sorted(unknown))}")

        with task_locks.hold(task_id):
            task = self.get_task(task_id)
            for name, value in fields.items():
                if value is None:
                    continue
                if name == "title" and not str(value).strip():
                    raise ValidationError("Title must not be blank")
                setattr(task, name, dict(value) if name == "resources" else value)
            self._commit()
            self.db.refresh(task)
        return task

    def submit_task(
        self,
        task_id: int,
        user_id: str,
        data: Optional[bytes],
        file_name: Optional[str] = None,
        content_type: Optional[str] = None,
        link: Optional[str] = None,
        remarks: Optional[str] = None,
        now=None,
    ) -> Task:
        """
        Store the submitted file and move the task to pending

        Args:
            task_id: Task being submitted
            user_id: Submitting mentee
            data: File contents, required
            file_name: Original file name
            content_type: MIME type of the file
            link: Optional URL (repository, deployed app, ...)
            remarks: Optional note for the mentor
            now: Submission timestamp override

        Raises:
            ValidationError: no file, or a private task submitted by someone else
            NotFound: unknown task or user
            ConflictError: the task is already pending or completed
        """
        if not data:
            raise ValidationError("A file is required to submit a task")
        self.blob_store.validate_upload(file_name, len(data))

        with task_locks.hold(task_id):
            task = self.get_task(task_id)
            user = self.get_user(user_id)

            if not task.is_global and task.owner_user_id != user.user_id:
                raise ValidationError(f"Task {task_id} is not assigned to user {user_id}")
            if task.status != TaskStatus.NOT_STARTED:
                raise ConflictError(f"Task {task_id} is already {task.status.value}")

            # Left behind by a pending timeout reset; replaced by this submission
            stale_blob_id = task.submission_blob_id

            blob_id = self.blob_store.put(
                data,
                content_type or "application/octet-stream",
                {"task_id": str(task.id), "user_id": user.user_id, "file_name": file_name or ""},
            )
            task.set_submission(Submission(
                blob_id=blob_id,
                file_name=file_name,
                file_type=content_type,
                submitted_by=user.user_id,
                submitted_at=now or utcnow(),
                link=link,
                remarks=remarks,
            ))
            task.status = TaskStatus.PENDING

            if task in user.assigned_tasks:
                user.assigned_tasks.remove(task)
            if task not in user.done_tasks:
                user.done_tasks.append(task)

            try:
                self._commit()
            except StorageError:
                self._release_blob(blob_id, task_id)
                raise

            if stale_blob_id and stale_blob_id != blob_id:
                self._release_blob(stale_blob_id, task_id)
            self.db.refresh(task)

        logger.info(f"Task {task_id} submitted by user {user_id} (blob {blob_id})")
        return task

    def verify_task(self, task_id: int) -> Task:
        with task_locks.hold(task_id):
            task = self.get_task(task_id)
            if task.status == TaskStatus.COMPLETED:
                return task
            task.status = TaskStatus.COMPLETED
            self._commit()
            self.db.refresh(task)

        logger.info(f"Task {task_id} verified")
        return task

    def reject_task(self, task_id: int) -> Task:
        """Send the task back to not_started and drop its submission"""
        with task_locks.hold(task_id):
            task = self.get_task(task_id)
            blob_id = task.submission_blob_id
            if blob_id:
                self._release_blob(blob_id, task_id)
            task.clear_submission()
            task.status = TaskStatus.NOT_STARTED
            self._commit()
            self.db.refresh(task)

        logger.info(f"Task {task_id} rejected")
        return task

    def set_status(self, task_id: int, raw_status) -> Task:
        """Admin status change; accepts the enum values and legacy true/null"""
        status = TaskStatus.from_legacy(raw_status)
        if status == TaskStatus.COMPLETED:
            return self.verify_task(task_id)
        if status == TaskStatus.NOT_STARTED:
            return self.reject_task(task_id)
        raise ValidationError("A task only becomes pending through a submission")

    def delete_task(self, task_id: int):
        """
        Delete a task with its user references and blob.

        Removing the references and the blob is best effort: failures are
        logged and the task record is deleted regardless.
        """
        with task_locks.hold(task_id):
            task = self.get_task(task_id)
            blob_id = task.submission_blob_id

            try:
                holders = self.db.query(User).filter(or_(
                    User.assigned_tasks.any(Task.id == task_id),
                    User.done_tasks.any(Task.id == task_id),
                )).all()
                for holder in holders:
                    if task in holder.assigned_tasks:
                        holder.assigned_tasks.remove(task)
                    if task in holder.done_tasks:
                        holder.done_tasks.remove(task)
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Error removing references to task {task_id}: {e}")
                task = self.get_task(task_id)

            if blob_id:
                self._release_blob(blob_id, task_id)

            self.db.delete(task)
            self._commit()

        logger.info(f"Task {task_id} deleted")

    def delete_all_tasks(self) -> int:
        """Delete every task through the same cascade as delete_task"""
        task_ids = [task_id for (task_id,) in self.db.query(Task.id).order_by(Task.id).all()]
        deleted = 0
        for task_id in task_ids:
            try:
                self.delete_task(task_id)
                deleted += 1
            except NotFound:
                continue
            except StorageError as e:
                logger.error(f"Error deleting task {task_id} during bulk delete: {e}")
        logger.info(f"Bulk delete removed {deleted} of {len(task_ids)} tasks")
        return deleted

    def delete_user(self, user_id: str):
        """Delete a user after cascading through every task they own"""
        user = self.get_user(user_id)
        for task_id in [task.id for task in self.list_user_tasks(user.user_id)]:
            try:
                self.delete_task(task_id)
            except NotFound:
                continue

        user = self.get_user(user_id)
        user.assigned_tasks.clear()
        user.done_tasks.clear()
        self.db.delete(user)
        self._commit()
        logger.info(f"User {user_id} deleted")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database commit failed: {e}")
            raise StorageError(f"Database error: {e}") from e

    def _release_blob(self, blob_id: str, task_id: int):
        """Delete a blob, logging instead of raising on failure"""
        try:
            self.blob_store.delete(blob_id)
        except BlobNotFound:
            logger.warning(f"Blob {blob_id} of task {task_id} was already gone")
        except StorageError as e:
            logger.error(f"Error deleting blob {blob_id} of task {task_id}: {e}")
