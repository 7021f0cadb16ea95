# mentorship/services/scheduler.py
"""
Daily maintenance job: curriculum backfill and advancement, submission file
retention and orphaned blob cleanup.
"""

import asyncio
import threading
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Callable, Dict, List, Optional
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session

from mentorship.config.settings import settings
from mentorship.errors import BlobNotFound, ConflictError, StorageError
from mentorship.models import Task, TaskStatus, User, utcnow
from mentorship.services.curriculum import CurriculumCatalog
from mentorship.services.task_service import TaskService
from mentorship.utils.locks import task_locks

logger = logging.getLogger(__name__)


@dataclass
class MaintenanceReport:
    started_at: datetime
    finished_at: Optional[datetime] = None
    tasks_created: int = 0
    tasks_advanced: int = 0
    files_deleted: int = 0
    tasks_reset: int = 0
    orphans_removed: int = 0
    entity_errors: int = 0
    failed_phases: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_phases

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
            "tasks_created": self.tasks_created,
            "tasks_advanced": self.tasks_advanced,
            "files_deleted": self.files_deleted,
            "tasks_reset": self.tasks_reset,
            "orphans_removed": self.orphans_removed,
            "entity_errors": self.entity_errors,
            "failed_phases": list(self.failed_phases),
        }


class MaintenanceScheduler:
    """Runs the maintenance routine once a day and on demand"""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        blob_store,
        catalog: CurriculumCatalog,
        curriculum_title: str = settings.CURRICULUM_TITLE,
        retention_days: int = settings.SUBMISSION_RETENTION_DAYS,
        pending_timeout_days: int = settings.PENDING_TIMEOUT_DAYS,
        orphan_grace_hours: int = settings.ORPHAN_BLOB_GRACE_HOURS,
    ):
        self.session_factory = session_factory
        self.blob_store = blob_store
        self.catalog = catalog
        self.curriculum_title = curriculum_title
        self.retention_days = retention_days
        self.pending_timeout_days = pending_timeout_days
        self.orphan_grace_hours = orphan_grace_hours

        self.scheduler = AsyncIOScheduler(timezone=settings.SCHEDULER_TIMEZONE)
        self.is_running = False
        self._run_lock = threading.Lock()
        self.last_report: Optional[MaintenanceReport] = None

    def start(self):
        """Start the scheduler"""
        if not self.is_running:
            self.scheduler.add_job(
                self.run_maintenance_job,
                trigger=CronTrigger(
                    hour=settings.MAINTENANCE_HOUR,
                    minute=settings.MAINTENANCE_MINUTE,
                    timezone=settings.SCHEDULER_TIMEZONE,
                ),
                id="daily_maintenance",
                name="Daily Curriculum And Submission Maintenance",
                replace_existing=True,
                max_instances=1,
                coalesce=True,
            )
            self.scheduler.start()
            self.is_running = True
            logger.info("Maintenance scheduler started successfully")

    def stop(self):
        """Stop the scheduler"""
        if self.is_running:
            self.scheduler.shutdown(wait=False)
            self.is_running = False
            logger.info("Maintenance scheduler stopped")

    async def run_maintenance_job(self):
        """Timer entry point; the blocking work runs off the event loop"""
        try:
            await asyncio.to_thread(self.run_maintenance)
        except ConflictError as e:
            logger.warning(f"Skipping scheduled maintenance: {e}")

    def run_maintenance(self, now: Optional[datetime] = None) -> MaintenanceReport:
        """
        Run every phase once. Shared by the timer and the HTTP trigger.

        A failing phase is logged and recorded in the report; the remaining
        phases still run.

        Raises:
            ConflictError: another run is still in progress
        """
        if not self._run_lock.acquire(blocking=False):
            raise ConflictError("A maintenance run is already in progress")

        try:
            now = now or utcnow()
            report = MaintenanceReport(started_at=utcnow())
            logger.info(f"Running maintenance tasks for {now.isoformat()}")

            phases = (
                ("curriculum_backfill", self.backfill_curriculum_tasks),
                ("curriculum_advance", self.advance_curriculum_tasks),
                ("submission_retention", self.sweep_submission_files),
                ("orphan_blobs", self.sweep_orphan_blobs),
            )
            for name, phase in phases:
                try:
                    phase(report, now)
                except Exception:
                    logger.exception(f"Maintenance phase {name} failed")
                    report.failed_phases.append(name)

            report.finished_at = utcnow()
            self.last_report = report
            logger.info(
                f"Maintenance finished: created {report.tasks_created}, advanced {report.tasks_advanced}, "
                f"deleted {report.files_deleted} files, reset {report.tasks_reset}, "
                f"removed {report.orphans_removed} orphans, {report.entity_errors} entity errors, "
                f"failed phases {report.failed_phases or 'none'}"
            )
            return report
        finally:
            self._run_lock.release()

    def backfill_curriculum_tasks(self, report: MaintenanceReport, now: datetime):
        """Phase A: give every user a curriculum task seeded from the first problem"""
        entry = self.catalog.first()
        if entry is None:
            logger.warning("Curriculum catalog is empty, skipping backfill")
            return
        description, resources = self.catalog.task_fields(entry)

        db = self.session_factory()
        try:
            user_ids = [user_id for (user_id,) in db.query(User.user_id).order_by(User.pk).all()]
            logger.info(f"Found {len(user_ids)} users to process for curriculum tasks")
            service = TaskService(db, self.blob_store)

            for user_id in user_ids:
                try:
                    existing = db.query(Task.id).filter(
                        Task.owner_user_id == user_id,
                        Task.title == self.curriculum_title,
                    ).first()
                    if existing:
                        continue
                    service.create_task(
                        user_id,
                        self.curriculum_title,
                        description=description,
                        resources=resources,
                        curriculum_problem_id=entry.id,
                    )
                    report.tasks_created += 1
                except Exception as e:
                    db.rollback()
                    report.entity_errors += 1
                    logger.error(f"Error creating curriculum task for user {user_id}: {e}")

            logger.info(f"Created {report.tasks_created} new curriculum tasks")
        finally:
            db.close()

    def advance_curriculum_tasks(self, report: MaintenanceReport, now: datetime):
        """Phase B: move verified curriculum tasks on to the next problem"""
        db = self.session_factory()
        try:
            task_ids = [task_id for (task_id,) in db.query(Task.id).filter(
                Task.status == TaskStatus.COMPLETED,
                Task.curriculum_problem_id > 0,
                Task.title == self.curriculum_title,
            ).order_by(Task.id).all()]
            logger.info(f"Found {len(task_ids)} completed curriculum tasks")

            for task_id in task_ids:
                try:
                    with task_locks.hold(task_id):
                        if self._advance_task(db, task_id):
                            report.tasks_advanced += 1
                except Exception as e:
                    db.rollback()
                    report.entity_errors += 1
                    logger.error(f"Error advancing curriculum task {task_id}: {e}")

            logger.info(f"Advanced {report.tasks_advanced} curriculum tasks to their next problem")
        finally:
            db.close()

    def _advance_task(self, db: Session, task_id: int) -> bool:
        task = db.get(Task, task_id, populate_existing=True)
        # Re-checked under the lock: the task may have changed since the query
        if task is None or task.status != TaskStatus.COMPLETED:
            return False

        current_id = task.curriculum_problem_id
        if self.catalog.index_of(current_id) is None:
            logger.warning(f"Task {task_id} tracks unknown curriculum problem {current_id}, skipping")
            return False

        next_entry = self.catalog.next_after(current_id)
        if next_entry is None:
            logger.info(f"User {task.owner_user_id} has finished the curriculum (task {task_id})")
            return False

        # The previous problem's file goes before the reference does
        if task.submission_blob_id:
            self._delete_blob(task.submission_blob_id, task_id)

        description, resources = self.catalog.task_fields(next_entry)
        task.description = description
        task.curriculum_problem_id = next_entry.id
        task.resources = resources
        task.clear_submission()
        task.status = TaskStatus.NOT_STARTED
        db.commit()

        logger.info(f"Task {task_id} advanced from problem {current_id} to {next_entry.id}")
        return True

    def sweep_submission_files(self, report: MaintenanceReport, now: datetime):
        """
        Phase C: delete files of verified submissions after the retention
        period and reset submissions nobody verified in time.
        """
        retention_cutoff = now - timedelta(days=self.retention_days)
        pending_cutoff = now - timedelta(days=self.pending_timeout_days)

        db = self.session_factory()
        try:
            task_ids = [task_id for (task_id,) in db.query(Task.id).filter(
                Task.submission_blob_id.isnot(None),
                Task.title != self.curriculum_title,
            ).order_by(Task.id).all()]
            logger.info(f"Found {len(task_ids)} tasks with file submissions to process")

            for task_id in task_ids:
                try:
                    with task_locks.hold(task_id):
                        self._sweep_task(db, task_id, retention_cutoff, pending_cutoff, report)
                except Exception as e:
                    db.rollback()
                    report.entity_errors += 1
                    logger.error(f"Error processing submission of task {task_id}: {e}")

            logger.info(
                f"Cleanup summary: deleted {report.files_deleted} files, reset {report.tasks_reset} task statuses"
            )
        finally:
            db.close()

    def _sweep_task(self, db: Session, task_id: int, retention_cutoff: datetime,
                    pending_cutoff: datetime, report: MaintenanceReport):
        task = db.get(Task, task_id, populate_existing=True)
        if task is None:
            return
        submission = task.submission
        if submission is None or not submission.blob_id:
            return

        if task.status == TaskStatus.COMPLETED and submission.submitted_at <= retention_cutoff:
            # Blob first: a storage failure leaves the reference for the next run
            if self._delete_blob(submission.blob_id, task_id):
                report.files_deleted += 1
            task.clear_submission()
            db.commit()
        elif task.status == TaskStatus.PENDING and submission.submitted_at <= pending_cutoff:
            # Submission data stays so the mentee can see what was sent
            task.status = TaskStatus.NOT_STARTED
            db.commit()
            report.tasks_reset += 1
            logger.info(f"Reset task {task_id}, pending since {submission.submitted_at.isoformat()}")

    def sweep_orphan_blobs(self, report: MaintenanceReport, now: datetime):
        """Phase D: delete blobs no task references once they are past the grace period"""
        cutoff = now - timedelta(hours=self.orphan_grace_hours)

        db = self.session_factory()
        try:
            referenced = {
                blob_id for (blob_id,) in
                db.query(Task.submission_blob_id).filter(Task.submission_blob_id.isnot(None)).all()
            }
        finally:
            db.close()

        for blob_id, modified_at in list(self.blob_store.list_blobs()):
            if blob_id in referenced or modified_at > cutoff:
                continue
            try:
                self.blob_store.delete(blob_id)
                report.orphans_removed += 1
            except BlobNotFound:
                continue
            except StorageError as e:
                report.entity_errors += 1
                logger.error(f"Error deleting orphaned blob {blob_id}: {e}")

        logger.info(f"Removed {report.orphans_removed} orphaned blobs")

    def _delete_blob(self, blob_id: str, task_id: int) -> bool:
        """Delete a blob; an already missing blob counts as deleted. Other errors propagate."""
        try:
            self.blob_store.delete(blob_id)
            return True
        except BlobNotFound:
            logger.warning(f"Blob {blob_id} of task {task_id} was already gone")
            return False

    async def get_scheduler_status(self) -> Dict[str, Any]:
        """Get scheduler status and job information"""
        if not self.is_running:
            return {"status": "stopped", "jobs": []}

        jobs = []
        for job in self.scheduler.get_jobs():
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                "trigger": str(job.trigger),
            })

        return {
            "status": "running",
            "jobs": jobs,
        }
