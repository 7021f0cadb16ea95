from pydantic import BaseModel
from typing import List, Optional


class ScheduledJob(BaseModel):
    id: str
    name: str
    next_run_time: Optional[str] = None
    trigger: str


class SchedulerStatus(BaseModel):
    status: str
    jobs: List[ScheduledJob] = []


class MaintenanceReportOut(BaseModel):
    success: bool
    started_at: str
    finished_at: Optional[str] = None
    tasks_created: int = 0
    tasks_advanced: int = 0
    files_deleted: int = 0
    tasks_reset: int = 0
    orphans_removed: int = 0
    entity_errors: int = 0
    failed_phases: List[str] = []
