# mentorship/utils/deps.py
"""
FastAPI dependencies for the collaborators constructed at startup
(blob store, curriculum catalog, maintenance scheduler). They live on
app.state so tests can swap them through dependency_overrides.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from mentorship.database import get_db
from mentorship.errors import StorageError
from mentorship.services.task_service import TaskService


def get_blob_store(request: Request):
    blob_store = getattr(request.app.state, "blob_store", None)
    if blob_store is None or not blob_store.is_ready:
        raise StorageError("Blob store is not ready")
    return blob_store


def get_catalog(request: Request):
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise StorageError("Curriculum catalog is not loaded")
    return catalog


def get_maintenance(request: Request):
    maintenance = getattr(request.app.state, "maintenance", None)
    if maintenance is None:
        raise StorageError("Maintenance scheduler is not configured")
    return maintenance


def get_task_service(db: Session = Depends(get_db), blob_store=Depends(get_blob_store)):
    return TaskService(db, blob_store)
