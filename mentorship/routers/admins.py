# mentorship/routers/admins.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from mentorship.database import get_db
from mentorship.errors import ConflictError, NotFound
from mentorship.models.admin import Admin
from mentorship.schemas import AdminCreate, AdminUpdate, AdminOut, TaskCreate, TaskStatusUpdate, TaskOut
from mentorship.services.task_service import TaskService
from mentorship.utils.deps import get_task_service

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin(db: Session, admin_id: str) -> Admin:
    admin = db.query(Admin).filter(Admin.admin_id == admin_id).first()
    if not admin:
        raise NotFound(f"Admin {admin_id} not found")
    return admin


@router.post("/", response_model=AdminOut, status_code=status.HTTP_201_CREATED)
def create_admin(admin: AdminCreate, db: Session = Depends(get_db)):
    if db.query(Admin).filter(Admin.admin_id == admin.admin_id).first():
        raise ConflictError(f"Admin {admin.admin_id} already exists")
    new_admin = Admin(**admin.model_dump())
    db.add(new_admin)
    db.commit()
    db.refresh(new_admin)
    return new_admin


@router.get("/", response_model=List[AdminOut])
def get_all_admins(db: Session = Depends(get_db)):
    return db.query(Admin).order_by(Admin.pk).all()


@router.get("/{admin_id}", response_model=AdminOut)
def get_admin(admin_id: str, db: Session = Depends(get_db)):
    return _get_admin(db, admin_id)


@router.put("/{admin_id}", response_model=AdminOut)
def update_admin(admin_id: str, admin_update: AdminUpdate, db: Session = Depends(get_db)):
    admin = _get_admin(db, admin_id)
    for field, value in admin_update.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(admin, field, value)
    db.commit()
    db.refresh(admin)
    return admin


@router.delete("/{admin_id}")
def delete_admin(admin_id: str, db: Session = Depends(get_db)):
    admin = _get_admin(db, admin_id)
    db.delete(admin)
    db.commit()
    return {"message": "Admin deleted successfully"}


@router.post("/{admin_id}/tasks", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_and_assign_task(
    admin_id: str,
    task: TaskCreate,
    db: Session = Depends(get_db),
    service: TaskService = Depends(get_task_service),
):
    """Create a task on behalf of an admin and assign it to a mentee"""
    _get_admin(db, admin_id)
    return service.create_task(
        owner_user_id=task.user_id,
        title=task.title,
        description=task.description,
        resources=task.resources,
        is_global=task.is_global,
        created_by=admin_id,
    )


@router.get("/{admin_id}/tasks", response_model=List[TaskOut])
def get_admin_tasks(admin_id: str, service: TaskService = Depends(get_task_service)):
    """Get all tasks created by an admin"""
    return service.list_admin_tasks(admin_id)


@router.put("/tasks/{task_id}/status", response_model=TaskOut)
def update_task_status(
    task_id: int,
    status_update: TaskStatusUpdate,
    service: TaskService = Depends(get_task_service),
):
    """Verify (completed / true) or reset (not_started / null) a task"""
    return service.set_status(task_id, status_update.status)
