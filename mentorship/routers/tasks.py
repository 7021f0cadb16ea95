# mentorship/routers/tasks.py
from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response
from typing import List, Optional
from urllib.parse import quote

from mentorship.models import TaskStatus
from mentorship.schemas import TaskCreate, TaskUpdate, TaskOut, BulkDeleteOut
from mentorship.services.task_service import TaskService
from mentorship.utils.deps import get_task_service

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("/", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(task: TaskCreate, service: TaskService = Depends(get_task_service)):
    """Create a task and assign it to its owner"""
    return service.create_task(
        owner_user_id=task.user_id,
        title=task.title,
        description=task.description,
        resources=task.resources,
        is_global=task.is_global,
    )


@router.get("/", response_model=List[TaskOut])
def get_all_tasks(
    skip: int = 0,
    limit: int = 100,
    status: Optional[TaskStatus] = None,
    service: TaskService = Depends(get_task_service),
):
    """Get tasks with optional status filter"""
    return service.list_tasks(skip=skip, limit=limit, status=status)


@router.delete("/", response_model=BulkDeleteOut)
def delete_all_tasks(service: TaskService = Depends(get_task_service)):
    """Delete every task, cleaning user references and submitted files"""
    return {"deleted": service.delete_all_tasks()}


@router.get("/global", response_model=List[TaskOut])
def get_global_tasks(service: TaskService = Depends(get_task_service)):
    return service.list_global_tasks()


@router.get("/user/{user_id}", response_model=List[TaskOut])
def get_tasks_by_user(user_id: str, service: TaskService = Depends(get_task_service)):
    """Get tasks owned by a user"""
    return service.list_user_tasks(user_id)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(task_id: int, service: TaskService = Depends(get_task_service)):
    return service.get_task(task_id)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(task_id: int, task_update: TaskUpdate, service: TaskService = Depends(get_task_service)):
    """Edit title, description, resources or the global flag"""
    return service.update_task(task_id, **task_update.model_dump(exclude_unset=True))


@router.delete("/{task_id}")
def delete_task(task_id: int, service: TaskService = Depends(get_task_service)):
    service.delete_task(task_id)
    return {"message": "Task deleted successfully"}


@router.post("/{task_id}/submit", response_model=TaskOut)
def submit_task(
    task_id: int,
    user_id: str = Form(...),
    link: Optional[str] = Form(None),
    remarks: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    service: TaskService = Depends(get_task_service),
):
    """Submit a file (and optionally a link) for a task"""
    data = file.file.read() if file is not None else None
    return service.submit_task(
        task_id,
        user_id,
        data,
        file_name=file.filename if file is not None else None,
        content_type=file.content_type if file is not None else None,
        link=link or None,
        remarks=remarks or None,
    )


def _content_disposition(file_name: str) -> str:
    """ASCII filename for old clients plus the RFC 5987 UTF-8 form"""
    fallback = "".join(c for c in file_name if 32 <= ord(c) < 127 and c not in '"\\') or "download"
    return f'attachment; filename="{fallback}"; filename*=UTF-8\'\'{quote(file_name, safe="")}'


@router.get("/{task_id}/file")
def download_submission(task_id: int, service: TaskService = Depends(get_task_service)):
    """Download the file submitted for a task"""
    data, content_type, file_name = service.get_submission_file(task_id)
    return Response(
        content=data,
        media_type=content_type,
        headers={"Content-Disposition": _content_disposition(file_name)},
    )


@router.post("/{task_id}/verify", response_model=TaskOut)
def verify_task(task_id: int, service: TaskService = Depends(get_task_service)):
    return service.verify_task(task_id)


@router.post("/{task_id}/reject", response_model=TaskOut)
def reject_task(task_id: int, service: TaskService = Depends(get_task_service)):
    """Reject a submission; the mentee can submit again"""
    return service.reject_task(task_id)
