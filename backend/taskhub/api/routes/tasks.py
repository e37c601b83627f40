from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from taskhub.core.deps import page_params, require_caller
from taskhub.db.models import Priority, TaskStatus
from taskhub.db.schemas import Page, TaskIn, TaskOut, TaskStatusUpdate
from taskhub.db.session import get_db
from taskhub.db.store import PageRequest
from taskhub.services import tasks as task_service
from taskhub.services.access import Caller


router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=Page[TaskOut])
def list_tasks(
    page_request: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return task_service.list_tasks(db, caller, page_request)


@router.get("/filter", response_model=Page[TaskOut])
def filter_tasks(
    status: TaskStatus | None = None,
    priority: Priority | None = None,
    page_request: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return task_service.list_tasks(db, caller, page_request, status=status, priority=priority)


@router.get("/user/{user_id}", response_model=Page[TaskOut])
def list_user_tasks(
    user_id: int,
    page_request: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return task_service.list_user_tasks(db, caller, user_id, page_request)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return task_service.get_task(db, caller, task_id)


@router.post("", response_model=TaskOut, status_code=status.HTTP_201_CREATED)
def create_task(
    payload: TaskIn,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return task_service.create_task(db, caller, payload)


@router.put("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: int,
    payload: TaskIn,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return task_service.update_task(db, caller, task_id, payload)


@router.put("/{task_id}/status", response_model=TaskOut)
def update_task_status(
    task_id: int,
    payload: TaskStatusUpdate,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return task_service.update_task_status(db, caller, task_id, payload.status)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    task_service.delete_task(db, caller, task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
