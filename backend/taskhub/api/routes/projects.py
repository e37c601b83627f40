from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from taskhub.core.deps import page_params, require_caller
from taskhub.db.schemas import Page, ProjectIn, ProjectOut, TaskOut
from taskhub.db.session import get_db
from taskhub.db.store import PageRequest
from taskhub.services import projects as project_service
from taskhub.services import tasks as task_service
from taskhub.services.access import Caller


router = APIRouter(prefix="/projects", tags=["projects"])


@router.get("", response_model=list[ProjectOut])
def list_projects(
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return project_service.list_projects(db, caller)


@router.get("/{project_id}", response_model=ProjectOut)
def get_project(
    project_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return project_service.get_project(db, caller, project_id)


@router.post("", response_model=ProjectOut, status_code=status.HTTP_201_CREATED)
def create_project(
    payload: ProjectIn,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return project_service.create_project(db, caller, payload)


@router.put("/{project_id}", response_model=ProjectOut)
def update_project(
    project_id: int,
    payload: ProjectIn,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return project_service.update_project(db, caller, project_id, payload)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_project(
    project_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    project_service.delete_project(db, caller, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{project_id}/tasks", response_model=Page[TaskOut])
def list_project_tasks(
    project_id: int,
    page_request: PageRequest = Depends(page_params),
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return task_service.list_project_tasks(db, caller, project_id, page_request)
