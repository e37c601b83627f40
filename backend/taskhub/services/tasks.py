import logging

from sqlalchemy.orm import Session

from taskhub.core.errors import ValidationError
from taskhub.db import store
from taskhub.db.models import Priority, Project, Role, Task, TaskStatus, User
from taskhub.db.schemas import TaskIn
from taskhub.db.store import PageRequest, PageResult
from taskhub.services.access import (
    Action,
    Caller,
    assigned_tasks_scope,
    ensure_allowed,
    visible_tasks,
)


logger = logging.getLogger(__name__)


def _resolve_assignee(db: Session, assigned_user_id: int | None) -> User | None:
    if assigned_user_id is None:
        return None
    user = store.get_or_raise(db, User, assigned_user_id)
    if user.role != Role.USER:
        raise ValidationError("Only users can be assigned to a task")
    return user


def get_task(db: Session, caller: Caller, task_id: int) -> Task:
    task = store.get_or_raise(db, Task, task_id)
    ensure_allowed(db, caller, Action.VIEW_TASK, "You don't have access to this task", task=task)
    return task


def list_tasks(
    db: Session,
    caller: Caller,
    page_request: PageRequest,
    status: TaskStatus | None = None,
    priority: Priority | None = None,
) -> PageResult:
    query = store.task_query(
        db,
        status=status.value if status else None,
        priority=priority.value if priority else None,
    )
    scoped = visible_tasks(db, caller, query)
    if scoped is None:
        return store.empty_page(page_request)
    return store.paginate(scoped, Task, page_request)


def list_project_tasks(db: Session, caller: Caller, project_id: int, page_request: PageRequest) -> PageResult:
    project = store.get_or_raise(db, Project, project_id)
    ensure_allowed(db, caller, Action.VIEW_PROJECT, "You don't have access to this project", project=project)
    query = db.query(Task).filter(Task.project_id == project.id)
    return store.paginate(query, Task, page_request)


def list_user_tasks(db: Session, caller: Caller, user_id: int, page_request: PageRequest) -> PageResult:
    user = store.get_or_raise(db, User, user_id)
    query = db.query(Task).filter(Task.assigned_user_id == user.id)
    scoped = assigned_tasks_scope(db, caller, user.id, query)
    if scoped is None:
        return store.empty_page(page_request)
    return store.paginate(scoped, Task, page_request)


def create_task(db: Session, caller: Caller, payload: TaskIn) -> Task:
    project = store.get_or_raise(db, Project, payload.project_id)
    ensure_allowed(
        db,
        caller,
        Action.CREATE_TASK,
        "You don't have permission to create tasks in this project",
        project=project,
    )
    assignee = _resolve_assignee(db, payload.assigned_user_id)

    task = Task(
        title=payload.title,
        description=payload.description,
        status=payload.status.value,
        due_date=payload.due_date,
        priority=payload.priority.value,
        project_id=project.id,
        assigned_user_id=assignee.id if assignee else None,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    logger.info("Task %s created in project %s by user %s", task.id, project.id, caller.id)
    return task


def update_task(db: Session, caller: Caller, task_id: int, payload: TaskIn) -> Task:
    task = store.get_or_raise(db, Task, task_id)

    if payload.project_id != task.project_id:
        raise ValidationError("Cannot change the project of an existing task")

    ensure_allowed(db, caller, Action.UPDATE_TASK, "You don't have permission to update this task", task=task)
    assignee = _resolve_assignee(db, payload.assigned_user_id)

    task.title = payload.title
    task.description = payload.description
    task.status = payload.status.value
    task.due_date = payload.due_date
    task.priority = payload.priority.value
    task.assigned_user_id = assignee.id if assignee else None
    db.commit()
    db.refresh(task)
    logger.info("Task %s updated by user %s", task.id, caller.id)
    return task


def update_task_status(db: Session, caller: Caller, task_id: int, status: TaskStatus) -> Task:
    task = store.get_or_raise(db, Task, task_id)
    ensure_allowed(
        db, caller, Action.UPDATE_TASK_STATUS, "You don't have permission to update this task", task=task
    )

    task.status = status.value
    db.commit()
    db.refresh(task)
    logger.info("Task %s moved to %s by user %s", task.id, task.status, caller.id)
    return task


def delete_task(db: Session, caller: Caller, task_id: int) -> None:
    task = store.get_or_raise(db, Task, task_id)
    ensure_allowed(db, caller, Action.DELETE_TASK, "Only project owners and admins can delete tasks", task=task)

    db.delete(task)
    db.commit()
    logger.info("Task %s deleted by user %s", task_id, caller.id)
