import logging

from sqlalchemy.orm import Session

from taskhub.db import store
from taskhub.db.models import Project, Task
from taskhub.db.schemas import ProjectIn
from taskhub.services.access import (
    Action,
    Caller,
    ensure_allowed,
    has_project_access,
    is_project_owner,
    visible_projects,
)


logger = logging.getLogger(__name__)

__all__ = [
    "create_project",
    "delete_project",
    "get_project",
    "has_project_access",
    "is_project_owner",
    "list_projects",
    "update_project",
]


def list_projects(db: Session, caller: Caller) -> list[Project]:
    query = visible_projects(caller, db.query(Project))
    return query.order_by(Project.id.asc()).all()


def get_project(db: Session, caller: Caller, project_id: int) -> Project:
    project = store.get_or_raise(db, Project, project_id)
    ensure_allowed(db, caller, Action.VIEW_PROJECT, "You don't have access to this project", project=project)
    return project


def create_project(db: Session, caller: Caller, payload: ProjectIn) -> Project:
    ensure_allowed(db, caller, Action.CREATE_PROJECT, "You don't have permission to create projects")

    project = Project(
        name=payload.name,
        description=payload.description,
        owner_id=caller.id,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    logger.info("Project %s created by user %s", project.id, caller.id)
    return project


def update_project(db: Session, caller: Caller, project_id: int, payload: ProjectIn) -> Project:
    project = store.get_or_raise(db, Project, project_id)
    ensure_allowed(
        db, caller, Action.UPDATE_PROJECT, "You don't have permission to update this project", project=project
    )

    project.name = payload.name
    project.description = payload.description
    db.commit()
    db.refresh(project)
    logger.info("Project %s updated by user %s", project.id, caller.id)
    return project


def delete_project(db: Session, caller: Caller, project_id: int) -> None:
    project = store.get_or_raise(db, Project, project_id)
    ensure_allowed(
        db, caller, Action.DELETE_PROJECT, "You don't have permission to delete this project", project=project
    )

    tasks = db.query(Task).filter(Task.project_id == project.id).all()
    for task in tasks:
        db.delete(task)
    db.delete(project)
    db.commit()
    logger.info("Project %s deleted by user %s (%d tasks removed)", project_id, caller.id, len(tasks))
