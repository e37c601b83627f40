"""Authorization and visibility rules for projects and tasks.

Every read and write path consults this module. ``PERMISSIONS`` holds the
whole role matrix; the helpers below only evaluate it. Nothing here mutates
state, and every id-based check raises ``NotFoundError`` before it looks at
permissions.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from sqlalchemy.orm import Query, Session

from taskhub.core.errors import AccessDeniedError
from taskhub.db import store
from taskhub.db.models import Project, Role, Task, User


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Caller:
    id: int
    email: str
    role: Role

    @classmethod
    def from_user(cls, user: User) -> "Caller":
        return cls(id=user.id, email=user.email, role=Role(user.role))


class Action(str, Enum):
    CREATE_PROJECT = "project:create"
    VIEW_PROJECT = "project:view"
    UPDATE_PROJECT = "project:update"
    DELETE_PROJECT = "project:delete"
    CREATE_TASK = "task:create"
    VIEW_TASK = "task:view"
    UPDATE_TASK = "task:update"
    UPDATE_TASK_STATUS = "task:update_status"
    DELETE_TASK = "task:delete"
    DELETE_USER = "user:delete"


class Rule(str, Enum):
    ALLOW = "allow"
    DENY = "deny"
    PROJECT_OWNER = "project_owner"
    ASSIGNEE = "assignee"


PERMISSIONS: dict[Action, dict[Role, Rule]] = {
    Action.CREATE_PROJECT: {Role.ADMIN: Rule.ALLOW, Role.MANAGER: Rule.ALLOW, Role.USER: Rule.DENY},
    Action.VIEW_PROJECT: {Role.ADMIN: Rule.ALLOW, Role.MANAGER: Rule.PROJECT_OWNER, Role.USER: Rule.ASSIGNEE},
    Action.UPDATE_PROJECT: {Role.ADMIN: Rule.ALLOW, Role.MANAGER: Rule.PROJECT_OWNER, Role.USER: Rule.DENY},
    Action.DELETE_PROJECT: {Role.ADMIN: Rule.ALLOW, Role.MANAGER: Rule.PROJECT_OWNER, Role.USER: Rule.DENY},
    Action.CREATE_TASK: {Role.ADMIN: Rule.ALLOW, Role.MANAGER: Rule.PROJECT_OWNER, Role.USER: Rule.DENY},
    Action.VIEW_TASK: {Role.ADMIN: Rule.ALLOW, Role.MANAGER: Rule.PROJECT_OWNER, Role.USER: Rule.ASSIGNEE},
    Action.UPDATE_TASK: {Role.ADMIN: Rule.ALLOW, Role.MANAGER: Rule.PROJECT_OWNER, Role.USER: Rule.ASSIGNEE},
    Action.UPDATE_TASK_STATUS: {
        Role.ADMIN: Rule.ALLOW,
        Role.MANAGER: Rule.PROJECT_OWNER,
        Role.USER: Rule.ASSIGNEE,
    },
    Action.DELETE_TASK: {Role.ADMIN: Rule.ALLOW, Role.MANAGER: Rule.PROJECT_OWNER, Role.USER: Rule.DENY},
    Action.DELETE_USER: {Role.ADMIN: Rule.ALLOW, Role.MANAGER: Rule.DENY, Role.USER: Rule.DENY},
}


def rule_for(caller: Caller | None, action: Action) -> Rule:
    if caller is None:
        return Rule.DENY
    return PERMISSIONS[action].get(caller.role, Rule.DENY)


def is_allowed(
    db: Session,
    caller: Caller | None,
    action: Action,
    *,
    project: Project | None = None,
    task: Task | None = None,
) -> bool:
    """Evaluate ``action`` for ``caller`` against a project and/or task.

    For task actions pass the task; its project is used for ownership. For
    project actions pass the project; ASSIGNEE then means "has at least one
    task assigned in this project".
    """
    rule = rule_for(caller, action)

    if rule == Rule.ALLOW:
        return True
    if rule == Rule.DENY:
        return False

    target_project = project if project is not None else (task.project if task is not None else None)

    if rule == Rule.PROJECT_OWNER:
        return target_project is not None and target_project.owner_id == caller.id

    if rule == Rule.ASSIGNEE:
        if task is not None:
            return task.assigned_user_id is not None and task.assigned_user_id == caller.id
        if target_project is not None:
            return store.has_assigned_task_in_project(db, caller.id, target_project.id)

    return False


def ensure_allowed(
    db: Session,
    caller: Caller | None,
    action: Action,
    message: str,
    *,
    project: Project | None = None,
    task: Task | None = None,
) -> None:
    if not is_allowed(db, caller, action, project=project, task=task):
        logger.warning(
            "Denied %s for caller=%s role=%s",
            action.value,
            caller.id if caller else None,
            caller.role.value if caller else None,
        )
        raise AccessDeniedError(message)


def is_project_owner(db: Session, caller: Caller | None, project_id: int) -> bool:
    project = store.get_or_raise(db, Project, project_id)
    return caller is not None and project.owner_id == caller.id


def has_project_access(db: Session, caller: Caller | None, project_id: int) -> bool:
    project = store.get_or_raise(db, Project, project_id)
    return is_allowed(db, caller, Action.VIEW_PROJECT, project=project)


def is_assigned_to_task(db: Session, caller: Caller | None, task_id: int) -> bool:
    task = store.get_or_raise(db, Task, task_id)
    return caller is not None and task.assigned_user_id is not None and task.assigned_user_id == caller.id


def has_task_access(db: Session, caller: Caller | None, task_id: int) -> bool:
    task = store.get_or_raise(db, Task, task_id)
    return is_allowed(db, caller, Action.VIEW_TASK, task=task)


def visible_projects(caller: Caller | None, query: Query) -> Query:
    if caller is not None and caller.role == Role.ADMIN:
        return query
    # USER never owns a project, so this yields an empty list for them.
    owner_id = caller.id if caller is not None else None
    return query.filter(Project.owner_id == owner_id)


def visible_tasks(db: Session, caller: Caller | None, query: Query) -> Query | None:
    """Restrict a task query to what ``caller`` may see.

    Returns ``None`` when the answer is known to be empty, so callers can
    return an empty page without issuing a query with an empty ``IN`` set.
    """
    if caller is None:
        return None

    if caller.role == Role.ADMIN:
        return query

    if caller.role == Role.MANAGER:
        project_ids = store.owned_project_ids(db, caller.id)
        if not project_ids:
            return None
        return query.filter(Task.project_id.in_(project_ids))

    if caller.role == Role.USER:
        return query.filter(Task.assigned_user_id == caller.id)

    return None


def assigned_tasks_scope(db: Session, caller: Caller | None, user_id: int, query: Query) -> Query | None:
    if caller is None:
        return None

    if caller.role == Role.USER and caller.id != user_id:
        raise AccessDeniedError("You can only view your own tasks")

    if caller.role == Role.MANAGER and caller.id != user_id:
        project_ids = store.owned_project_ids(db, caller.id)
        if not project_ids:
            return None
        return query.filter(Task.project_id.in_(project_ids))

    if caller.role in {Role.ADMIN, Role.MANAGER, Role.USER}:
        return query

    return None
