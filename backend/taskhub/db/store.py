"""Query helpers over the SQLAlchemy session.

Lookups raise ``NotFoundError`` instead of returning ``None`` so that callers
always check existence before they check permissions.
"""

import math
from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy.orm import Query, Session

from taskhub.core.errors import NotFoundError, ValidationError
from taskhub.db.models import Project, Task, User


ModelT = TypeVar("ModelT", User, Project, Task)

SORTABLE_FIELDS: dict[type, set[str]] = {
    User: {"id", "email", "role", "create_date", "update_date"},
    Project: {"id", "name", "create_date", "update_date"},
    Task: {"id", "title", "status", "priority", "due_date", "create_date", "update_date"},
}


@dataclass(frozen=True)
class PageRequest:
    page: int = 0
    size: int = 10
    sort: str = "id"
    direction: str = "asc"

    @classmethod
    def parse(cls, page: int, size: int, sort: str | None) -> "PageRequest":
        field, _, direction = (sort or "id").partition(",")
        direction = (direction or "asc").strip().lower()
        if direction not in {"asc", "desc"}:
            raise ValidationError("Invalid sort direction", {"sort": f"Unknown direction: {direction}"})
        return cls(page=page, size=size, sort=field.strip() or "id", direction=direction)


class PageResult:
    def __init__(self, content: list, page: int, size: int, total_elements: int) -> None:
        self.content = content
        self.page = page
        self.size = size
        self.total_elements = total_elements

    @property
    def total_pages(self) -> int:
        if self.size <= 0:
            return 0
        return math.ceil(self.total_elements / self.size)


def empty_page(page_request: PageRequest) -> PageResult:
    return PageResult(content=[], page=page_request.page, size=page_request.size, total_elements=0)


def paginate(query: Query, model: type[ModelT], page_request: PageRequest) -> PageResult:
    if page_request.sort not in SORTABLE_FIELDS[model]:
        raise ValidationError("Invalid sort field", {"sort": f"Cannot sort by: {page_request.sort}"})

    column = getattr(model, page_request.sort)
    order = column.desc() if page_request.direction == "desc" else column.asc()
    total = query.order_by(None).count()
    items = (
        query.order_by(order, model.id.asc())
        .offset(page_request.page * page_request.size)
        .limit(page_request.size)
        .all()
    )
    return PageResult(content=items, page=page_request.page, size=page_request.size, total_elements=total)


def get_or_raise(db: Session, model: type[ModelT], entity_id: int) -> ModelT:
    entity = db.get(model, entity_id)
    if entity is None:
        raise NotFoundError(model.__name__, "id", entity_id)
    return entity


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def exists_by_email(db: Session, email: str) -> bool:
    return db.query(User.id).filter(User.email == email).first() is not None


def owned_project_ids(db: Session, owner_id: int) -> list[int]:
    return [row.id for row in db.query(Project.id).filter(Project.owner_id == owner_id).all()]


def has_assigned_task_in_project(db: Session, user_id: int, project_id: int) -> bool:
    return (
        db.query(Task.id)
        .filter(Task.project_id == project_id, Task.assigned_user_id == user_id)
        .first()
        is not None
    )


def task_query(db: Session, status: str | None = None, priority: str | None = None) -> Query:
    query = db.query(Task)
    if status is not None:
        query = query.filter(Task.status == status)
    if priority is not None:
        query = query.filter(Task.priority == priority)
    return query
