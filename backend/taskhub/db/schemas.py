from datetime import date, datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from taskhub.db.models import Priority, Role, TaskStatus


T = TypeVar("T")


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    id: int
    email: str
    role: Role


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    role: Role = Role.USER


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    role: Role
    create_date: datetime
    update_date: datetime


class ProjectIn(BaseModel):
    name: str
    description: str | None = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Project name is required")
        return value


class ProjectOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str | None
    owner: UserOut
    create_date: datetime
    update_date: datetime


class TaskIn(BaseModel):
    title: str
    description: str | None = None
    status: TaskStatus
    due_date: date | None = None
    priority: Priority
    project_id: int
    assigned_user_id: int | None = None

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Task title is required")
        return value


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None
    status: TaskStatus
    due_date: date | None
    priority: Priority
    project: ProjectOut
    assigned_user: UserOut | None
    create_date: datetime
    update_date: datetime


class Page(BaseModel, Generic[T]):
    model_config = ConfigDict(from_attributes=True)

    content: list[T]
    page: int
    size: int
    total_elements: int
    total_pages: int
