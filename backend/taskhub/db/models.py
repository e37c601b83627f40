from datetime import datetime, timezone
from enum import Enum

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship


Base = declarative_base()


class Role(str, Enum):
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    USER = "USER"


class TaskStatus(str, Enum):
    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _in_values(column: str, enum_cls: type[Enum]) -> str:
    values = ", ".join(f"'{item.value}'" for item in enum_cls)
    return f"{column} IN ({values})"


class User(Base):
    __tablename__ = "Users"

    id = Column(Integer, primary_key=True)
    email = Column(String, nullable=False, unique=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False)
    create_date = Column(DateTime, nullable=False, default=_utcnow)
    update_date = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        CheckConstraint(_in_values("role", Role), name="ck_users_role"),
    )

    assigned_tasks = relationship("Task", back_populates="assigned_user")


class Project(Base):
    __tablename__ = "Projects"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    owner_id = Column(Integer, ForeignKey("Users.id", onupdate="CASCADE", ondelete="RESTRICT"), nullable=False)
    create_date = Column(DateTime, nullable=False, default=_utcnow)
    update_date = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    owner = relationship("User")
    tasks = relationship("Task", back_populates="project", cascade="all, delete-orphan")


class Task(Base):
    __tablename__ = "Tasks"

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    status = Column(String, nullable=False)
    due_date = Column(Date)
    priority = Column(String, nullable=False)
    project_id = Column(Integer, ForeignKey("Projects.id", onupdate="CASCADE", ondelete="CASCADE"), nullable=False)
    assigned_user_id = Column(Integer, ForeignKey("Users.id", onupdate="CASCADE", ondelete="SET NULL"))
    create_date = Column(DateTime, nullable=False, default=_utcnow)
    update_date = Column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        CheckConstraint(_in_values("status", TaskStatus), name="ck_tasks_status"),
        CheckConstraint(_in_values("priority", Priority), name="ck_tasks_priority"),
    )

    project = relationship("Project", back_populates="tasks")
    assigned_user = relationship("User", back_populates="assigned_tasks")
