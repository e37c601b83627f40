import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskhub.core.errors import UserExistsError, ValidationError
from taskhub.core.security import hash_password, verify_password
from taskhub.db import store
from taskhub.db.models import Project, Role, Task, User
from taskhub.db.schemas import UserCreate
from taskhub.services.access import Action, Caller, ensure_allowed


logger = logging.getLogger(__name__)


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.id.asc()).all()


def get_user(db: Session, user_id: int) -> User:
    return store.get_or_raise(db, User, user_id)


def create_user(db: Session, payload: UserCreate) -> User:
    if store.exists_by_email(db, payload.email):
        raise UserExistsError(payload.email)

    user = User(
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise UserExistsError(payload.email) from exc
    db.refresh(user)
    logger.info("User %s created with role %s", user.id, user.role)
    return user


def register_user(db: Session, email: str, password: str) -> User:
    return create_user(db, UserCreate(email=email, password=password, role=Role.USER))


def authenticate(db: Session, email: str, password: str) -> User | None:
    user = store.find_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        return None
    return user


def delete_user(db: Session, caller: Caller, user_id: int) -> None:
    """Delete a user and detach every task assigned to them.

    Users that still own projects cannot be deleted; their projects would be
    left without an owner.
    """
    ensure_allowed(db, caller, Action.DELETE_USER, "Only administrators can delete users")
    user = store.get_or_raise(db, User, user_id)

    owned = db.query(Project.id).filter(Project.owner_id == user.id).count()
    if owned:
        raise ValidationError(
            f"User owns {owned} project(s); delete or reassign them before deleting the user",
            {"projects": str(owned)},
        )

    tasks = db.query(Task).filter(Task.assigned_user_id == user.id).all()
    for task in tasks:
        task.assigned_user_id = None
    db.flush()

    db.delete(user)
    db.commit()
    logger.info("User %s deleted by user %s (%d tasks unassigned)", user_id, caller.id, len(tasks))


def get_current_user(db: Session, caller: Caller | None) -> User | None:
    if caller is None:
        return None
    return store.get_or_raise(db, User, caller.id)


def is_admin(caller: Caller | None) -> bool:
    return caller is not None and caller.role == Role.ADMIN
