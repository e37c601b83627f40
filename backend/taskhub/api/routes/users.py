from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from taskhub.core.deps import require_caller, require_roles
from taskhub.db.models import Role
from taskhub.db.schemas import UserCreate, UserOut
from taskhub.db.session import get_db
from taskhub.services import users as user_service
from taskhub.services.access import Caller


router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserOut])
def list_users(
    db: Session = Depends(get_db),
    _: Caller = Depends(require_roles(Role.ADMIN)),
):
    return user_service.list_users(db)


@router.get("/me", response_model=UserOut)
def me(
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_caller),
):
    return user_service.get_current_user(db, caller)


@router.get("/{user_id}", response_model=UserOut)
def get_user(
    user_id: int,
    db: Session = Depends(get_db),
    _: Caller = Depends(require_roles(Role.ADMIN)),
):
    return user_service.get_user(db, user_id)


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    payload: UserCreate,
    db: Session = Depends(get_db),
    _: Caller = Depends(require_roles(Role.ADMIN)),
):
    return user_service.create_user(db, payload)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(
    user_id: int,
    db: Session = Depends(get_db),
    caller: Caller = Depends(require_roles(Role.ADMIN)),
):
    user_service.delete_user(db, caller, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
