from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from taskhub.core.errors import UnauthenticatedError
from taskhub.core.security import create_access_token
from taskhub.db.schemas import LoginRequest, RegisterRequest, TokenResponse, UserOut
from taskhub.db.session import get_db
from taskhub.services import users as user_service


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = user_service.authenticate(db, payload.email, payload.password)
    if user is None:
        raise UnauthenticatedError("Invalid username or password")

    token = create_access_token(subject=user.email)
    return TokenResponse(access_token=token, id=user.id, email=user.email, role=user.role)


@router.post("/register", response_model=UserOut)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    return user_service.register_user(db, payload.email, payload.password)
