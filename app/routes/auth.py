from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.core.security import create_access_token
from app.database.db import get_db
from app.models.users import User
from app.routes.dependencies import get_current_user
from app.schemas.users import AuthResponse, CurrentUserResponse, LoginRequest, RegisterRequest, UserOut
from app.services.users import authenticate_user, register_user

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_response(user: User) -> AuthResponse:
    token = create_access_token(user_id=user.id, role=user.role)
    return AuthResponse(token=token, user=UserOut.model_validate(user))


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    user = register_user(db, name=payload.name, email=payload.email, password=payload.password)
    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = authenticate_user(db, email=payload.email, password=payload.password)
    return _auth_response(user)


@router.get("/me", response_model=CurrentUserResponse)
def me(current_user: User = Depends(get_current_user)):
    return CurrentUserResponse(user=UserOut.model_validate(current_user))
