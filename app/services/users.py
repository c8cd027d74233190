from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import InvalidInputError, UnauthorizedError
from app.core.security import hash_password, verify_password
from app.models.users import User, UserRole


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.scalar(select(User).where(User.email == email.lower()))


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def register_user(db: Session, *, name: str, email: str, password: str) -> User:
    if get_user_by_email(db, email) is not None:
        raise InvalidInputError("User already exists")

    user = User(
        name=name.strip(),
        email=email.lower(),
        password_hash=hash_password(password),
        role=UserRole.USER.value,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # A concurrent registration took the email after the lookup above
        db.rollback()
        raise InvalidInputError("User already exists")
    db.refresh(user)
    logger.info(f"Registered user {user.id}")
    return user


def authenticate_user(db: Session, *, email: str, password: str) -> User:
    user = get_user_by_email(db, email)
    if user is None or not verify_password(password, user.password_hash):
        raise UnauthorizedError("Invalid credentials")
    return user
