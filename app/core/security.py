from datetime import timedelta

import bcrypt
import jwt

from app.core.auth_config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, get_secret_key
from app.core.exceptions import UnauthorizedError
from app.core.timeutils import utcnow


def hash_password(plain_password: str) -> str:
    hashed = bcrypt.hashpw(plain_password.encode("utf-8"), bcrypt.gensalt())
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))


def create_access_token(*, user_id: int, role: str, expires_minutes: int | None = None) -> str:
    """Issue a signed JWT whose subject is the user id."""
    now = utcnow()
    lifetime = expires_minutes if expires_minutes is not None else ACCESS_TOKEN_EXPIRE_MINUTES
    payload = {
        "sub": str(user_id),
        "role": role,
        "iat": now,
        "exp": now + timedelta(minutes=lifetime),
    }
    return jwt.encode(payload, get_secret_key(), algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> int:
    """Return the user id carried by a valid token."""
    try:
        payload = jwt.decode(token, get_secret_key(), algorithms=[JWT_ALGORITHM])
        return int(payload["sub"])
    except (jwt.PyJWTError, KeyError, ValueError):
        raise UnauthorizedError("Not authorized, token failed")
