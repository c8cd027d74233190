from pydantic import EmailStr, Field

from app.schemas.common import APIModel


class RegisterRequest(APIModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)


class LoginRequest(APIModel):
    email: EmailStr
    password: str = Field(min_length=1)


class UserOut(APIModel):
    id: int
    name: str
    email: str
    role: str


class UserSummary(APIModel):
    id: int
    name: str
    email: str


class AuthResponse(APIModel):
    success: bool = True
    token: str
    user: UserOut


class CurrentUserResponse(APIModel):
    success: bool = True
    user: UserOut
