from pydantic import BaseModel, EmailStr, Field


class RegisterIn(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=1)


class LoginIn(BaseModel):
    name: str
    password: str


class UserOut(BaseModel):
    id: int
    full_name: str
    email: str


class SessionOut(BaseModel):
    token: str
    token_type: str = "bearer"
    user: UserOut
