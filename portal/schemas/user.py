from typing import Literal

from pydantic import BaseModel, EmailStr, Field

Role = Literal["teacher", "student"]


class UserRead(BaseModel):
    id: str = Field(alias="_id")
    name: str
    email: EmailStr
    role: Role

    class Config:
        populate_by_name = True


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class LoginResponse(BaseModel):
    token: str
    user: UserRead


class MeResponse(BaseModel):
    user: UserRead
