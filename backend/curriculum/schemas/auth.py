from typing import Literal
from pydantic import BaseModel
from curriculum.schemas.common import NonEmptyStr


Role = Literal["admin", "staff"]


class LoginIn(BaseModel):
    email: NonEmptyStr
    password: NonEmptyStr


class UserCreateIn(BaseModel):
    email: NonEmptyStr
    password: NonEmptyStr
    name: str | None = None
    role: Role = "staff"
