from pydantic import BaseModel
from typing import Optional


class LoginRequest(BaseModel):
    password: str


class LoginResponse(BaseModel):
    success: bool
    role: str


class SessionInfo(BaseModel):
    authenticated: bool
    role: Optional[str] = None
