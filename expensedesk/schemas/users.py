"""
User, department and mock session schemas.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field

from expensedesk.schemas.base import Role, User


class UserCreate(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    role: Role = "employee"
    department: str = "Engineering"


class UserUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[Role] = None
    department: Optional[str] = None


class DepartmentCreate(BaseModel):
    name: str
    supervisor_id: str


class DepartmentUpdate(BaseModel):
    name: Optional[str] = None
    supervisor_id: Optional[str] = None


class DepartmentSummary(BaseModel):
    id: str
    name: str
    supervisor_id: str
    supervisor_name: str = "None"
    employee_ids: list[str] = Field(default_factory=list)
    member_count: int = 0


class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    password: str = ""


class AuthResponse(BaseModel):
    user: User
    token: str
