"""
Users, departments and mock session endpoints.

POST   /api/auth/login                    — mock login (shared demo password)
POST   /api/auth/register                 — register a new employee
GET    /api/me                            — the session user
GET    /api/users                         — search users
POST   /api/users                         — add a user (supervisor)
PATCH  /api/users/{id}                    — edit a user (supervisor)
DELETE /api/users/{id}                    — delete a user (supervisor)
GET    /api/departments                   — departments with supervisor names
POST   /api/departments                   — create a department (supervisor)
PATCH  /api/departments/{id}              — rename or change supervisor (supervisor)
GET    /api/departments/{id}/members      — department members
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends

from expensedesk.routers.deps import current_user, get_directory
from expensedesk.schemas import (
    AuthResponse,
    Department,
    DepartmentCreate,
    DepartmentSummary,
    DepartmentUpdate,
    LoginRequest,
    RegisterRequest,
    User,
    UserCreate,
    UserUpdate,
)
from expensedesk.services import Directory

logger = logging.getLogger(__name__)
router = APIRouter()


# ── POST /api/auth/login ─────────────────────────────────────────────────
@router.post("/auth/login", response_model=AuthResponse)
def login(req: LoginRequest, directory: Directory = Depends(get_directory)):
    return directory.login(req.email, req.password)


# ── POST /api/auth/register ──────────────────────────────────────────────
@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(req: RegisterRequest, directory: Directory = Depends(get_directory)):
    return directory.register(req)


# ── GET /api/me ──────────────────────────────────────────────────────────
@router.get("/me", response_model=User)
def me(user: User = Depends(current_user)):
    return user


# ── GET /api/users ───────────────────────────────────────────────────────
@router.get("/users", response_model=List[User])
def list_users(
    search: str = "",
    department: str = "all",
    user: User = Depends(current_user),
    directory: Directory = Depends(get_directory),
):
    return directory.search_users(search, department)


# ── POST /api/users ──────────────────────────────────────────────────────
@router.post("/users", response_model=User, status_code=201)
def create_user(
    req: UserCreate,
    user: User = Depends(current_user),
    directory: Directory = Depends(get_directory),
):
    return directory.add_user(user, req)


# ── PATCH /api/users/{user_id} ───────────────────────────────────────────
@router.patch("/users/{user_id}", response_model=User)
def update_user(
    user_id: str,
    req: UserUpdate,
    user: User = Depends(current_user),
    directory: Directory = Depends(get_directory),
):
    return directory.update_user(user, user_id, req)


# ── DELETE /api/users/{user_id} ──────────────────────────────────────────
@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    user: User = Depends(current_user),
    directory: Directory = Depends(get_directory),
):
    directory.delete_user(user, user_id)
    return {"message": "User deleted successfully", "user_id": user_id}


# ── GET /api/departments ─────────────────────────────────────────────────
@router.get("/departments", response_model=List[DepartmentSummary])
def list_departments(
    user: User = Depends(current_user),
    directory: Directory = Depends(get_directory),
):
    return directory.list_departments()


# ── POST /api/departments ────────────────────────────────────────────────
@router.post("/departments", response_model=Department, status_code=201)
def create_department(
    req: DepartmentCreate,
    user: User = Depends(current_user),
    directory: Directory = Depends(get_directory),
):
    return directory.add_department(user, req)


# ── PATCH /api/departments/{department_id} ───────────────────────────────
@router.patch("/departments/{department_id}", response_model=Department)
def update_department(
    department_id: str,
    req: DepartmentUpdate,
    user: User = Depends(current_user),
    directory: Directory = Depends(get_directory),
):
    return directory.update_department(user, department_id, req)


# ── GET /api/departments/{department_id}/members ─────────────────────────
@router.get("/departments/{department_id}/members", response_model=List[User])
def department_members(
    department_id: str,
    user: User = Depends(current_user),
    directory: Directory = Depends(get_directory),
):
    return directory.members(department_id)
