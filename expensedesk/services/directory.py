"""
Users, departments and the mock session.

Department membership is read from each user's ``department`` field, so
moving a user between departments is a single user update.
"""
from __future__ import annotations

import logging
from typing import Optional

from expensedesk.errors import NotFound, PermissionDenied, ValidationError
from expensedesk.schemas import (
    AuthResponse,
    Department,
    DepartmentCreate,
    DepartmentSummary,
    DepartmentUpdate,
    RegisterRequest,
    User,
    UserCreate,
    UserUpdate,
)
from expensedesk.services.capabilities import can_manage_users, require
from expensedesk.store import EntityStore

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENT = "Engineering"


def _matches_term(user: User, term: str) -> bool:
    term = term.lower()
    return any(
        term in value.lower()
        for value in (user.full_name, user.email, user.role, user.department)
    )


class Directory:
    def __init__(
        self,
        store: EntityStore,
        mock_password: str = "password",
        mock_token: str = "mock-jwt-token",
    ):
        self.store = store
        self.mock_password = mock_password
        self.mock_token = mock_token

    # ── users ────────────────────────────────────────────────────────────
    def get_user(self, user_id: str) -> User:
        user = self.store.get_user(user_id)
        if user is None:
            raise NotFound("User", user_id)
        return user

    def search_users(self, term: str = "", department: str = "all") -> list[User]:
        users = self.store.get_users()
        if department not in ("", "all"):
            users = [u for u in users if u.department == department]
        if term.strip():
            users = [u for u in users if _matches_term(u, term.strip())]
        return users

    def _check_email_free(self, email: str, user_id: Optional[str] = None) -> None:
        existing = self.store.find_user_by_email(email)
        if existing and existing.id != user_id:
            raise ValidationError(f"Email already registered: {email}", fields=["email"])

    def add_user(self, actor: User, data: UserCreate) -> User:
        require(can_manage_users(actor), "Only supervisors can add users")
        missing = [f for f in ("first_name", "last_name", "email") if not getattr(data, f).strip()]
        if missing:
            raise ValidationError("Missing fields: " + ", ".join(missing), fields=missing)
        self._check_email_free(data.email)

        user = self.store.add_user(User(**data.model_dump()))
        logger.info("User %s added by %s", user.id, actor.id)
        return user

    def update_user(self, actor: User, user_id: str, changes: UserUpdate) -> User:
        require(can_manage_users(actor), "Only supervisors can edit users")
        user = self.get_user(user_id)
        fields = changes.model_dump(exclude_none=True)

        if "email" in fields:
            self._check_email_free(fields["email"], user_id)
        if fields.get("role") == "employee" and user.is_supervisor and self._supervised(user_id):
            raise ValidationError(
                "User supervises a department and must stay a supervisor", fields=["role"]
            )

        updated = self.store.update_user(user_id, **fields)
        logger.info("User %s updated by %s: %s", user_id, actor.id, sorted(fields))
        return updated

    def delete_user(self, actor: User, user_id: str) -> None:
        require(can_manage_users(actor), "Only supervisors can delete users")
        self.get_user(user_id)
        if user_id == actor.id:
            raise ValidationError("Users cannot delete themselves", fields=["id"])
        if self._supervised(user_id):
            raise ValidationError("User supervises a department", fields=["id"])
        if any(r.user_id == user_id for r in self.store.get_receipts()):
            raise ValidationError("User owns receipts", fields=["id"])

        self.store.delete_user(user_id)
        logger.info("User %s deleted by %s", user_id, actor.id)

    def _supervised(self, user_id: str) -> list[Department]:
        return [d for d in self.store.get_departments() if d.supervisor_id == user_id]

    # ── departments ──────────────────────────────────────────────────────
    def list_departments(self) -> list[DepartmentSummary]:
        out: list[DepartmentSummary] = []
        for dept in self.store.get_departments():
            supervisor = self.store.get_user(dept.supervisor_id)
            out.append(
                DepartmentSummary(
                    id=dept.id,
                    name=dept.name,
                    supervisor_id=dept.supervisor_id,
                    supervisor_name=supervisor.full_name if supervisor else "None",
                    employee_ids=dept.employee_ids,
                    member_count=len(dept.employee_ids),
                )
            )
        return out

    def add_department(self, actor: User, data: DepartmentCreate) -> Department:
        require(can_manage_users(actor), "Only supervisors can create departments")
        if not data.name.strip():
            raise ValidationError("Department name is required", fields=["name"])
        if self.store.find_department_by_name(data.name.strip()):
            raise ValidationError(f"Department exists: {data.name}", fields=["name"])
        supervisor = self._require_supervisor(data.supervisor_id)

        dept = self.store.add_department(
            Department(name=data.name.strip(), supervisor_id=supervisor.id)
        )
        logger.info("Department %s created by %s", dept.name, actor.id)
        return dept

    def update_department(
        self, actor: User, department_id: str, changes: DepartmentUpdate
    ) -> Department:
        require(can_manage_users(actor), "Only supervisors can edit departments")
        dept = self.store.get_department(department_id)
        if dept is None:
            raise NotFound("Department", department_id)

        fields = changes.model_dump(exclude_none=True)
        if "name" in fields:
            fields["name"] = fields["name"].strip()
            if not fields["name"]:
                raise ValidationError("Department name is required", fields=["name"])
            existing = self.store.find_department_by_name(fields["name"])
            if existing and existing.id != department_id:
                raise ValidationError(f"Department exists: {fields['name']}", fields=["name"])
        if "supervisor_id" in fields:
            self._require_supervisor(fields["supervisor_id"])

        if fields.get("name", dept.name) != dept.name:
            # membership follows the name
            for user in self.store.get_users():
                if user.department == dept.name:
                    self.store.update_user(user.id, department=fields["name"])
        updated = self.store.update_department(department_id, **fields)
        logger.info("Department %s updated by %s: %s", department_id, actor.id, sorted(fields))
        return updated

    def _require_supervisor(self, user_id: str) -> User:
        supervisor = self.store.get_user(user_id)
        if supervisor is None or not supervisor.is_supervisor:
            raise ValidationError(
                "supervisor_id must reference a supervisor", fields=["supervisor_id"]
            )
        return supervisor

    def members(self, department_id: str) -> list[User]:
        dept = self.store.get_department(department_id)
        if dept is None:
            raise NotFound("Department", department_id)
        return [u for u in self.store.get_users() if u.id in dept.employee_ids]

    # ── mock session ─────────────────────────────────────────────────────
    def login(self, email: str, password: str) -> AuthResponse:
        user = self.store.find_user_by_email(email)
        if user is None or password != self.mock_password:
            logger.warning("Failed login for %s", email)
            raise PermissionDenied("Invalid credentials")
        return AuthResponse(user=user, token=self.mock_token)

    def register(self, req: RegisterRequest) -> AuthResponse:
        missing = [
            f for f in ("first_name", "last_name", "email", "password")
            if not getattr(req, f).strip()
        ]
        if missing:
            raise ValidationError("Missing fields: " + ", ".join(missing), fields=missing)
        self._check_email_free(req.email)

        user = self.store.add_user(
            User(
                first_name=req.first_name.strip(),
                last_name=req.last_name.strip(),
                email=req.email.strip(),
                role="employee",
                department=DEFAULT_DEPARTMENT,
            )
        )
        logger.info("Registered user %s", user.id)
        return AuthResponse(user=user, token=self.mock_token)
