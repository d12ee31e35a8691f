"""
Users and departments.
"""
from sqlalchemy import Column, String

from expensedesk.database import Base


class UserModel(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False, default="")
    email = Column(String, nullable=False, unique=True)
    role = Column(String, nullable=False, default="employee")  # employee, supervisor
    department = Column(String, nullable=False, default="", index=True)  # department name


class DepartmentModel(Base):
    """Membership is derived from UserModel.department, not stored here."""
    __tablename__ = "departments"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, unique=True)
    supervisor_id = Column(String, nullable=False)
