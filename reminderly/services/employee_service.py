"""Employee directory CRUD."""
from __future__ import annotations

import logging
from typing import Sequence

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from reminderly.core.exceptions import EmployeeAlreadyExistsError, EmployeeNotFoundError
from reminderly.models.models import Employee
from reminderly.models.schemas import EmployeeCreate, EmployeeUpdate

logger = logging.getLogger(__name__)


class EmployeeService:
    def __init__(self, db: Session):
        self.db = db

    def list_employees(self, search: str | None = None) -> Sequence[Employee]:
        query = select(Employee).order_by(Employee.name)
        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(
                    Employee.name.ilike(pattern),
                    Employee.employee_id.ilike(pattern),
                    Employee.department.ilike(pattern),
                )
            )
        return self.db.scalars(query).all()

    def get_employee(self, employee_id: int) -> Employee:
        employee = self.db.get(Employee, employee_id)
        if employee is None:
            raise EmployeeNotFoundError(employee_id)
        return employee

    def _ensure_code_free(self, code: str, exclude_id: int | None = None) -> None:
        query = select(Employee.id).where(Employee.employee_id == code)
        if exclude_id is not None:
            query = query.where(Employee.id != exclude_id)
        if self.db.scalar(query) is not None:
            raise EmployeeAlreadyExistsError(code)

    def create_employee(self, data: EmployeeCreate) -> Employee:
        self._ensure_code_free(data.employee_id)
        employee = Employee(**data.model_dump())
        self.db.add(employee)
        self.db.commit()
        self.db.refresh(employee)
        logger.info("Created employee %s (%s)", employee.id, employee.employee_id)
        return employee

    def update_employee(self, employee_id: int, data: EmployeeUpdate) -> Employee:
        employee = self.get_employee(employee_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("employee_id") and changes["employee_id"] != employee.employee_id:
            self._ensure_code_free(changes["employee_id"], exclude_id=employee.id)
        for field, value in changes.items():
            if field in ("employee_id", "name") and value is None:
                continue
            setattr(employee, field, value)
        self.db.commit()
        self.db.refresh(employee)
        return employee

    def delete_employee(self, employee_id: int) -> None:
        employee = self.get_employee(employee_id)
        self.db.delete(employee)
        self.db.commit()
        logger.info("Deleted employee %s and their reminders", employee_id)
