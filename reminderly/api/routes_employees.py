"""Employee directory routes."""
from fastapi import APIRouter, Query, status

from reminderly.api.dependencies import DbDep
from reminderly.models.schemas import EmployeeCreate, EmployeeOut, EmployeeUpdate
from reminderly.services.employee_service import EmployeeService

router = APIRouter(prefix="/employees", tags=["employees"])


@router.get("", response_model=list[EmployeeOut])
def list_employees(db: DbDep, search: str | None = Query(None, max_length=100)):
    return EmployeeService(db).list_employees(search)


@router.post("", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
def create_employee(data: EmployeeCreate, db: DbDep):
    return EmployeeService(db).create_employee(data)


@router.get("/{employee_id}", response_model=EmployeeOut)
def get_employee(employee_id: int, db: DbDep):
    return EmployeeService(db).get_employee(employee_id)


@router.patch("/{employee_id}", response_model=EmployeeOut)
def update_employee(employee_id: int, data: EmployeeUpdate, db: DbDep):
    return EmployeeService(db).update_employee(employee_id, data)


@router.delete("/{employee_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_employee(employee_id: int, db: DbDep) -> None:
    EmployeeService(db).delete_employee(employee_id)
