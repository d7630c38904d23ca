"""Caller lookups shared by the services; roles always come from the stored employee row."""

from __future__ import annotations

from ..config import settings
from ..errors import NotFoundError
from ..models.domain import Employee
from ..persistence.repository import FieldRepository


def require_employee(repository: FieldRepository, company_id: str, employee_id: str) -> Employee:
    company = repository.get_company(company_id)
    if company is None:
        raise NotFoundError(f"Company '{company_id}' not found")
    employee = repository.get_employee(company_id, employee_id)
    if employee is None or not employee.is_active:
        raise NotFoundError(f"Employee '{employee_id}' not found")
    return employee


def is_manager(employee: Employee) -> bool:
    return employee.role in settings.manager_roles
