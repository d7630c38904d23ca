"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import Depends, Header

from ..persistence import FieldRepository, get_repository


@dataclass(slots=True)
class CallerContext:
    """Tenant and employee identity forwarded by the authentication layer.

    Roles are not taken from the request; services read them from the employee row.
    """

    company_id: str
    employee_id: str


def repository_dependency() -> FieldRepository:
    return get_repository()


def caller_context(
    x_company_id: str = Header(..., description="Tenant the caller belongs to."),
    x_employee_id: str = Header(..., description="Authenticated employee id."),
) -> CallerContext:
    return CallerContext(company_id=x_company_id, employee_id=x_employee_id)


RepositoryDep = Depends(repository_dependency)
CallerDep = Depends(caller_context)
