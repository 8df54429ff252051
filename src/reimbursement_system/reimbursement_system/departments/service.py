from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.validators import require_text
from ..core.constants import NAME_MAX_LENGTH
from ..core.exceptions import NotFoundError, ValidationError
from ..users.access import require_admin
from ..users.model import Principal
from .model import Department
from .repository import DepartmentRepository

logger = logging.getLogger(__name__)


class DepartmentService:
    """Use case: manage departments (admin)."""

    def __init__(self, departments: DepartmentRepository):
        self._departments = departments

    def _get_or_raise(self, dept_id: int) -> Department:
        dept = self._departments.get_by_id(int(dept_id))
        if not dept:
            raise NotFoundError("department", dept_id)
        return dept

    def _clean_name(self, name: str, *, exclude_id: Optional[int] = None) -> str:
        name = require_text(name, "name", NAME_MAX_LENGTH)
        existing = self._departments.get_by_name(name)
        if existing and existing.dept_id != exclude_id:
            raise ValidationError("name has already been taken", {"name": "has already been taken"})
        return name

    def list_departments(self, principal: Optional[Principal]) -> Sequence[Department]:
        require_admin(principal)
        return self._departments.list_all()

    def get_department(self, principal: Optional[Principal], dept_id: int) -> Department:
        require_admin(principal)
        return self._get_or_raise(dept_id)

    def create_department(self, principal: Optional[Principal], *, name: str) -> Department:
        require_admin(principal)
        name = self._clean_name(name)
        dept_id = self._departments.create(dept_name=name)
        logger.info("department %s created by user %s", dept_id, principal.user_id)
        return self._get_or_raise(dept_id)

    def rename_department(self, principal: Optional[Principal], dept_id: int, *, name: str) -> Department:
        require_admin(principal)
        dept = self._get_or_raise(dept_id)
        name = self._clean_name(name, exclude_id=dept.dept_id)
        self._departments.rename(dept_id=dept.dept_id, dept_name=name)
        return self._get_or_raise(dept.dept_id)

    def delete_department(self, principal: Optional[Principal], dept_id: int) -> None:
        require_admin(principal)
        dept = self._get_or_raise(dept_id)
        if dept.employee_count == 0:
            if self._departments.delete_if_empty(dept.dept_id):
                logger.info("department %s deleted by user %s", dept.dept_id, principal.user_id)
                return
            # Deleted or repopulated since the read above.
            self._get_or_raise(dept.dept_id)
        raise ValidationError(
            "Cannot delete department with existing employees.",
            {"department": "has existing employees"},
        )
