from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Department


class DepartmentRepository(Protocol):
    def list_all(self) -> Sequence[Department]:
        raise NotImplementedError

    def get_by_id(self, dept_id: int) -> Optional[Department]:
        raise NotImplementedError

    def get_by_name(self, dept_name: str) -> Optional[Department]:
        """Case-insensitive lookup."""

        raise NotImplementedError

    def create(self, *, dept_name: str) -> int:
        raise NotImplementedError

    def rename(self, *, dept_id: int, dept_name: str) -> None:
        raise NotImplementedError

    def count(self) -> int:
        raise NotImplementedError

    def delete_if_empty(self, dept_id: int) -> bool:
        """Delete only when no employee references the department."""

        raise NotImplementedError
