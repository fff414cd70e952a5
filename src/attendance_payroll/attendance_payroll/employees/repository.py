from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Read side of the employee directory used by the reconciliation core."""

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self) -> Sequence[Employee]:
        raise NotImplementedError

    def list_by_ids(self, employee_ids: Sequence[int]) -> Sequence[Employee]:
        raise NotImplementedError
