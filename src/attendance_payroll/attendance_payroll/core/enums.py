from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role forwarded by the authenticating gateway."""

    ADMIN = "admin"
    EMPLOYEE = "employee"


class LeaveStatus(str, Enum):
    """One-way approval flow of a leave request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NextAction(str, Enum):
    """What the employee can do next for today's record."""

    CHECK_IN = "check-in"
    CHECK_OUT = "check-out"
    NONE = "none"

