"""
Application status workflow.

``ALLOWED_FROM`` is the one place that decides which statuses an operation
may start from. The engine consults it before touching the store and passes
the same set to the repository's conditional update, so a concurrent change
in between makes the update miss instead of overwriting it.
"""

from enum import Enum
from typing import FrozenSet

from jobboard.models.application import ApplicationStatus
from jobboard.utils.errors import ConflictError

S = ApplicationStatus


class Operation(str, Enum):
    REOPEN = "reopen"  # re-apply after withdrawal
    WITHDRAW = "withdraw"
    UPDATE_STATUS = "update_status"


WITHDRAWABLE = frozenset({S.PENDING, S.REVIEWED, S.SHORTLISTED, S.INTERVIEWED})

ALLOWED_FROM = {
    Operation.REOPEN: frozenset({S.WITHDRAWN}),
    Operation.WITHDRAW: WITHDRAWABLE,
    # Recruiters may revise any decision; a withdrawn application only comes back through re-apply
    Operation.UPDATE_STATUS: frozenset(s for s in S if s is not S.WITHDRAWN),
}

# Applicant-facing messages for status changes
STATUS_MESSAGES = {
    S.PENDING: "Your application is pending review",
    S.REVIEWED: "Your application has been reviewed",
    S.SHORTLISTED: "Congratulations! You have been shortlisted",
    S.INTERVIEWED: "You have been scheduled for an interview",
    S.OFFERED: "Congratulations! You have been offered the position",
    S.REJECTED: "Your application was not selected this time",
    S.WITHDRAWN: "Your application has been withdrawn",
}


def allowed_from(operation: Operation) -> FrozenSet[str]:
    """Status values (plain strings) an operation may start from."""
    return frozenset(s.value for s in ALLOWED_FROM[operation])


def is_allowed(operation: Operation, current) -> bool:
    return ApplicationStatus(current) in ALLOWED_FROM[operation]


def ensure_allowed(operation: Operation, current) -> None:
    """Raise ConflictError when ``operation`` cannot start from ``current``."""
    if is_allowed(operation, current):
        return

    status = ApplicationStatus(current)
    if operation is Operation.WITHDRAW:
        if status is S.WITHDRAWN:
            raise ConflictError("Application already withdrawn")
        raise ConflictError("Cannot withdraw application in current status")
    if operation is Operation.REOPEN:
        raise ConflictError("You have already applied for this job")
    raise ConflictError(f"Cannot update an application with status: {status.value}")


def status_message(status) -> str:
    return STATUS_MESSAGES[ApplicationStatus(status)]
