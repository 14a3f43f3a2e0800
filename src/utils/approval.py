"""Approval state machine shared by teacher accounts, courses and reviews.

Every gated entity carries an ``ApprovalStatus``. Admins decide pending
entities into ``approved`` or ``rejected``; courses additionally have a
"resubmit for review" edge that moves an approved course back to
``pending`` when its owner edits it. Managers hold one ``ApprovalWorkflow``
per entity kind and route every status change through it.
"""

from enum import Enum
from typing import FrozenSet

from core.exceptions import ForbiddenError, InvalidStateError, InvalidStatusError


class ApprovalStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# Targets an admin may set, from any current status
DECISIONS: FrozenSet[ApprovalStatus] = frozenset(
    {ApprovalStatus.APPROVED, ApprovalStatus.REJECTED}
)

# Roles that need no admin decision at registration
AUTO_APPROVED_ROLES = frozenset({"admin", "student"})


def initial_status_for_role(role: str) -> ApprovalStatus:
    """Return the status a freshly registered user starts with."""
    if role in AUTO_APPROVED_ROLES:
        return ApprovalStatus.APPROVED
    return ApprovalStatus.PENDING


class ApprovalWorkflow:
    """Transition rules for one entity kind.

    Attributes:
        kind: Entity name used in messages and logs ("Teacher", "Course", ...).
        resubmittable: Whether ``approved -> pending`` is a legal edge.
    """

    def __init__(self, kind: str, resubmittable: bool = False):
        self.kind = kind
        self.resubmittable = resubmittable

    @staticmethod
    def parse_decision(status: str) -> ApprovalStatus:
        """Validate an admin decision value.

        Args:
            status: Raw status string from the request.

        Returns:
            The matching ApprovalStatus.

        Raises:
            InvalidStatusError: If status is not 'approved' or 'rejected'.
        """
        try:
            target = ApprovalStatus(status)
        except ValueError:
            raise InvalidStatusError(str(status))
        if target not in DECISIONS:
            raise InvalidStatusError(target.value)
        return target

    def check_decider(self, actor) -> None:
        """Raise ForbiddenError unless the actor is an admin."""
        if actor.role != "admin":
            raise ForbiddenError(f"Only admins can change {self.kind.lower()} status")

    def decide(self, actor, status: str) -> ApprovalStatus:
        """Compute the status resulting from an admin decision.

        Any current status may be decided, so an approved entity can be
        rejected later and a rejected one approved.

        Args:
            actor: The acting user.
            status: Requested target status.

        Returns:
            The new status.

        Raises:
            ForbiddenError: If the actor is not an admin.
            InvalidStatusError: If the target is not a decision value.
        """
        self.check_decider(actor)
        return self.parse_decision(status)

    def resubmit(self, current: str) -> ApprovalStatus:
        """Apply the "resubmit for review" edge after a content change.

        Approved entities fall back to pending; pending and rejected ones keep
        their status.

        Raises:
            InvalidStateError: If this kind cannot be resubmitted.
        """
        current = ApprovalStatus(current)
        if not self.resubmittable:
            raise InvalidStateError(f"{self.kind} cannot be resubmitted for review")
        if current == ApprovalStatus.APPROVED:
            return ApprovalStatus.PENDING
        return current


TEACHER_WORKFLOW = ApprovalWorkflow("Teacher")
COURSE_WORKFLOW = ApprovalWorkflow("Course", resubmittable=True)
REVIEW_WORKFLOW = ApprovalWorkflow("Review")
