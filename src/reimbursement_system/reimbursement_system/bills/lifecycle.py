"""Bill status state machine.

pending -> approved | rejected, and each decision can be revoked back to
pending. ``plan_transition`` is pure: it returns the planned transition or
the error describing why it is not allowed, and never raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.enums import BillStatus
from ..core.exceptions import InvalidTransitionError


class BillAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    REVOKE_APPROVAL = "revoke_approval"
    REVOKE_REJECTION = "revoke_rejection"


# action -> (required current status, resulting status)
TRANSITIONS: dict[BillAction, tuple[BillStatus, BillStatus]] = {
    BillAction.APPROVE: (BillStatus.PENDING, BillStatus.APPROVED),
    BillAction.REJECT: (BillStatus.PENDING, BillStatus.REJECTED),
    BillAction.REVOKE_APPROVAL: (BillStatus.APPROVED, BillStatus.PENDING),
    BillAction.REVOKE_REJECTION: (BillStatus.REJECTED, BillStatus.PENDING),
}


@dataclass(frozen=True)
class Transition:
    action: BillAction
    source: BillStatus
    target: BillStatus


@dataclass(frozen=True)
class TransitionResult:
    transition: Optional[Transition] = None
    error: Optional[InvalidTransitionError] = None

    @property
    def ok(self) -> bool:
        return self.transition is not None


def plan_transition(current: BillStatus, action: BillAction) -> TransitionResult:
    source, target = TRANSITIONS[BillAction(action)]
    if BillStatus(current) != source:
        return TransitionResult(error=InvalidTransitionError(BillAction(action).value, BillStatus(current)))
    return TransitionResult(transition=Transition(action=BillAction(action), source=source, target=target))


def allowed_actions(current: BillStatus) -> list[BillAction]:
    return [action for action, (source, _) in TRANSITIONS.items() if source == current]
