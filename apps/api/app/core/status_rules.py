"""Status transition rules for appeals and claims."""

from app.db.enums import AppealStatus, ClaimStatus


class InvalidStatusError(ValueError):
    """Status value is not a member of the lifecycle."""

    def __init__(self, value: str):
        super().__init__(f"Invalid status: {value}")
        self.value = value


class InvalidStatusTransitionError(ValueError):
    """Transition is not allowed by the lifecycle table."""

    def __init__(self, old: str, new: str):
        super().__init__(f"Invalid status transition from {old} to {new}")
        self.old = old
        self.new = new


# draft -> submitted -> in_review -> won | lost
APPEAL_TRANSITIONS: dict[str, frozenset[str]] = {
    AppealStatus.DRAFT.value: frozenset({AppealStatus.SUBMITTED.value}),
    AppealStatus.SUBMITTED.value: frozenset({AppealStatus.IN_REVIEW.value}),
    AppealStatus.IN_REVIEW.value: frozenset({AppealStatus.WON.value, AppealStatus.LOST.value}),
    AppealStatus.WON.value: frozenset(),
    AppealStatus.LOST.value: frozenset(),
}

TERMINAL_APPEAL_STATUSES = frozenset(
    status for status, targets in APPEAL_TRANSITIONS.items() if not targets
)


def validate_appeal_transition(old: str, new: str, enforce: bool = True) -> bool:
    """
    Check an appeal status change.

    Returns True when the status actually changes, False for a no-op.

    Raises:
        InvalidStatusError: new is not a known appeal status
        InvalidStatusTransitionError: enforce is on and the move is not allowed
    """
    if not AppealStatus.has_value(new):
        raise InvalidStatusError(new)
    if old == new:
        return False
    if enforce and new not in APPEAL_TRANSITIONS.get(old, frozenset()):
        raise InvalidStatusTransitionError(old, new)
    return True


def validate_claim_status(value: str) -> str:
    if not ClaimStatus.has_value(value):
        raise InvalidStatusError(value)
    return value
