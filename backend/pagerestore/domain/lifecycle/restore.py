from typing import Set

from pagerestore.restore.exceptions import IllegalRestoreTransition

NO_DRAFT = "no_draft"
PENDING = "draft_pending_decision"
APPLIED = "applied"
DISCARDED = "discarded"

RESTORE = "restore"
TEST = "test"
DELETE = "delete"
IGNORE = "ignore"

ACTIONS = (RESTORE, TEST, DELETE, IGNORE)

# Explicit allowed state transitions
ALLOWED_RESTORE_TRANSITIONS: dict[str, Set[str]] = {
    NO_DRAFT: {PENDING},
    PENDING: {APPLIED, DISCARDED, PENDING},
    APPLIED: set(),
    DISCARDED: set(),
}

ACTION_TARGETS = {
    RESTORE: APPLIED,
    TEST: APPLIED,
    DELETE: DISCARDED,
    IGNORE: PENDING,
}


def assert_restore_transition(*, from_state: str, to_state: str) -> None:
    """
    Guards restore workflow transitions.
    Single source of truth for state changes.
    """
    allowed = ALLOWED_RESTORE_TRANSITIONS.get(from_state, set())

    if to_state not in allowed:
        raise IllegalRestoreTransition(
            f"Illegal restore transition: {from_state} → {to_state}"
        )
