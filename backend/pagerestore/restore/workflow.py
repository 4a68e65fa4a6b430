from dataclasses import dataclass, field

from pagerestore.domain.lifecycle import restore as lifecycle
from .exceptions import IllegalRestoreTransition
from .staging import DraftStagingStore


def compute_changes(live: dict, draft: dict) -> list:
    """Keys whose live value is missing or differs from the draft value."""
    return [
        key
        for key, value in draft.items()
        if key not in live or str(live[key]) != str(value)
    ]


@dataclass
class RestoreResult:
    state: str
    action: str
    changes: list = field(default_factory=list)
    fields: dict = field(default_factory=dict)


class RestoreWorkflow:
    """Restore decision for one page and one editor."""

    def __init__(self, store: DraftStagingStore, page_id, user_id, allowed_fields=None):
        self.store = store
        self.allowed_fields = allowed_fields
        self.page_id = page_id
        self.user_id = user_id
        self.state = lifecycle.NO_DRAFT
        self.info = None

    def _move(self, to_state):
        lifecycle.assert_restore_transition(from_state=self.state, to_state=to_state)
        self.state = to_state

    def begin(self):
        """Look for a pending draft; returns its identity info or ``None``."""
        info = self.store.load(self.page_id, self.user_id, info_only=True)
        if info is None:
            return None
        self._move(lifecycle.PENDING)
        self.info = info
        return info

    def decide(self, action: str, live_fields: dict, persist=None) -> RestoreResult:
        """
        Apply ``action`` to ``live_fields``.

        ``restore`` mutates ``live_fields`` in place, hands them to
        ``persist`` and deletes the draft once that returns; if ``persist``
        raises, the draft stays pending. ``test`` only reports what restore
        would change.
        """
        if action not in lifecycle.ACTIONS:
            raise IllegalRestoreTransition(f"Unknown restore action: {action}")
        if self.state != lifecycle.PENDING:
            raise IllegalRestoreTransition(f"No pending draft to {action}")

        target = lifecycle.ACTION_TARGETS[action]

        if action == lifecycle.IGNORE:
            self._move(target)
            return RestoreResult(state=self.state, action=action)

        if action == lifecycle.DELETE:
            self.store.delete(self.page_id, self.user_id)
            self._move(target)
            return RestoreResult(state=self.state, action=action)

        draft = self.store.load(self.page_id, self.user_id)
        if draft is None:
            raise IllegalRestoreTransition("Draft is no longer available")
        if self.allowed_fields is not None:
            draft = {k: v for k, v in draft.items() if k in self.allowed_fields}

        changes = compute_changes(live_fields, draft)
        if action == lifecycle.RESTORE:
            for key in changes:
                live_fields[key] = draft[key]
            if persist is not None:
                persist(live_fields)
            self.store.delete(self.page_id, self.user_id)

        self._move(target)
        return RestoreResult(
            state=self.state,
            action=action,
            changes=changes,
            fields={key: draft[key] for key in changes},
        )
