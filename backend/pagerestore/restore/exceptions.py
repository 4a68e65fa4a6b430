class DraftValidationError(Exception):
    """A staged draft failed re-validation. Only raised in debug mode."""

    def __init__(self, reason, *, page_id=None, user_id=None):
        super().__init__(reason)
        self.reason = reason
        self.page_id = page_id
        self.user_id = user_id


class IllegalRestoreTransition(ValueError):
    pass


class RestoreConflict(Exception):
    """Restored values clash with other content; the draft is kept."""

    def __init__(self, reason, *, fields=()):
        super().__init__(reason)
        self.reason = reason
        self.fields = list(fields)
