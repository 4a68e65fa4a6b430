from contextlib import contextmanager
from flask import current_app
from pagerestore.extensions import db


@contextmanager
def transactional():
    """Commit on success, roll back and re-raise on any error."""
    try:
        yield
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Transaction rolled back")
        raise
