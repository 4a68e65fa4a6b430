from flask import jsonify
from pagerestore.restore.exceptions import DraftValidationError, IllegalRestoreTransition, RestoreConflict


def register_error_handlers(app):
    @app.errorhandler(DraftValidationError)
    def handle_draft_validation(error):
        # Only reachable with RESTORE_DEBUG; otherwise invalid drafts are deleted
        response = jsonify({
            "error": "DraftValidationError",
            "message": error.reason,
            "page_id": error.page_id
        })
        response.status_code = 409
        return response

    @app.errorhandler(RestoreConflict)
    def handle_restore_conflict(error):
        response = jsonify({
            "error": error.reason,
            "fields": error.fields
        })
        response.status_code = 409
        return response

    @app.errorhandler(IllegalRestoreTransition)
    def handle_illegal_transition(error):
        response = jsonify({
            "error": "IllegalRestoreTransition",
            "message": str(error)
        })
        response.status_code = 400
        return response
