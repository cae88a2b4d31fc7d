"""Error taxonomy shared by the store, the ledger and the HTTP layer.

Business-rule errors carry a user-facing message. ``PersistenceError`` hides
the storage failure behind a generic message; nothing was committed when it is
raised, so the caller may retry.
"""
from flask import jsonify


class HireGateError(Exception):
    status_code = 400
    code = "error"
    default_message = "Request failed"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.code, "message": self.message}


class ValidationError(HireGateError):
    status_code = 400
    code = "validation_error"
    default_message = "Invalid or missing input"


class NotFoundError(HireGateError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class InsufficientCreditsError(HireGateError):
    status_code = 402
    code = "insufficient_credits"
    default_message = "Insufficient credits"


class InvalidCodeError(HireGateError):
    status_code = 400
    code = "invalid_code"
    default_message = "Invalid code"


class AlreadyRedeemedError(HireGateError):
    status_code = 409
    code = "already_redeemed"
    default_message = "Code already used"


class PersistenceError(HireGateError):
    status_code = 503
    code = "persistence_error"
    default_message = "The operation could not be saved, please retry"


class ScoringUnavailable(Exception):
    """Raised inside the scoring client only; always resolved to a fallback report."""


def register_error_handlers(app):
    @app.errorhandler(HireGateError)
    def handle_hiregate_error(err):
        if isinstance(err, PersistenceError):
            app.logger.error('Persistence failure: %s', err.__cause__ or err)
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(404)
    def handle_404(err):
        return jsonify({"error": "not_found", "message": "Not found"}), 404

    @app.errorhandler(405)
    def handle_405(err):
        return jsonify({"error": "method_not_allowed", "message": "Method not allowed"}), 405

    @app.errorhandler(403)
    def handle_403(err):
        return jsonify({"error": "forbidden", "message": "Forbidden"}), 403
