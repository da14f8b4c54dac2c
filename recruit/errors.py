"""Error taxonomy for the shortlist pipeline and the JSON error handlers.

Only ``ConfigurationError``, ``BatchInProgressError`` and ``ValidationFailed``
reach the HTTP layer. Per-candidate errors are collected into the batch
summary instead of being raised to the caller.
"""
from flask import jsonify
from werkzeug.exceptions import HTTPException


class ShortlistError(Exception):
    status_code = 500

    def __init__(self, message=None, candidate_id=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__
        self.candidate_id = candidate_id

    def to_dict(self):
        return {"error": self.message}


class ConfigurationError(ShortlistError):
    status_code = 500


class EligibilityError(ShortlistError):
    """Candidate lacks a completed stage. Counted as skipped, never reported."""


class EvaluationError(ShortlistError):
    pass


class PersistenceError(ShortlistError):
    pass


class BatchInProgressError(ShortlistError):
    status_code = 409


class ValidationFailed(ShortlistError):
    status_code = 400

    def __init__(self, errors):
        super().__init__("Validation error")
        self.errors = errors

    def to_dict(self):
        details = []
        for field, messages in (self.errors or {}).items():
            for m in messages:
                details.append(f"{field}: {m}")
        return {"error": self.message, "details": details}


def register_error_handlers(app):
    @app.errorhandler(ShortlistError)
    def _shortlist_error(e):
        if e.status_code >= 500:
            app.logger.error("%s: %s", type(e).__name__, e.message)
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(404)
    def _not_found(e):
        return jsonify({"error": "Route not found"}), 404

    @app.errorhandler(HTTPException)
    def _http_error(e):
        return jsonify({"error": e.description}), e.code

    @app.errorhandler(Exception)
    def _unexpected(e):
        app.logger.exception("Unhandled error")
        return jsonify({"error": "Internal server error"}), 500
